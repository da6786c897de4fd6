"""
Console configuration: defaults, an optional YAML file, then environment variables.

    # scriptcli.yaml
    end_of_script: "EOS;"
    exit: quit
    colors: false
    debug: true

Environment overrides: SCRIPTCLI_END_OF_SCRIPT, SCRIPTCLI_EXIT,
SCRIPTCLI_COLORS and SCRIPTCLI_DEBUG.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from scriptcli.scriptcli_accumulator import END_OF_SCRIPT_DEFAULT, EXIT_DEFAULT

ENV_PREFIX = "SCRIPTCLI_"

# config file key -> CLIConfig field
_FILE_KEYS = {
    "end_of_script": "end_of_script_token",
    "exit": "exit_token",
    "colors": "colors",
    "debug": "debug",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass
class CLIConfig:
    end_of_script_token: str = END_OF_SCRIPT_DEFAULT
    exit_token: str = EXIT_DEFAULT
    colors: bool = True
    debug: bool = False


def _parse_bool(key: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for '{key}': {raw!r}")


def _apply(values: Dict[str, Any], key: str, raw: Any):
    field_name = _FILE_KEYS.get(key)
    if field_name is None:
        raise ValueError(f"Unknown configuration key: {key!r}")
    if field_name in ("colors", "debug"):
        values[field_name] = _parse_bool(key, raw)
        return
    if not isinstance(raw, str):
        raise ValueError(f"Configuration key '{key}' must be a string, not {type(raw).__name__}")
    values[field_name] = raw


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> CLIConfig:
    """Build a CLIConfig from defaults, the YAML file at `path`, then `env` (default os.environ)."""
    values: Dict[str, Any] = {}

    if path is not None:
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Configuration file {path} is not valid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping, not {type(data).__name__}")
        for key, raw in data.items():
            _apply(values, str(key), raw)

    env = os.environ if env is None else env
    for key in _FILE_KEYS:
        name = ENV_PREFIX + key.upper()
        if name in env:
            _apply(values, key, env[name])

    return CLIConfig(**values)