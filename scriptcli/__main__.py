import sys
from pathlib import Path

from scriptcli.scriptcli_config import load_config
from scriptcli.scriptcli_errors import InputExhaustedError
from scriptcli.scriptcli_session import ScriptCLI

USAGE = "usage: python -m scriptcli [--config FILE] [SCRIPT]"


def run_script_file(file_path: str, config):
    """Run a script file non-interactively and exit with appropriate status."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    cli = ScriptCLI.from_config(config)
    result = cli.execute(source)
    # Captured script output first, then the outcome
    if result.output:
        sys.stdout.write(result.output)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    if result.value is not None:
        print(result.value)


def main(argv=None):
    """Run a script file when provided, otherwise start the interactive console."""
    args = list(sys.argv[1:] if argv is None else argv)
    config_path = None
    if args and args[0] == "--config":
        if len(args) < 2:
            print(USAGE, file=sys.stderr)
            raise SystemExit(2)
        config_path = args[1]
        args = args[2:]

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args:
        # Treat the first argument as a script file when it's not a flag
        if args[0].startswith("-"):
            print(USAGE, file=sys.stderr)
            raise SystemExit(2)
        run_script_file(args[0], config)
        return

    cli = ScriptCLI.from_config(config)
    try:
        cli.run()
    except InputExhaustedError:
        print("\nExiting.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
