"""
Console presentation: the startup banner, binding descriptors and colored output.
"""
import types
from typing import Any, Mapping, Optional, TextIO

import pystache
from rich.console import Console

BANNER_STYLE = "blue"
OUTPUT_STYLE = "blue"
ERROR_STYLE = "red"

BANNER_TEMPLATE = """\
--- Python script CLI ---
Write a Python script, which you want to execute.
After you are done, write the command for "end of script" and the script will be executed.
If you want to exit the CLI, write the command for "exit".

Special commands:
end of script - {{end_of_script}}
exit - {{exit}}

Bindings (variable name - object class):
{{#bindings}}
{{name}} - {{descriptor}}
{{/bindings}}
"""


def _qualified_name(cls: type) -> str:
    module = getattr(cls, "__module__", None)
    name = getattr(cls, "__qualname__", cls.__name__)
    if module in (None, "builtins"):
        return name
    return f"{module}.{name}"


def describe(value: Any) -> str:
    """A short, human readable descriptor of a binding's type."""
    match value:
        case None:
            return "None"
        case types.ModuleType():
            return f"module {value.__name__}"
        case type():
            return f"class {_qualified_name(value)}"
        case types.FunctionType() | types.BuiltinFunctionType() | types.MethodType():
            return f"function {getattr(value, '__qualname__', value.__name__)}"
        case _:
            return _qualified_name(type(value))


def render_banner(end_of_script: str, exit: str, bindings: Mapping[str, Any]) -> str:
    context = {
        "end_of_script": end_of_script,
        "exit": exit,
        "bindings": [{"name": name, "descriptor": describe(value)} for name, value in bindings.items()],
    }
    renderer = pystache.Renderer(escape=lambda u: u)
    return renderer.render(BANNER_TEMPLATE, context)


class ConsoleWriter:
    """Writes console status lines to a text stream, optionally styled.

    Styling only changes how text looks; with colors disabled the text is
    written unchanged.
    """

    def __init__(self, stream: TextIO, colors: bool = True):
        self.stream = stream
        self.colors = colors
        self._console = Console(
            file=stream,
            force_terminal=True,
            color_system="standard",
            no_color=False,
            highlight=False,
            markup=False,
            emoji=False,
            soft_wrap=True,
        )

    def line(self, text: str = "", style: Optional[str] = None):
        if self.colors and style:
            self._console.print(text, style=style)
        else:
            self.stream.write(f"{text}\n")

    def block(self, text: str, style: Optional[str] = None):
        """Write multi-line text without adding a blank line after it."""
        self.line(text.rstrip("\n"), style=style)

    def flush(self):
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()
