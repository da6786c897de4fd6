"""
Exception types raised by the scriptcli console.

Only EvaluationError is recovered inside the console loop; every other
error propagates to the embedding application.
"""
from typing import Optional


class ScriptCLIError(Exception):
    """Base class for all console errors."""
    pass


class UndefinedBindingError(ScriptCLIError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No binding named '{self.name}'"


class InputExhaustedError(ScriptCLIError, EOFError):
    """The input source closed before the exit command was read."""
    pass


class SessionError(ScriptCLIError):
    """A console session was used outside of its lifecycle."""
    pass


def source_context(source: str, line: Optional[int], col: Optional[int] = None, radius: int = 2) -> str:
    """Renders a window of source lines around `line`, marking it with '>' and a caret at `col`."""
    lines = source.splitlines()
    if not line or line < 1 or line > len(lines):
        return ""
    start = max(1, line - radius)
    end = min(len(lines), line + radius)
    width = len(str(end))
    out = []
    for i in range(start, end + 1):
        prefix = ">" if i == line else " "
        ln = str(i).rjust(width)
        out.append(f"{prefix} {ln} | {lines[i - 1]}")
        if i == line and col is not None:
            caret = " " * max(col - 1, 0)
            out.append(f"  {' ' * width} | {caret}^")
    return "\n".join(out)


class EvaluationError(ScriptCLIError):
    """A script failed to compile or raised while running.

    `cause` is the original exception. `line`/`col` locate the failure in
    `source` when known, and `trace` holds a rendered traceback restricted to
    script frames (runtime failures only).
    """

    def __init__(self, message: str, *, cause: Optional[BaseException] = None,
                 source: str = "", line: Optional[int] = None, col: Optional[int] = None,
                 trace: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.source = source
        self.line = line
        self.col = col
        self.trace = trace

    @property
    def kind(self) -> str:
        return type(self.cause).__name__ if self.cause is not None else "EvaluationError"

    def format(self) -> str:
        """Formats the error for display, with location and traceback when available."""
        if self.trace:
            return self.trace.rstrip("\n")
        msg = f"{self.kind}: {self.message}"
        if self.line is not None:
            col_info = f", col {self.col}" if self.col is not None else ""
            msg = f"Error on line {self.line}{col_info}: {msg}"
            context = source_context(self.source, self.line, self.col)
            if context:
                msg = f"{msg}\n{context}"
        return msg
