"""
Line reader that accumulates script text until a control command is seen.
"""
from enum import Enum
from typing import List, Optional, TextIO, Tuple

from scriptcli.scriptcli_errors import InputExhaustedError

END_OF_SCRIPT_DEFAULT = ";;"
EXIT_DEFAULT = "exit"


class LineKind(Enum):
    SCRIPT = "script"
    END_OF_SCRIPT = "end-of-script"
    EXIT = "exit"


def strip_line_terminator(raw: str) -> str:
    """Drop the trailing newline only; other whitespace is part of the line."""
    if raw.endswith("\r\n"):
        return raw[:-2]
    if raw.endswith("\n") or raw.endswith("\r"):
        return raw[:-1]
    return raw


class ScriptAccumulator:
    """Reads input one line at a time and buffers script lines.

    Control commands are matched by exact equality, end-of-script first, so a
    line equal to both tokens always ends the script.
    """

    def __init__(self, input_stream: Optional[TextIO],
                 end_of_script_token: str = END_OF_SCRIPT_DEFAULT,
                 exit_token: str = EXIT_DEFAULT):
        self.input_stream = input_stream
        self.end_of_script_token = end_of_script_token
        self.exit_token = exit_token
        self._lines: List[str] = []

    def read_line(self) -> str:
        stream = self.input_stream
        if stream is None:
            raise InputExhaustedError("No input stream to read from")
        try:
            raw = stream.readline()
        except ValueError as e:
            # readline on a closed file
            raise InputExhaustedError(str(e)) from e
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")
        if raw == "":
            raise InputExhaustedError("Input ended before the exit command")
        return strip_line_terminator(raw)

    def classify(self, line: str) -> LineKind:
        if line == self.end_of_script_token:
            return LineKind.END_OF_SCRIPT
        if line == self.exit_token:
            return LineKind.EXIT
        return LineKind.SCRIPT

    def next(self) -> Tuple[LineKind, str]:
        line = self.read_line()
        return self.classify(line), line

    def append(self, line: str):
        self._lines.append(line + "\n")

    def take(self) -> str:
        """Return the buffered script and reset the buffer."""
        code = "".join(self._lines)
        self._lines = []
        return code

    def discard(self) -> str:
        return self.take()

    @property
    def pending(self) -> str:
        return "".join(self._lines)

    def has_pending(self) -> bool:
        return bool(self._lines)
