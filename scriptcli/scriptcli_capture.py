"""
Capture of the text printed by scripts.

Every execution prints into a fresh `current` sink; when the execution ends,
successfully or not, that text is appended to the `cumulative` transcript.
"""
import io
from contextlib import contextmanager
from typing import Iterator, Optional


class OutputCapture:
    def __init__(self):
        self._cumulative = io.StringIO()
        self._current: Optional[io.StringIO] = None
        self._active = False
        self.executions = 0

    def begin_execution(self) -> io.StringIO:
        """Allocate a fresh `current` sink. The cumulative transcript is untouched."""
        self._current = io.StringIO()
        self._active = True
        return self._current

    def script_output_channel(self) -> Optional[io.StringIO]:
        return self._current

    def end_execution(self):
        """Merge the current execution's text into the transcript, once per execution."""
        if not self._active:
            return
        self._active = False
        self._cumulative.write(self._current.getvalue())
        self.executions += 1

    @contextmanager
    def execution(self) -> Iterator[io.StringIO]:
        channel = self.begin_execution()
        try:
            yield channel
        finally:
            self.end_execution()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def cumulative(self) -> str:
        return self._cumulative.getvalue()

    @property
    def current(self) -> Optional[str]:
        """Text of the latest execution; None before the first one begins."""
        if self._current is None:
            return None
        return self._current.getvalue()
