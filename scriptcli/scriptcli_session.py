# scriptcli_session.py

import os
import sys
from enum import Enum
from typing import Any, Dict, Mapping, Optional, TextIO, Union

from scriptcli.scriptcli_accumulator import END_OF_SCRIPT_DEFAULT, EXIT_DEFAULT, LineKind, ScriptAccumulator
from scriptcli.scriptcli_capture import OutputCapture
from scriptcli.scriptcli_config import CLIConfig
from scriptcli.scriptcli_environment import Environment
from scriptcli.scriptcli_errors import EvaluationError, SessionError
from scriptcli.scriptcli_evaluator import ExecutionResult, PythonEvaluator, ScriptEvaluator
from scriptcli.scriptcli_printer import BANNER_STYLE, ERROR_STYLE, OUTPUT_STYLE, ConsoleWriter, render_banner


class SessionState(Enum):
    CREATED = "created"
    STARTING = "starting"
    AWAITING_LINE = "awaiting-line"
    EXECUTING = "executing"
    TERMINATED = "terminated"


class ScriptCLI:
    """A console which executes scripts until the user enters the exit command.

    Example:

        cli = ScriptCLI()
        cli.set_variable("my_service", MyService())
        cli.run()

    Lines are collected until the end-of-script command (default ";;"), then
    the collected script is executed against the bindings and its printed
    output and return value are reported. The exit command (default "exit")
    ends the session and drops any unfinished script.

    A session runs once. Scripts run synchronously with no timeout, so a
    script that never returns hangs the session.
    """

    def __init__(self,
                 environment: Union[Environment, Mapping[str, Any], None] = None,
                 input_stream: Optional[TextIO] = None,
                 output_stream: Optional[TextIO] = None,
                 end_of_script_token: str = END_OF_SCRIPT_DEFAULT,
                 exit_token: str = EXIT_DEFAULT,
                 evaluator: Optional[ScriptEvaluator] = None,
                 colors: bool = True,
                 debug: bool = False):
        if not isinstance(environment, Environment):
            environment = Environment(environment)
        self.environment = environment
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output_stream = output_stream if output_stream is not None else sys.stdout
        self.end_of_script_token = end_of_script_token
        self.exit_token = exit_token
        self.evaluator = evaluator if evaluator is not None else PythonEvaluator()
        self.colors = colors
        self.debug = debug

        self.capture = OutputCapture()
        self.state = SessionState.CREATED
        self.last_result: Any = None
        self.last_error: Optional[EvaluationError] = None
        self.last_execution: Optional[ExecutionResult] = None
        self._accumulator: Optional[ScriptAccumulator] = None
        self._out: Optional[ConsoleWriter] = None

    @classmethod
    def from_config(cls, config: CLIConfig, **kwargs) -> 'ScriptCLI':
        kwargs.setdefault("end_of_script_token", config.end_of_script_token)
        kwargs.setdefault("exit_token", config.exit_token)
        kwargs.setdefault("colors", config.colors)
        kwargs.setdefault("debug", config.debug)
        return cls(**kwargs)

    def _dbg(self, *parts):
        if self.debug or os.environ.get("SCRIPTCLI_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    # ===================================================================
    # Console loop
    # ===================================================================

    def run(self):
        """Read and execute scripts until the exit command.

        Raises InputExhaustedError if the input ends first. Any error other
        than a failing script ends the session and propagates.
        """
        if self.state is not SessionState.CREATED:
            raise SessionError(f"Session cannot be started again (state: {self.state.value}); create a new ScriptCLI")
        self.state = SessionState.STARTING
        out = ConsoleWriter(self.output_stream, colors=self.colors)
        self._out = out
        accumulator = ScriptAccumulator(self.input_stream, self.end_of_script_token, self.exit_token)
        self._accumulator = accumulator
        try:
            out.block(render_banner(self.end_of_script_token, self.exit_token, self.environment.variables()),
                      style=BANNER_STYLE)
            out.line()
            self.state = SessionState.AWAITING_LINE
            while self.state is not SessionState.TERMINATED:
                kind, line = accumulator.next()
                if kind is LineKind.END_OF_SCRIPT:
                    self._run_pending(out, accumulator.take())
                elif kind is LineKind.EXIT:
                    dropped = accumulator.discard()
                    if dropped:
                        self._dbg("Discarding unfinished script:\n" + dropped)
                    out.line("Bye!")
                    self.state = SessionState.TERMINATED
                else:
                    accumulator.append(line)
        except BaseException:
            self.state = SessionState.TERMINATED
            raise
        finally:
            out.flush()

    def _run_pending(self, out: ConsoleWriter, code: str):
        out.line("Executing script...")
        result = self.execute(code)
        if result.status == 'success':
            out.line("Script output:")
            out.line(result.output.strip(), style=OUTPUT_STYLE)
            out.line("Script returned:")
            out.line(str(result.value), style=OUTPUT_STYLE)
        else:
            out.line("Exception while executing script:")
            out.block(result.format_error(), style=ERROR_STYLE)
        out.line("--------------")
        out.line("Write another script:")

    def execute(self, code: str) -> ExecutionResult:
        """Execute one script against the environment and record its outcome.

        Output printed by the script is captured for this execution and merged
        into the cumulative transcript even when the script fails.
        """
        if self.state is SessionState.TERMINATED:
            raise SessionError("Session has terminated; create a new ScriptCLI")
        self._dbg("About to execute script:\n" + code)
        previous = self.state
        self.state = SessionState.EXECUTING
        try:
            with self.capture.execution() as channel:
                self.environment.bind_output(channel)
                try:
                    value = self.evaluator.evaluate(code, self.environment)
                except EvaluationError as e:
                    result = ExecutionResult(status='error', error=e)
                else:
                    result = ExecutionResult(status='success', value=value)
        finally:
            self.state = previous
        result.output = self.capture.current or ""

        if result.status == 'success':
            self.last_result = result.value
            self.last_error = None
        else:
            self.last_error = result.error
            self._dbg("Script failed:", result.error.kind, result.error.message)
        self.last_execution = result
        return result

    # ===================================================================
    # Colors
    # ===================================================================

    def enable_colors(self):
        self._set_colors(True)

    def disable_colors(self):
        self._set_colors(False)

    def _set_colors(self, colors: bool):
        self.colors = colors
        # Takes effect from the next line written by a running session.
        if self._out is not None:
            self._out.colors = colors

    # ===================================================================
    # Observable state
    # ===================================================================

    @property
    def cumulative_output(self) -> str:
        return self.capture.cumulative

    @property
    def current_output(self) -> Optional[str]:
        return self.capture.current

    @property
    def store(self) -> Dict[Any, Any]:
        return self.environment.store

    @property
    def pending_script(self) -> str:
        return self._accumulator.pending if self._accumulator is not None else ""

    # ===================================================================
    # Delegated to the environment
    # ===================================================================

    def set_variable(self, name: str, value: Any):
        self.environment.set_variable(name, value)

    def get_variable(self, name: str) -> Any:
        return self.environment.get_variable(name)

    def has_variable(self, name: str) -> bool:
        return self.environment.has_variable(name)

    def remove_variable(self, name: str):
        self.environment.remove_variable(name)

    def variables(self) -> Dict[str, Any]:
        return self.environment.variables()
