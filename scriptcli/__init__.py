from scriptcli.scriptcli_accumulator import LineKind, ScriptAccumulator
from scriptcli.scriptcli_capture import OutputCapture
from scriptcli.scriptcli_config import CLIConfig, load_config
from scriptcli.scriptcli_environment import Environment, OUTPUT_VARIABLE_NAME, STORE_VARIABLE_NAME
from scriptcli.scriptcli_errors import (
    EvaluationError, InputExhaustedError, ScriptCLIError, SessionError, UndefinedBindingError
)
from scriptcli.scriptcli_evaluator import ExecutionResult, PythonEvaluator, ScriptEvaluator
from scriptcli.scriptcli_session import ScriptCLI, SessionState

__all__ = [
    "CLIConfig",
    "Environment",
    "EvaluationError",
    "ExecutionResult",
    "InputExhaustedError",
    "LineKind",
    "OUTPUT_VARIABLE_NAME",
    "OutputCapture",
    "PythonEvaluator",
    "STORE_VARIABLE_NAME",
    "ScriptAccumulator",
    "ScriptCLI",
    "ScriptCLIError",
    "ScriptEvaluator",
    "SessionError",
    "SessionState",
    "UndefinedBindingError",
    "load_config",
]
