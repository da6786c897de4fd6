"""
The boundary between the console and the code that actually runs scripts.

The console only needs `evaluate(code, environment)`, which returns the
script's value or raises EvaluationError. PythonEvaluator is the default
implementation; hosts may pass any object with the same method.
"""
import ast
import builtins
import textwrap
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Protocol, Tuple
from types import CodeType

from scriptcli.scriptcli_environment import Environment
from scriptcli.scriptcli_errors import EvaluationError, source_context

RETURN_HOOK_NAME = "__script_return__"


class ScriptEvaluator(Protocol):
    def evaluate(self, code: str, environment: Environment) -> Any:
        """Run `code` against `environment`. Raises EvaluationError on any failure."""
        ...


@dataclass
class ExecutionResult:
    """The structured result of one execution."""
    status: Literal['success', 'error']
    value: Any = None
    output: str = ""
    error: Optional[EvaluationError] = None

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        if self.error is None:
            return "Unknown error"
        return self.error.format()


class _ScriptReturn(BaseException):
    # Not an Exception subclass, so `except Exception` inside a script lets it through.
    def __init__(self, value: Any = None):
        super().__init__()
        self.value = value


class _ReturnRewriter(ast.NodeTransformer):
    """Rewrites script-level `return x` into `raise __script_return__(x)`."""

    def _leave_alone(self, node):
        return node

    visit_FunctionDef = _leave_alone
    visit_AsyncFunctionDef = _leave_alone
    visit_ClassDef = _leave_alone
    visit_Lambda = _leave_alone

    def visit_Return(self, node: ast.Return):
        value = node.value if node.value is not None else ast.Constant(value=None)
        call = ast.Call(func=ast.Name(id=RETURN_HOOK_NAME, ctx=ast.Load()), args=[value], keywords=[])
        return ast.copy_location(ast.Raise(exc=call, cause=None), node)


class PythonEvaluator:
    """Runs Python source against an Environment.

    The script's value is the argument of a script-level `return`, else the
    value of a trailing expression statement, else None. `print` writes to
    whatever output sink the environment holds at call time, unless an
    explicit `file` is given. Every execution runs in the environment's one
    persistent namespace, so functions defined by an earlier script keep
    working, and top-level assignments are written back to the bindings.

    There is no timeout or cancellation: a script that never finishes blocks
    the caller.
    """

    def __init__(self):
        self._counter = 0

    def evaluate(self, code: str, environment: Environment) -> Any:
        self._counter += 1
        filename = f"<script-{self._counter}>"
        body, last_expr = self._compile(code, filename)

        namespace = environment.namespace()
        # Functions capture __builtins__ when defined, so install it once.
        if "__builtins__" not in namespace:
            namespace["__builtins__"] = self._builtins_for(environment)
        namespace["__name__"] = "__script__"
        namespace[RETURN_HOOK_NAME] = _ScriptReturn
        try:
            exec(body, namespace)
            if last_expr is not None:
                return eval(last_expr, namespace)
            return None
        except _ScriptReturn as ret:
            return ret.value
        except Exception as e:
            raise self._runtime_error(e, code, filename) from e
        finally:
            environment.update_from_namespace(namespace)

    def _compile(self, code: str, filename: str) -> Tuple[CodeType, Optional[CodeType]]:
        try:
            tree = _ReturnRewriter().visit(ast.parse(code, filename=filename, mode="exec"))
            last_expr = None
            if tree.body and isinstance(tree.body[-1], ast.Expr):
                last = tree.body.pop()
                last_expr = compile(ast.Expression(last.value), filename, "eval")
            ast.fix_missing_locations(tree)
            body = compile(tree, filename, "exec")
        except SyntaxError as e:
            raise EvaluationError(e.msg, cause=e, source=code, line=e.lineno, col=e.offset) from e
        except ValueError as e:
            # Null bytes in the source on older interpreters
            raise EvaluationError(str(e), cause=e, source=code) from e
        return body, last_expr

    def _builtins_for(self, environment: Environment) -> Dict[str, Any]:
        table = dict(vars(builtins))

        def script_print(*args, **kwargs):
            # Resolved per call: the sink is rebound before every execution.
            if kwargs.get("file") is None:
                kwargs["file"] = environment.output
            builtins.print(*args, **kwargs)

        table["print"] = script_print
        return table

    def _runtime_error(self, exc: Exception, source: str, filename: str) -> EvaluationError:
        """Wraps a runtime failure, keeping only the frames below the evaluator."""
        te = traceback.TracebackException.from_exception(exc)
        lines = ["Traceback (most recent call last):"]
        line_no = None
        for frame in te.stack:
            if frame.filename == __file__:
                continue
            lines.append(f'  File "{frame.filename}", line {frame.lineno}, in {frame.name}')
            if frame.filename == filename:
                line_no = frame.lineno
                snippet = source_context(source, frame.lineno, radius=1)
                if snippet:
                    lines.append(textwrap.indent(snippet, "    "))
            elif frame.line:
                lines.append(f"    {frame.line}")
        lines.extend(part.rstrip("\n") for part in te.format_exception_only())
        message = str(exc) or type(exc).__name__
        return EvaluationError(message, cause=exc, source=source, line=line_no, trace="\n".join(lines))
