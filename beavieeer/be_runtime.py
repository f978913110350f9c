"""
Driver-facing entry points: one-shot program runs and persistent sessions.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from beavieeer.be_datatypes import BeObject, Environment, Error, NULL
from beavieeer.be_host import Host
from beavieeer.be_interpreter import Evaluator
from beavieeer.be_parser import Diagnostic, parse_program

logger = logging.getLogger(__name__)


def run_program(source: str, host: Optional[Host] = None) -> Tuple[BeObject, List[Diagnostic]]:
    """Runs a whole program against a fresh global environment.

    When the source has syntax errors nothing is evaluated: the result is
    `NULL` together with every diagnostic.
    """
    program, diagnostics = parse_program(source)
    if diagnostics:
        return NULL, diagnostics
    return Evaluator(host=host).eval(program, Environment()), []


def eval_in_session(source: str, environment: Environment, host: Optional[Host] = None) -> BeObject:
    """Evaluates one input against a caller-owned environment, so bindings persist.

    Syntax errors are reported as a single `Error` listing every diagnostic.
    """
    program, diagnostics = parse_program(source)
    if diagnostics:
        return Error("\n".join(f"syntax error at {d}" for d in diagnostics))
    return Evaluator(host=host).eval(program, environment)


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[BeObject] = None
    error_message: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Parses and executes Beavieeer code, keeping one environment across runs.

    The REPL holds a single runner for the whole session; a script run
    creates a fresh one.
    """

    def __init__(self, host: Optional[Host] = None, environment: Optional[Environment] = None):
        self.host = host if host is not None else Host()
        self.side_effects = self.host.side_effects
        self.environment = environment if environment is not None else Environment()
        self.evaluator = Evaluator(host=self.host)
        self.source_dir: Optional[str] = None  # directory of the current source file, if known

    def _format_parse_errors(self, diagnostics: List[Diagnostic], source: str) -> str:
        parts = []
        for d in diagnostics:
            parts.append(f"SyntaxError: {d.message} (line {d.line}, col {d.col})")
            context = self._source_context(source, d.line, d.col)
            if context:
                parts.append(context)
        return "\n".join(parts)

    def _source_context(self, source: str, line: int, col: Optional[int], radius: int = 1) -> str:
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

    def _error_result(self, message: str, diagnostics: Optional[List[Diagnostic]] = None) -> ExecutionResult:
        self.side_effects.append({'topics': ['stderr'], 'message': message})
        return ExecutionResult(
            status='error',
            error_message=message,
            diagnostics=list(diagnostics or []),
            side_effects=list(self.side_effects),
        )

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script or one REPL input."""
        self.side_effects.clear()
        if self.source_dir is not None:
            self.host.base_dir = self.source_dir

        # 1. Parse
        try:
            program, diagnostics = parse_program(source_code)
        except RecursionError:
            # Expressions nested thousands deep exhaust the parser's stack.
            return self._error_result("RecursionError: expression is nested too deeply to parse")
        if diagnostics:
            logger.debug("not evaluating: %d syntax errors", len(diagnostics))
            return self._error_result(self._format_parse_errors(diagnostics, source_code), diagnostics)

        # 2. Evaluate
        try:
            result = self.evaluator.eval(program, self.environment)
        except RecursionError:
            # Unbounded recursion in the script exhausts the host stack.
            return self._error_result("RecursionError: maximum recursion depth exceeded")

        if isinstance(result, Error):
            return self._error_result(f"Error: {result.message}")

        return ExecutionResult(
            status='success',
            value=result,
            side_effects=list(self.side_effects),
        )
