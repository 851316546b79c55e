"""Script runtime shared by every script-bearing block of one render.

Scripts are Python, compiled with RestrictedPython and executed against a
restricted builtins table. One runtime lives for one render and is
mutated in source order:

- Script blocks run against the persistent scope; what they bind stays
  visible to later blocks and inline expressions.
- The globals unit holds only the function definitions of the latest
  ScriptGlobals block. They are bound into the scope once, when the unit
  is added; the globals block's other statements never execute. A later
  script that rebinds one of those names keeps its own binding.
- Table and chart generators run in a deep copy of the scope. Functions
  are rebound to the copy, so nothing they bind or mutate leaks back.
- Datasets are bound as tuples of read-only mappings; rebinding or
  deleting one is a runtime error.

Debug correlation:
    ``debug(*values)`` records ``(line, message)`` for the innermost frame
    executing the current block's code, so calls made from helper
    functions are attributed to the calling line of the block. After the
    block ran, every source line is followed by its messages rendered as
    ``# > `` comment lines. Comment lines from a previous render are
    stripped before compiling, which keeps re-rendering idempotent.

Example:
    >>> runtime = ScriptRuntime()
    >>> [line.render() for line in runtime.run_block("x = 1 + 1\\ndebug(x)\\n")]
    ['x = 1 + 1', 'debug(x)', '# > 2']
    >>> runtime.eval_inline("x * 10")
    '20'
"""

from __future__ import annotations

import ast
import copy
import keyword
import sys
from collections import defaultdict
from dataclasses import dataclass
from itertools import count
from types import CodeType, FunctionType, MappingProxyType
from typing import TYPE_CHECKING, Any

from RestrictedPython import compile_restricted_eval, compile_restricted_exec

from yamdr.charts import Series
from yamdr.errors import ScriptError
from yamdr.script.builtins import SAFE_BUILTINS
from yamdr.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from yamdr.script.dataset import Dataset

logger = get_logger(__name__)

OUTPUT_PREFIX = "# > "
OUTPUT_MARKER = "# >"


def is_output_line(line: str) -> bool:
    """Return True for a debug-output comment line."""
    return line.lstrip().startswith(OUTPUT_MARKER)


def strip_output(source: str) -> list[str]:
    """Split source into lines, dropping debug-output comment lines."""
    return [line for line in source.splitlines() if not is_output_line(line)]


@dataclass(frozen=True, slots=True)
class ScriptLine:
    """One line of an executed script: source, or captured output."""

    text: str
    output: bool = False

    def render(self) -> str:
        return f"{OUTPUT_PREFIX}{self.text}" if self.output else self.text


def _describe(exc: BaseException) -> str:
    if isinstance(exc, SyntaxError):
        return f"{exc.msg} (line {exc.lineno})"
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def _compile_restricted(source: str | ast.Module, filename: str, mode: str = "exec") -> CodeType:
    compiler = compile_restricted_eval if mode == "eval" else compile_restricted_exec
    result = compiler(source, filename=filename)
    if result.errors:
        raise ScriptError(f"compilation error: {'; '.join(result.errors)}")
    for warning in result.warnings:
        logger.debug("%s: %s", filename, warning)
    return result.code


class ScriptRuntime:
    """Persistent scope, globals unit and datasets of one render.

    Thread Safety:
        Not thread-safe. One instance belongs to one render.
    """

    __slots__ = (
        "_scope",
        "_global_functions",
        "_datasets",
        "_log",
        "_filename",
        "_units",
    )

    def __init__(self) -> None:
        self._scope: dict[str, Any] = {
            "__builtins__": dict(SAFE_BUILTINS),
            "__name__": "__script__",
            "debug": self._debug,
        }
        self._global_functions: dict[str, FunctionType] = {}
        self._datasets: dict[str, tuple[Mapping[str, str], ...]] = {}
        self._log: list[tuple[int, str]] = []
        self._filename: str | None = None
        self._units = count(1)

    @property
    def variables(self) -> Mapping[str, Any]:
        """Read-only view of the persistent scope."""
        return MappingProxyType(self._scope)

    # =========================================================================
    # Units
    # =========================================================================

    def add_globals(self, source: str) -> None:
        """Bind the function definitions of a globals unit into the scope.

        Replaces the previous globals unit. Its other statements never run.

        Raises:
            ScriptError: The source does not compile, or a definition fails
        """
        try:
            tree = ast.parse(source, filename="<globals>")
        except (SyntaxError, ValueError) as exc:
            raise ScriptError(f"compilation error: {_describe(exc)}") from exc
        definitions = [
            node
            for node in tree.body
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
        ]
        module = ast.Module(body=definitions, type_ignores=[])
        code = _compile_restricted(module, "<globals>")

        # Functions of the replaced unit must not outlive it.
        for name, function in self._global_functions.items():
            if self._scope.get(name) is function:
                del self._scope[name]
        self._global_functions = {}
        try:
            self._execute(code, self._scope)
        finally:
            tampered = self._restore_datasets()
        if tampered:
            raise ScriptError(f"runtime error: cannot assign to dataset {tampered!r}")
        self._global_functions = {node.name: self._scope[node.name] for node in definitions}
        logger.debug("Globals unit defines %d function(s)", len(definitions))

    def run_block(self, source: str) -> list[ScriptLine]:
        """Execute a script block against the persistent scope.

        Returns:
            The block's source lines interleaved with its debug output

        Raises:
            ScriptError: Compilation or runtime failure
        """
        lines = strip_output(source)
        code, filename = self._compile("\n".join(lines) + "\n", "script")
        self._log = []
        self._filename = filename
        try:
            self._execute(code, self._scope)
        finally:
            self._filename = None
            tampered = self._restore_datasets()
        if tampered:
            raise ScriptError(f"runtime error: cannot assign to dataset {tampered!r}")

        by_line: dict[int, list[str]] = defaultdict(list)
        for lineno, message in self._log:
            by_line[lineno].append(message)
        self._log = []

        result: list[ScriptLine] = []
        for lineno, line in enumerate(lines, start=1):
            result.append(ScriptLine(line))
            for message in by_line.get(lineno, ()):
                result.extend(
                    ScriptLine(part, output=True) for part in message.splitlines() or [""]
                )
        return result

    def generate_table(self, source: str) -> tuple[list[str], list[list[str]]]:
        """Run a table generator in a disposable namespace.

        The script calls ``row(cells)`` once per row; the first row is the
        header. Body rows are padded or truncated to the header width.

        Raises:
            ScriptError: Failure, or no row was emitted
        """
        rows: list[list[str]] = []

        def row(cells: Iterable[Any]) -> None:
            rows.append([str(cell) for cell in cells])

        self._run_disposable(source, "table", row=row)
        if not rows:
            raise ScriptError("runtime error: table script emitted no rows")
        head, *body = rows
        width = len(head)
        return head, [(cells + [""] * width)[:width] for cells in body]

    def generate_chart(self, source: str) -> list[Series]:
        """Run a chart generator in a disposable namespace.

        Each ``plot(points)`` call adds one series of ``(x, y)`` pairs.
        """
        series: list[Series] = []

        def plot(points: Iterable[tuple[Any, Any]]) -> None:
            series.append(tuple((float(x), float(y)) for x, y in points))

        self._run_disposable(source, "chart", plot=plot)
        return series

    def add_dataset(self, dataset: Dataset) -> None:
        """Bind a dataset as a read-only constant of the persistent scope."""
        name = dataset.name
        if not name.isidentifier() or keyword.iskeyword(name):
            raise ScriptError(f"runtime error: dataset name {name!r} is not an identifier")
        self._datasets[name] = dataset.rows
        self._scope[name] = dataset.rows

    def eval_inline(self, expression: str) -> str:
        """Evaluate one expression against the persistent scope."""
        code, _ = self._compile(expression.strip(), "inline", mode="eval")
        try:
            try:
                value = eval(code, self._scope)
            except Exception as exc:
                raise ScriptError(f"runtime error: {_describe(exc)}") from exc
        finally:
            tampered = self._restore_datasets()
        if tampered:
            raise ScriptError(f"runtime error: cannot assign to dataset {tampered!r}")
        return str(value)

    # =========================================================================
    # Engine plumbing
    # =========================================================================

    def _compile(self, source: str, kind: str, mode: str = "exec") -> tuple[CodeType, str]:
        filename = f"<{kind}-{next(self._units)}>"
        return _compile_restricted(source, filename, mode), filename

    def _execute(self, code: CodeType, namespace: dict[str, Any]) -> None:
        try:
            exec(code, namespace)
        except Exception as exc:
            raise ScriptError(f"runtime error: {_describe(exc)}") from exc

    def _run_disposable(self, source: str, kind: str, **host: Any) -> None:
        code, _ = self._compile("\n".join(strip_output(source)) + "\n", kind)
        namespace = self._isolated_scope()
        namespace.update(host)
        self._execute(code, namespace)

    def _isolated_scope(self) -> dict[str, Any]:
        """Deep-copy the scope; functions defined by scripts see the copy.

        Datasets are read-only and shared as they are.
        """
        memo: dict[int, Any] = {id(rows): rows for rows in self._datasets.values()}
        namespace: dict[str, Any] = {}
        functions: list[tuple[str, FunctionType]] = []
        for name, value in self._scope.items():
            if isinstance(value, FunctionType) and value.__globals__ is self._scope:
                functions.append((name, value))
            elif name == "__builtins__" or callable(value):
                namespace[name] = value
            else:
                try:
                    namespace[name] = copy.deepcopy(value, memo)
                except Exception as exc:
                    raise ScriptError(
                        f"runtime error: {name!r} cannot be copied into a generator: "
                        f"{_describe(exc)}"
                    ) from exc
        for name, function in functions:
            clone = FunctionType(
                function.__code__,
                namespace,
                function.__name__,
                function.__defaults__,
                function.__closure__,
            )
            clone.__kwdefaults__ = function.__kwdefaults__
            namespace[name] = clone
        return namespace

    def _restore_datasets(self) -> str | None:
        """Rebind datasets a script replaced; return the first tampered name."""
        tampered = None
        for name, rows in self._datasets.items():
            if self._scope.get(name) is not rows:
                self._scope[name] = rows
                tampered = tampered or name
        return tampered

    def _debug(self, *values: Any) -> None:
        message = " ".join(str(value) for value in values)
        frame = sys._getframe(1)
        while frame is not None and frame.f_code.co_filename != self._filename:
            frame = frame.f_back
        if frame is None:
            logger.debug("Dropping debug output outside a script block: %r", message)
            return
        self._log.append((frame.f_lineno, message))


__all__ = [
    "OUTPUT_MARKER",
    "OUTPUT_PREFIX",
    "ScriptLine",
    "ScriptRuntime",
    "is_output_line",
    "strip_output",
]
