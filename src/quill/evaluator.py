from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from .cache import CallSiteCache
from .context import Options
from .tree import Tree
from .types import (
    CancelToken,
    Frame,
    QuillBreakSignal,
    QuillCancelled,
    QuillContinueSignal,
    QuillError,
    QuillReturnSignal,
)

from .eval.bind import eval_assign
from .eval.calls import eval_constructor, eval_function, eval_method
from .eval.chains import eval_array_access, eval_identifier, eval_reference, eval_reference_expression
from .eval.expr import (
    eval_arithmetic,
    eval_bitnot,
    eval_compare,
    eval_empty,
    eval_logical,
    eval_match,
    eval_negate,
    eval_not,
    eval_size_function,
    eval_size_method,
    eval_ternary,
)
from .eval.fn import eval_lambda
from .eval.literals import (
    eval_array_literal,
    eval_boolean,
    eval_map_literal,
    eval_null,
    eval_number,
    eval_string,
)
from .eval.loops import (
    eval_break,
    eval_continue,
    eval_foreach,
    eval_if_stmt,
    eval_return,
    eval_statements,
    eval_while_stmt,
)

if TYPE_CHECKING:
    from .engine import Engine


class Interpreter:
    """Evaluates one syntax tree against one context.

    An interpreter is single-use per top-level evaluation: it owns the frame
    of the running script and the functor table of instantiated namespaces.
    Closure calls run in a `spawn`ed copy sharing the cache and cancel token.
    """

    def __init__(self, engine: 'Engine', context: Any, frame: Optional[Frame] = None,
                 cache: Optional[CallSiteCache] = None, cancel_token: Optional[CancelToken] = None):
        self.engine = engine
        self.context = context
        self.frame = frame if frame is not None else Frame()
        self.cache = cache
        self.cancel_token = cancel_token if cancel_token is not None else CancelToken()
        self.uberspect = engine.uberspect
        self.logger = engine.logger
        self.functors: Optional[Dict[Optional[str], Any]] = None

        strict = engine.strict
        silent = engine.silent
        arithmetic = engine.arithmetic

        if isinstance(context, Options):
            if context.is_strict() is not None:
                strict = context.is_strict()
            if context.is_silent() is not None:
                silent = context.is_silent()
            arithmetic = arithmetic.options(context.is_strict_arithmetic())

        self.strict = strict
        self.silent = silent
        self.arithmetic = arithmetic

    # ---------------- cancellation ----------------

    def cancel(self) -> None:
        self.cancel_token.cancel()

    def is_cancelled(self) -> bool:
        return self.cancel_token.cancelled()

    def check_cancelled(self, node: Optional[Tree]) -> None:
        if self.cancel_token.cancelled():
            raise QuillCancelled(node)

    # ---------------- recoverable errors ----------------

    def _recover(self, error: QuillError) -> None:
        if self.strict:
            raise error

        if not self.silent:
            self.logger.warning("%s", error)

        return None

    def unknown_variable(self, error: QuillError) -> Any:
        return self._recover(error)

    def unsolvable_property(self, error: QuillError) -> Any:
        return self._recover(error)

    def invocation_failed(self, error: QuillError) -> Any:
        return self._recover(error)

    # ---------------- evaluation ----------------

    def evaluate(self, node: Tree, data: Any = None) -> Any:
        handler = _NODE_DISPATCH.get(node.data)
        if handler is None:
            raise QuillError(f"unsupported node kind {node.data}", node)

        return handler(self, node, data)

    def interpret(self, node: Tree) -> Any:
        try:
            return self.evaluate(node)
        except QuillReturnSignal as signal:
            return signal.value
        except (QuillBreakSignal, QuillContinueSignal) as signal:
            error = QuillError(f"{signal} outside of a loop", signal.node)
            if not self.silent:
                raise error from None
            self.logger.warning("%s", error)
            return None
        except QuillError as error:
            if not self.silent:
                raise
            self.logger.warning("%s", error)
            return None
        finally:
            self.functors = None

    def spawn(self, frame: Frame) -> 'Interpreter':
        """Interpreter for a closure body: same configuration, new frame."""
        other = copy.copy(self)
        other.frame = frame
        other.functors = None
        return other


_NODE_DISPATCH: Dict[str, Callable[[Interpreter, Tree, Any], Any]] = {
    # statements
    'script': eval_statements,
    'block': eval_statements,
    'ifstmt': eval_if_stmt,
    'whilestmt': eval_while_stmt,
    'foreach': eval_foreach,
    'return': eval_return,
    'break': eval_break,
    'continue': eval_continue,
    'assign': eval_assign,
    # references
    'identifier': eval_identifier,
    'var': eval_identifier,
    'reference': eval_reference,
    'array_access': eval_array_access,
    'reference_expression': eval_reference_expression,
    'method': eval_method,
    'function': eval_function,
    'constructor': eval_constructor,
    'lambda': eval_lambda,
    # operators
    'add': eval_arithmetic,
    'sub': eval_arithmetic,
    'mul': eval_arithmetic,
    'div': eval_arithmetic,
    'mod': eval_arithmetic,
    'lt': eval_compare,
    'le': eval_compare,
    'gt': eval_compare,
    'ge': eval_compare,
    'eq': eval_compare,
    'ne': eval_compare,
    'bitand': eval_compare,
    'bitor': eval_compare,
    'bitxor': eval_compare,
    'match': eval_match,
    'not_match': eval_match,
    'and': eval_logical,
    'or': eval_logical,
    'negate': eval_negate,
    'not': eval_not,
    'bitnot': eval_bitnot,
    'ternary': eval_ternary,
    'empty_function': eval_empty,
    'size_function': eval_size_function,
    'size_method': eval_size_method,
    # literals
    'null': eval_null,
    'true': eval_boolean,
    'false': eval_boolean,
    'number': eval_number,
    'string': eval_string,
    'array_literal': eval_array_literal,
    'map_literal': eval_map_literal,
}
