from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..tree import Tree
from ..types import QuillBreakSignal, QuillContinueSignal, QuillReturnSignal
from .bind import set_context
from .helpers import to_boolean

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def eval_statements(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    """Evaluate a script or block; the value is that of the last statement."""
    result: Any = None

    for statement in node.children:
        interp.check_cancelled(statement)
        result = interp.evaluate(statement)

    return result


def eval_if_stmt(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    cond_node, then_node, *rest = node.children
    cond = interp.evaluate(cond_node)

    if to_boolean(interp, cond, cond_node):
        return interp.evaluate(then_node)

    if rest:
        return interp.evaluate(rest[0])

    return None


def eval_while_stmt(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    cond_node, body = node.children
    result: Any = None

    while to_boolean(interp, interp.evaluate(cond_node), cond_node):
        interp.check_cancelled(node)

        try:
            result = interp.evaluate(body)
        except QuillBreakSignal:
            break
        except QuillContinueSignal:
            continue

    return result


def eval_foreach(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    loop_var, items_node, body = node.children
    items = interp.evaluate(items_node)
    iterator = interp.uberspect.get_iterator(items)

    if iterator is None:
        return None

    result: Any = None

    for value in iterator:
        interp.check_cancelled(node)

        if loop_var.register >= 0:
            interp.frame.set(loop_var.register, value)
        else:
            set_context(interp, loop_var.value, value, loop_var)

        try:
            result = interp.evaluate(body)
        except QuillBreakSignal:
            break
        except QuillContinueSignal:
            continue

    return result


def eval_return(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    value = interp.evaluate(node.children[0]) if node.children else None
    raise QuillReturnSignal(value, node)


def eval_break(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    raise QuillBreakSignal(node)


def eval_continue(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    raise QuillContinueSignal(node)
