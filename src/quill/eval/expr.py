from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, Pattern

from ..arithmetic import Arithmetic
from ..tree import Tree, tree_label
from ..types import QuillArithmeticError, QuillCoercionError, QuillError
from .common import find_null_operand
from .helpers import is_empty, size_of, to_boolean

if TYPE_CHECKING:
    from ..evaluator import Interpreter

BinaryOp = Callable[[Arithmetic, Any, Any], Any]

_ARITHMETIC_OPS: Dict[str, BinaryOp] = {
    'add': Arithmetic.add,
    'sub': Arithmetic.subtract,
    'mul': Arithmetic.multiply,
    'div': Arithmetic.divide,
    'mod': Arithmetic.mod,
}

_COMPARE_OPS: Dict[str, BinaryOp] = {
    'lt': Arithmetic.less_than,
    'le': Arithmetic.less_than_or_equal,
    'gt': Arithmetic.greater_than,
    'ge': Arithmetic.greater_than_or_equal,
    'eq': Arithmetic.equals,
    'ne': lambda arith, l, r: not arith.equals(l, r),
    'bitand': Arithmetic.bitwise_and,
    'bitor': Arithmetic.bitwise_or,
    'bitxor': Arithmetic.bitwise_xor,
}


def _operands(interp: 'Interpreter', node: Tree) -> tuple[Any, Any]:
    left_node, right_node = node.children
    return interp.evaluate(left_node), interp.evaluate(right_node)


def eval_arithmetic(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    left, right = _operands(interp, node)
    op = _ARITHMETIC_OPS[node.data]
    arithmetic = interp.arithmetic

    try:
        return op(arithmetic, left, right)
    except ArithmeticError as exc:
        if node.data in ('div', 'mod') and not arithmetic.is_strict():
            return 0.0

        culprit = find_null_operand(exc, node, left, right)
        raise QuillArithmeticError(f"{node.data} error", culprit, exc) from exc


def eval_compare(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    left, right = _operands(interp, node)
    op = _COMPARE_OPS[node.data]

    try:
        return op(interp.arithmetic, left, right)
    except ArithmeticError as exc:
        raise QuillArithmeticError(f"{node.data} error", find_null_operand(exc, node, left, right), exc) from exc


def eval_negate(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    operand = node.children[0]
    value = interp.evaluate(operand)
    arithmetic = interp.arithmetic

    try:
        result = arithmetic.negate(value)
    except ArithmeticError as exc:
        raise QuillArithmeticError("- error", operand, exc) from exc

    if tree_label(operand) == 'number':
        return arithmetic.narrow_number(result, type(operand.value))

    return result


def eval_not(interp: 'Interpreter', node: Tree, data: Any) -> bool:
    operand = node.children[0]
    return not to_boolean(interp, interp.evaluate(operand), operand)


def eval_bitnot(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    operand = node.children[0]

    try:
        return interp.arithmetic.bitwise_complement(interp.evaluate(operand))
    except ArithmeticError as exc:
        raise QuillArithmeticError("~ error", operand, exc) from exc


def eval_logical(interp: 'Interpreter', node: Tree, data: Any) -> bool:
    """Short-circuit ``and``/``or``; the result is always a boolean."""
    left_node, right_node = node.children
    left = to_boolean(interp, interp.evaluate(left_node), left_node)

    if node.data == 'and' and not left:
        return False

    if node.data == 'or' and left:
        return True

    return to_boolean(interp, interp.evaluate(right_node), right_node)


def eval_ternary(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    cond_node = node.children[0]
    cond = interp.evaluate(cond_node)

    if len(node.children) == 2:
        if cond is not None and to_boolean(interp, cond, cond_node):
            return cond
        return interp.evaluate(node.children[1])

    if cond is not None and to_boolean(interp, cond, cond_node):
        return interp.evaluate(node.children[1])

    return interp.evaluate(node.children[2])


def eval_match(interp: 'Interpreter', node: Tree, data: Any) -> bool:
    left, right = _operands(interp, node)

    try:
        found = matches(interp, node, left, right)
    except ArithmeticError as exc:
        raise QuillArithmeticError(f"{node.data} error", node, exc) from exc

    return found if node.data == 'match' else not found


def matches(interp: 'Interpreter', node: Tree, left: Any, right: Any) -> bool:
    """``left =~ right``: pattern match, key or element containment, else equality."""
    arithmetic = interp.arithmetic

    if right is None or isinstance(right, (str, Pattern)):
        return arithmetic.matches(left, right)

    if isinstance(right, Mapping):
        try:
            return left in right
        except TypeError:
            return False

    if isinstance(right, Collection):
        return any(arithmetic.equals(left, item) for item in right)

    args = [left]
    handle = interp.uberspect.find_method(right, 'contains', args)
    if handle is None and arithmetic.narrow_arguments(args):
        handle = interp.uberspect.find_method(right, 'contains', args)

    if handle is not None:
        try:
            return to_boolean(interp, handle.invoke(right, args), node)
        except QuillError:
            raise
        except Exception as exc:
            raise QuillCoercionError("contains() failed", node, exc) from exc

    iterator = interp.uberspect.get_iterator(right)
    if iterator is not None:
        return any(arithmetic.equals(left, item) for item in iterator)

    return arithmetic.equals(left, right)


def eval_empty(interp: 'Interpreter', node: Tree, data: Any) -> bool:
    return is_empty(interp, node, interp.evaluate(node.children[0]))


def eval_size_function(interp: 'Interpreter', node: Tree, data: Any) -> int:
    return size_of(interp, node, interp.evaluate(node.children[0]))


def eval_size_method(interp: 'Interpreter', node: Tree, data: Any) -> int:
    return size_of(interp, node, data)
