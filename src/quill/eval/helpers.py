from __future__ import annotations

from collections.abc import Sized
from typing import TYPE_CHECKING, Any

from ..tree import Tree
from ..types import QuillCoercionError, QuillError

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def to_boolean(interp: 'Interpreter', value: Any, node: Tree) -> bool:
    try:
        return interp.arithmetic.to_boolean(value)
    except ArithmeticError as exc:
        raise QuillCoercionError("boolean coercion error", node, exc) from exc


def size_of(interp: 'Interpreter', node: Tree, value: Any) -> int:
    """Length of a sized value, else the int its `size()` method returns."""
    if value is None:
        raise QuillError("size() : argument is null", node)

    if isinstance(value, Sized):
        return len(value)

    handle = interp.uberspect.find_method(value, "size", [])
    if handle is not None:
        try:
            result = handle.invoke(value, [])
        except Exception as exc:
            raise QuillError("size() : error executing", node, exc) from exc

        if isinstance(result, int) and not isinstance(result, bool):
            return result

    raise QuillError(f"size() : unsupported type : {type(value).__name__}", node)


def is_empty(interp: 'Interpreter', node: Tree, value: Any) -> bool:
    if value is None:
        return True

    if isinstance(value, Sized):
        return len(value) == 0

    handle = interp.uberspect.find_method(value, "size", [])
    if handle is not None:
        try:
            return handle.invoke(value, []) == 0
        except Exception as exc:
            raise QuillError("empty() : error executing", node, exc) from exc

    return False
