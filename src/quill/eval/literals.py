from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from ..tree import Tree, is_integer_literal
from ..types import QuillError
from .chains import get_attribute

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def eval_null(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    return None

def eval_boolean(interp: 'Interpreter', node: Tree, data: Any) -> bool:
    return node.value

def eval_number(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    # `list.1` style links index the running value
    if data is not None and is_integer_literal(node):
        return get_attribute(interp, data, node.value, node)

    return node.value

def eval_string(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    if data is not None:
        return get_attribute(interp, data, node.value, node)

    return node.value

def eval_array_literal(interp: 'Interpreter', node: Tree, data: Any) -> List[Any]:
    return [interp.evaluate(ch) for ch in node.children]

def eval_map_literal(interp: 'Interpreter', node: Tree, data: Any) -> Dict[Any, Any]:
    result: Dict[Any, Any] = {}

    for entry in node.children:
        key_node, value_node = entry.children
        key = interp.evaluate(key_node)
        value = interp.evaluate(value_node)

        try:
            result[key] = value
        except TypeError as exc:
            raise QuillError("map key is not hashable", key_node, exc) from exc

    return result
