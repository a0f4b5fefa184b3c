"""Read path: identifiers, reference chains and attribute access.

A reference walks its links left to right carrying the running value. While
that value is still null and every link so far is an identifier (or an
integer literal continuing one), the joined dotted name is looked up in the
context, so a flat key like ``"a.b.c"`` resolves ``a.b.c``. The first
non-null value ends that fallback for the rest of the chain.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from ..tree import Tree, is_identifier, is_integer_literal, is_property_link, tree_label
from ..types import QuillUnknownProperty, QuillUnknownVariable
from ..uberspect import TRY_FAILED, PropertyGet
from .common import dotted_name, is_literal_key, is_ternary_protected

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def eval_identifier(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    interp.check_cancelled(node)
    name = node.value

    if data is not None:
        return get_attribute(interp, data, name, node)

    if node.register >= 0:
        return interp.frame.get(node.register)

    if is_property_link(node):
        # property of a null link; the reference tries the dotted name instead
        return None

    value = interp.context.get(name)

    if (
        value is None
        and tree_label(node.parent) != 'reference'
        and not interp.context.has(name)
        and not is_ternary_protected(node)
    ):
        return interp.unknown_variable(QuillUnknownVariable(node, name))

    return value


def eval_reference(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    links = node.children
    result: Any = None
    dotted: Optional[str] = None
    is_variable = True
    bean_found = False

    for index, link in enumerate(links):
        interp.check_cancelled(node)

        if result is None and is_integer_literal(link):
            # only continues a dotted name already being tried
            is_variable = is_variable and dotted is not None
        else:
            # a local register is never retried as a context name
            is_variable = is_variable and is_identifier(link) and link.register < 0
            result = interp.evaluate(link, result)

        if result is None and is_variable and not bean_found:
            dotted = dotted_name(links, index)
            result = interp.context.get(dotted)

        if result is not None:
            bean_found = True

    if result is not None or not is_variable or is_ternary_protected(node):
        return result

    name = dotted_name(links, len(links) - 1)

    if interp.context.has(name):
        return None

    if bean_found:
        return interp.unknown_variable(QuillUnknownProperty(node, name))

    return interp.unknown_variable(QuillUnknownVariable(node, name))


def eval_array_access(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    base, *indices = node.children
    return access_indices(interp, interp.evaluate(base, data), indices)


def eval_reference_expression(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    inner, *indices = node.children
    return access_indices(interp, interp.evaluate(inner), indices)


def index_key(interp: 'Interpreter', index_node: Tree) -> Any:
    if is_literal_key(index_node):
        return index_node.value

    return interp.evaluate(index_node)


def access_indices(interp: 'Interpreter', obj: Any, index_nodes: Sequence[Tree]) -> Any:
    for index_node in index_nodes:
        obj = get_attribute(interp, obj, index_key(interp, index_node), index_node)

    return obj


def get_attribute(interp: 'Interpreter', obj: Any, attribute: Any, node: Optional[Tree] = None) -> Any:
    """Read ``attribute`` (name, key or index) of ``obj`` through the uberspect."""
    if obj is None:
        if node is not None and is_ternary_protected(node):
            return None
        return interp.unknown_variable(QuillUnknownProperty(node, attribute, message="object is null"))

    interp.check_cancelled(node)

    cache = interp.cache if node is not None else None

    if cache is not None:
        cached = cache.get(node)
        if isinstance(cached, PropertyGet):
            value = cached.try_invoke(obj, attribute)
            if value is not TRY_FAILED:
                return value

    getter = interp.uberspect.find_property_get(obj, attribute)
    if getter is None:
        return None

    try:
        value = getter.invoke(obj)
    except Exception as exc:
        return interp.unknown_variable(QuillUnknownProperty(node, attribute, exc))

    if cache is not None and getter.is_cacheable():
        cache.put(node, getter)

    return value
