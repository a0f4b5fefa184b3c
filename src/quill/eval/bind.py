from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ..context import ReadonlyContextError
from ..tree import Tree, is_identifier, is_integer_literal, tree_label
from ..types import QuillError, QuillIllegalAssignment, QuillReadonlyContext, QuillUnknownProperty
from ..uberspect import TRY_FAILED, PropertySet
from .chains import access_indices, index_key
from .common import dotted_name

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def eval_assign(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    left, right = node.children

    if is_identifier(left):
        if left.register < 0:
            raise QuillIllegalAssignment(f"unknown variable {left.value}", left)

        value = interp.evaluate(right)
        interp.frame.set(left.register, value)
        return value

    if tree_label(left) != 'reference':
        raise QuillIllegalAssignment("illegal assignment form", left)

    value = interp.evaluate(right)
    assign_reference(interp, left, value)
    return value


def assign_reference(interp: 'Interpreter', node: Tree, value: Any) -> None:
    """Store ``value`` through the chain ``node``.

    Every link but the last is read; a still-null prefix of identifiers is
    retried as a dotted context name. The last link is the property to set,
    a register, or (for ``x.y = v`` with no ``x`` bean) part of a dotted
    context name.
    """
    links = node.children
    obj: Any = None
    dotted: Optional[str] = None
    is_variable = True
    bean_found = False

    for index, link in enumerate(links[:-1]):
        interp.check_cancelled(link)

        if obj is None and is_integer_literal(link):
            is_variable = is_variable and dotted is not None
        else:
            is_variable = is_variable and is_identifier(link) and link.register < 0
            obj = interp.evaluate(link, obj)

        if obj is not None:
            bean_found = True
            continue

        if bean_found:
            raise QuillIllegalAssignment("illegal assignment: null link after a bean", link)

        if not is_variable:
            raise QuillIllegalAssignment("illegal assignment form", link)

        dotted = dotted_name(links, index)
        obj = interp.context.get(dotted)
        if obj is not None:
            bean_found = True

    last = links[-1]
    label = tree_label(last)

    if len(links) == 1 and is_identifier(last) and last.register >= 0:
        interp.frame.set(last.register, value)
        return

    if label == 'identifier' or is_integer_literal(last):
        prop: Any = last.value
    elif label == 'array_access':
        base, *indices = last.children
        obj = interp.evaluate(base, obj)
        if obj is None:
            raise QuillError("array element is null", base)
        obj = access_indices(interp, obj, indices[:-1])
        last = indices[-1]
        prop = index_key(interp, last)
        is_variable = False
    else:
        raise QuillIllegalAssignment("illegal assignment form", last)

    if obj is None and is_variable and (label == 'identifier' or is_integer_literal(last)):
        name = f"{dotted_name(links, len(links) - 2)}.{prop}" if len(links) > 1 else str(prop)
        set_context(interp, name, value, node)
        return

    if prop is None:
        raise QuillIllegalAssignment("property is null", last)

    if obj is None:
        raise QuillIllegalAssignment("bean is null", last)

    set_attribute(interp, obj, prop, value, last)


def set_context(interp: 'Interpreter', name: str, value: Any, node: Tree) -> None:
    try:
        interp.context.set(name, value)
    except ReadonlyContextError as exc:
        raise QuillReadonlyContext("context is readonly", node, exc) from exc


def set_attribute(interp: 'Interpreter', obj: Any, attribute: Any, value: Any, node: Optional[Tree] = None) -> None:
    interp.check_cancelled(node)
    cache = interp.cache if node is not None else None

    if cache is not None:
        cached = cache.get(node)
        if isinstance(cached, PropertySet) and cached.try_invoke(obj, attribute, value) is not TRY_FAILED:
            return

    setter = interp.uberspect.find_property_set(obj, attribute, value)

    if setter is None:
        narrowed = [value]
        if interp.arithmetic.narrow_arguments(narrowed):
            value = narrowed[0]
            setter = interp.uberspect.find_property_set(obj, attribute, value)

    if setter is None:
        interp.unsolvable_property(QuillUnknownProperty(node, attribute, message=f"unable to set property {attribute}"))
        return

    try:
        setter.invoke(obj, value)
    except Exception as exc:
        interp.unsolvable_property(QuillUnknownProperty(node, attribute, exc, message=f"unable to set property {attribute}"))
        return

    if cache is not None and setter.is_cacheable():
        cache.put(node, setter)
