"""Method, function and constructor calls.

Every call site first tries the handle cached for its node, then asks the
uberspect, narrowing numeric arguments once before giving up. A call whose
receiver is the context itself may also name a functor: a closure, script or
plain callable held by a local register or a context variable.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from ..tree import Tree, tree_label
from ..types import (
    Closure,
    QuillBreakSignal,
    QuillCancelled,
    QuillContinueSignal,
    QuillError,
    QuillInvocationError,
    QuillMethodNotFound,
    QuillReturnSignal,
)
from ..uberspect import TRY_FAILED, ConstructorHandle, MethodHandle
from .fn import call_closure

if TYPE_CHECKING:
    from ..evaluator import Interpreter

logger = logging.getLogger(__name__)

_PASSTHROUGH = (QuillError, QuillCancelled, QuillReturnSignal, QuillBreakSignal, QuillContinueSignal)


def eval_method(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    name = node.value

    if data is None:
        parent = node.parent
        if tree_label(parent) != 'reference' or parent.children[0] is not node:
            raise QuillInvocationError(f"attempting to call method {name} on null", node)

        if node.register >= 0:
            data = interp.context
        else:
            data = resolve_namespace(interp, None, node)
            if data is None:
                data = interp.context

    return call(interp, node, data, name, node.children)


def eval_function(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    prefix, name = node.value
    namespace = resolve_namespace(interp, prefix, node)
    return call(interp, node, namespace, name, node.children)


def resolve_namespace(interp: 'Interpreter', prefix: Optional[str], node: Tree) -> Any:
    """Functor for ``prefix``, instantiating namespace classes once per evaluation."""
    functors = interp.functors
    if functors is not None and prefix in functors:
        return functors[prefix]

    namespace: Any = None
    resolver = getattr(interp.context, 'resolve_namespace', None)
    if callable(resolver):
        namespace = resolver(prefix)

    if namespace is None:
        functions = interp.engine.functions
        namespace = functions.get(prefix)

        if namespace is None:
            if prefix is not None:
                raise QuillError(f"no such function namespace {prefix}", node)
            return None

    if isinstance(namespace, type):
        try:
            instance = interp.uberspect.create_namespace(namespace, interp.context)
        except Exception as exc:
            raise QuillInvocationError(f"unable to create namespace {prefix}", node, exc) from exc

        if instance is not None:
            if interp.functors is None:
                interp.functors = {}
            interp.functors[prefix] = instance
            logger.debug("instantiated namespace %s as %r", prefix, instance)
            return instance

    return namespace


def evaluate_arguments(interp: 'Interpreter', arg_nodes: Sequence[Tree]) -> List[Any]:
    return [interp.evaluate(arg) for arg in arg_nodes]


def find_functor(interp: 'Interpreter', node: Tree, bean: Any, name: str) -> Any:
    if bean is interp.context:
        if node.register >= 0:
            return interp.frame.get(node.register)
        return interp.context.get(name)

    getter = interp.uberspect.find_property_get(bean, name)
    if getter is None:
        return None

    value = getter.try_invoke(bean, name)
    return None if value is TRY_FAILED else value


def is_functor(value: Any) -> bool:
    from ..engine import Script

    return isinstance(value, (Closure, Script)) or callable(value)


def invoke_functor(interp: 'Interpreter', functor: Any, args: List[Any]) -> Any:
    from ..engine import Script

    if isinstance(functor, Closure):
        return call_closure(interp, functor, args)

    if isinstance(functor, Script):
        return functor.execute(interp.context, *args, cancel_token=interp.cancel_token)

    return functor(*args)


def call(interp: 'Interpreter', node: Tree, bean: Any, name: str, arg_nodes: Sequence[Tree]) -> Any:
    interp.check_cancelled(node)
    args = evaluate_arguments(interp, arg_nodes)
    cache = interp.cache

    try:
        if cache is not None:
            cached = cache.get(node)
            if isinstance(cached, MethodHandle):
                value = cached.try_invoke(name, bean, args)
                if value is not TRY_FAILED:
                    return value

        handle = interp.uberspect.find_method(bean, name, args)
        call_args = args

        if handle is None:
            narrowed = list(args)
            if interp.arithmetic.narrow_arguments(narrowed):
                handle = interp.uberspect.find_method(bean, name, narrowed)
                call_args = narrowed

        if handle is None:
            functor = find_functor(interp, node, bean, name)
            if functor is not None and is_functor(functor):
                return invoke_functor(interp, functor, args)

            raise QuillMethodNotFound(node, name)

        value = handle.invoke(bean, call_args)

        if cache is not None and handle.is_cacheable():
            cache.put(node, handle)

        return value
    except _PASSTHROUGH:
        raise
    except Exception as exc:
        return interp.invocation_failed(QuillInvocationError(f"{name} : invocation failed", node, exc))


def eval_constructor(interp: 'Interpreter', node: Tree, data: Any) -> Any:
    interp.check_cancelled(node)

    if not node.children:
        raise QuillInvocationError("new() requires a class", node)

    ctor, *args = evaluate_arguments(interp, node.children)
    cache = interp.cache

    try:
        if cache is not None:
            cached = cache.get(node)
            if isinstance(cached, ConstructorHandle):
                value = cached.try_invoke(ctor, args)
                if value is not TRY_FAILED:
                    return value

        handle = interp.uberspect.find_constructor(ctor, args)

        if handle is None and interp.arithmetic.narrow_arguments(args):
            handle = interp.uberspect.find_constructor(ctor, args)

        if handle is None:
            raise QuillMethodNotFound(node, ctor if isinstance(ctor, str) else getattr(ctor, '__name__', repr(ctor)))

        value = handle.invoke(args)

        if cache is not None and handle.is_cacheable():
            cache.put(node, handle)

        return value
    except _PASSTHROUGH:
        raise
    except Exception as exc:
        return interp.invocation_failed(QuillInvocationError("new : invocation failed", node, exc))
