"""Introspection over ordinary Python objects.

The interpreter never touches host objects directly: it asks the uberspect
for a *handle* (a method, constructor, property getter or property setter)
and invokes that. Handles can be cached per call site; `try_invoke` re-checks
that the cached handle still applies to the receiver it is given and answers
`TRY_FAILED` instead of raising when it does not.
"""
from __future__ import annotations

import importlib
import inspect
import logging
import typing
from collections.abc import Iterator, Mapping, MutableMapping, MutableSequence, Sequence
from types import ModuleType
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class _TryFailed:
    _instance: Optional['_TryFailed'] = None

    def __new__(cls) -> '_TryFailed':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TRY_FAILED"

    def __bool__(self) -> bool:
        return False


TRY_FAILED = _TryFailed()


def _receiver_key(obj: Any) -> Any:
    # classes and modules are their own receivers; instances match by type
    if isinstance(obj, (type, ModuleType)):
        return obj
    return type(obj)


def _type_hints(fn: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(fn)
    except (NameError, TypeError, AttributeError):
        return {}


def _matches_hint(value: Any, hint: Any) -> bool:
    if value is None or not isinstance(hint, type) or hint is object:
        return True

    if hint is float and isinstance(value, int) and not isinstance(value, bool):
        return True

    return isinstance(value, hint)


def accepts_arguments(fn: Callable[..., Any], args: Sequence[Any], hints_from: Any = None) -> bool:
    """True when `fn(*args)` binds and every annotated parameter type fits."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return True

    try:
        bound = signature.bind(*args)
    except TypeError:
        return False

    hints = _type_hints(hints_from if hints_from is not None else fn)
    if not hints:
        return True

    for name, value in bound.arguments.items():
        param = signature.parameters[name]
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if name in hints and not _matches_hint(value, hints[name]):
            return False

    return True


# ---------------- handles ----------------

class Handle:
    """Base of every cached introspection result."""

    def is_cacheable(self) -> bool:
        return True


class MethodHandle(Handle):
    def __init__(self, receiver: Any, name: str):
        self.receiver = _receiver_key(receiver)
        self.name = name

    def invoke(self, obj: Any, args: Sequence[Any]) -> Any:
        return getattr(obj, self.name)(*args)

    def try_invoke(self, name: str, obj: Any, args: Sequence[Any]) -> Any:
        if name != self.name or obj is None or _receiver_key(obj) is not self.receiver:
            return TRY_FAILED

        method = getattr(obj, self.name, None)
        if method is None or not callable(method) or not accepts_arguments(method, args):
            return TRY_FAILED

        return method(*args)

    def __repr__(self) -> str:
        return f"<method {getattr(self.receiver, '__name__', self.receiver)}.{self.name}>"


class ConstructorHandle(Handle):
    def __init__(self, cls: Callable[..., Any]):
        self.cls = cls

    def invoke(self, args: Sequence[Any]) -> Any:
        return self.cls(*args)

    def try_invoke(self, ctor: Any, args: Sequence[Any]) -> Any:
        if ctor is not self.cls and ctor != _qualified_name(self.cls):
            return TRY_FAILED

        if not _constructor_accepts(self.cls, args):
            return TRY_FAILED

        return self.cls(*args)

    def __repr__(self) -> str:
        return f"<constructor {_qualified_name(self.cls)}>"


class PropertyGet(Handle):
    """Reads one property; `try_invoke` answers TRY_FAILED on a mismatch."""
    def __init__(self, receiver: Any, key: Any):
        self.receiver = _receiver_key(receiver)
        self.key = key

    def invoke(self, obj: Any) -> Any:
        return self._read(obj, self.key)

    def try_invoke(self, obj: Any, key: Any) -> Any:
        if obj is None or _receiver_key(obj) is not self.receiver or not self._applies(key):
            return TRY_FAILED
        try:
            return self._read(obj, key)
        except (LookupError, AttributeError, TypeError):
            return TRY_FAILED

    def _applies(self, key: Any) -> bool:
        return key == self.key

    def _read(self, obj: Any, key: Any) -> Any:
        raise NotImplementedError


class MapGetter(PropertyGet):
    def _applies(self, key: Any) -> bool:
        return type(key) is type(self.key)

    def _read(self, obj: Any, key: Any) -> Any:
        return obj.get(key)


class IndexGetter(PropertyGet):
    def _applies(self, key: Any) -> bool:
        return isinstance(key, int) and not isinstance(key, bool)

    def _read(self, obj: Any, key: Any) -> Any:
        return obj[key]


class AttributeGetter(PropertyGet):
    def _read(self, obj: Any, key: Any) -> Any:
        return getattr(obj, key)


class ItemGetter(PropertyGet):
    def _read(self, obj: Any, key: Any) -> Any:
        return obj[key]


class PropertySet(Handle):
    def __init__(self, receiver: Any, key: Any):
        self.receiver = _receiver_key(receiver)
        self.key = key

    def invoke(self, obj: Any, value: Any) -> None:
        self._write(obj, self.key, value)

    def try_invoke(self, obj: Any, key: Any, value: Any) -> Any:
        if obj is None or _receiver_key(obj) is not self.receiver or key != self.key:
            return TRY_FAILED
        if not _setter_accepts(obj, key, value):
            return TRY_FAILED
        try:
            self._write(obj, key, value)
        except (LookupError, AttributeError, TypeError):
            return TRY_FAILED
        return value

    def _write(self, obj: Any, key: Any, value: Any) -> None:
        raise NotImplementedError


class MapSetter(PropertySet):
    def _write(self, obj: Any, key: Any, value: Any) -> None:
        obj[key] = value


class IndexSetter(PropertySet):
    def _write(self, obj: Any, key: Any, value: Any) -> None:
        obj[key] = value


class AttributeSetter(PropertySet):
    def _write(self, obj: Any, key: Any, value: Any) -> None:
        setattr(obj, key, value)


class ItemSetter(PropertySet):
    def _write(self, obj: Any, key: Any, value: Any) -> None:
        obj[key] = value


# ---------------- helpers ----------------

def _qualified_name(cls: Any) -> str:
    module = getattr(cls, "__module__", None)
    name = getattr(cls, "__qualname__", getattr(cls, "__name__", repr(cls)))
    return f"{module}.{name}" if module else name


def _constructor_accepts(cls: Any, args: Sequence[Any]) -> bool:
    if not isinstance(cls, type):
        return accepts_arguments(cls, args)

    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return len(args) == 0

    return accepts_arguments(cls, args, hints_from=cls.__init__)


def _setter_accepts(obj: Any, key: Any, value: Any) -> bool:
    if not isinstance(key, str) or isinstance(obj, Mapping):
        return True

    hint = _type_hints(type(obj)).get(key)
    return hint is None or _matches_hint(value, hint)


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


class Uberspect:
    """Default introspection strategy; replace per host by subclassing."""

    def find_method(self, obj: Any, name: str, args: Sequence[Any]) -> Optional[MethodHandle]:
        if obj is None or not isinstance(name, str):
            return None

        method = getattr(obj, name, None)
        if method is None or not callable(method):
            return None

        if not accepts_arguments(method, args):
            logger.debug("method %s rejects arguments %r", name, args)
            return None

        return MethodHandle(obj, name)

    def find_constructor(self, ctor: Any, args: Sequence[Any]) -> Optional[ConstructorHandle]:
        if isinstance(ctor, str):
            ctor = self.resolve_class(ctor)

        if ctor is None or not callable(ctor):
            return None

        if not _constructor_accepts(ctor, args):
            return None

        return ConstructorHandle(ctor)

    def create_namespace(self, namespace: Any, context: Any) -> Any:
        """Instantiate a namespace class around the evaluation context.

        Returns None when `namespace` is not a class or has no constructor
        accepting the context; the class itself is then used as the namespace.
        """
        if not isinstance(namespace, type):
            return None

        ctor = self.find_constructor(namespace, [context])
        if ctor is None:
            return None

        return ctor.invoke([context])

    def resolve_class(self, name: str) -> Any:
        """Import `package.module.Class` by dotted name; None when absent."""
        module_name, _, attr = name.rpartition(".")
        if not module_name:
            return None

        try:
            module = importlib.import_module(module_name)
        except ImportError:
            logger.debug("no module %s for class %s", module_name, name)
            return None

        return getattr(module, attr, None)

    def find_property_get(self, obj: Any, key: Any) -> Optional[PropertyGet]:
        if obj is None:
            return None

        if isinstance(obj, Mapping):
            return MapGetter(obj, key)

        if _is_index(key) and isinstance(obj, Sequence):
            return IndexGetter(obj, key)

        if isinstance(key, str) and hasattr(obj, key):
            return AttributeGetter(obj, key)

        if hasattr(obj, "__getitem__") and not isinstance(obj, (str, type, Sequence)):
            return ItemGetter(obj, key)

        return None

    def find_property_set(self, obj: Any, key: Any, value: Any) -> Optional[PropertySet]:
        if obj is None:
            return None

        if isinstance(obj, MutableMapping):
            return MapSetter(obj, key)

        if _is_index(key) and isinstance(obj, MutableSequence):
            if -len(obj) <= key < len(obj):
                return IndexSetter(obj, key)
            return None

        if isinstance(key, str) and (hasattr(obj, key) or hasattr(obj, "__dict__")):
            if not _setter_accepts(obj, key, value):
                return None
            return AttributeSetter(obj, key)

        if hasattr(obj, "__setitem__"):
            return ItemSetter(obj, key)

        return None

    def get_iterator(self, obj: Any) -> Optional[Iterator[Any]]:
        if obj is None:
            return None

        if isinstance(obj, Mapping):
            return iter(obj.values())

        if isinstance(obj, Iterator):
            return obj

        if hasattr(obj, "__iter__"):
            return iter(obj)

        factory = getattr(obj, "iterator", None)
        if callable(factory):
            return factory()

        return None
