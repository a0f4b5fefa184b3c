"""Variable stores the interpreter reads names from and writes names to."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from typing_extensions import Protocol, runtime_checkable


class ReadonlyContextError(Exception):
    """Raised by `Context.set` on a store that does not accept writes."""


@runtime_checkable
class Context(Protocol):
    def get(self, name: str) -> Any: ...
    def set(self, name: str, value: Any) -> None: ...
    def has(self, name: str) -> bool: ...


@runtime_checkable
class NamespaceResolver(Protocol):
    def resolve_namespace(self, prefix: Optional[str]) -> Any: ...


@runtime_checkable
class Options(Protocol):
    """Per-evaluation overrides; a `None` answer keeps the engine setting."""
    def is_strict(self) -> Optional[bool]: ...
    def is_silent(self) -> Optional[bool]: ...
    def is_strict_arithmetic(self) -> Optional[bool]: ...


class MapContext:
    """Context backed by a plain dict; keys may contain dots."""

    def __init__(self, variables: Optional[Dict[str, Any]] = None):
        self.vars: Dict[str, Any] = variables if variables is not None else {}

    def get(self, name: str) -> Any:
        return self.vars.get(name)

    def set(self, name: str, value: Any) -> None:
        self.vars[name] = value

    def has(self, name: str) -> bool:
        return name in self.vars

    def __repr__(self) -> str:
        return f"MapContext({self.vars!r})"


class ReadonlyContext:
    """Read-through view of another context; `set` always fails."""

    def __init__(self, wrapped: Any):
        if isinstance(wrapped, Mapping):
            wrapped = MapContext(dict(wrapped))
        self.wrapped = wrapped

    def get(self, name: str) -> Any:
        return self.wrapped.get(name)

    def set(self, name: str, value: Any) -> None:
        raise ReadonlyContextError(f"context is read-only, cannot set '{name}'")

    def has(self, name: str) -> bool:
        return self.wrapped.has(name)


class ObjectContext:
    """Exposes the attributes of a host object as variables."""

    def __init__(self, obj: Any):
        self.obj = obj

    def get(self, name: str) -> Any:
        return getattr(self.obj, name, None)

    def set(self, name: str, value: Any) -> None:
        setattr(self.obj, name, value)

    def has(self, name: str) -> bool:
        return hasattr(self.obj, name)


class NamespaceContext(MapContext):
    """MapContext that also resolves function namespaces by prefix."""

    def __init__(self, variables: Optional[Dict[str, Any]] = None,
                 namespaces: Optional[Dict[Optional[str], Any]] = None):
        super().__init__(variables)
        self.namespaces: Dict[Optional[str], Any] = namespaces if namespaces is not None else {}

    def resolve_namespace(self, prefix: Optional[str]) -> Any:
        return self.namespaces.get(prefix)


class OptionsContext(MapContext):
    """MapContext carrying strict/silent overrides for one evaluation."""

    def __init__(self, variables: Optional[Dict[str, Any]] = None, *, strict: Optional[bool] = None,
                 silent: Optional[bool] = None, strict_arithmetic: Optional[bool] = None):
        super().__init__(variables)
        self.strict = strict
        self.silent = silent
        self.strict_arithmetic = strict_arithmetic

    def is_strict(self) -> Optional[bool]:
        return self.strict

    def is_silent(self) -> Optional[bool]:
        return self.silent

    def is_strict_arithmetic(self) -> Optional[bool]:
        return self.strict_arithmetic


EMPTY_CONTEXT = ReadonlyContext(MapContext())


def as_context(value: Any) -> Any:
    """Accept None, a mapping or a context object."""
    if value is None:
        return MapContext()

    if isinstance(value, Mapping) and not isinstance(value, Context):
        return MapContext(value if isinstance(value, dict) else dict(value))

    return value
