"""Quill: an embeddable expression and scripting language for Python hosts."""
from __future__ import annotations

from .arithmetic import Arithmetic, NullOperandError, NumberCoercionError
from .cache import CallSiteCache
from .context import (
    EMPTY_CONTEXT,
    MapContext,
    NamespaceContext,
    ObjectContext,
    OptionsContext,
    ReadonlyContext,
    ReadonlyContextError,
)
from .engine import Engine, Script
from .evaluator import Interpreter
from .parser import parse
from .types import (
    CancelToken,
    Closure,
    QuillArithmeticError,
    QuillCancelled,
    QuillCoercionError,
    QuillError,
    QuillIllegalAssignment,
    QuillInvocationError,
    QuillMethodNotFound,
    QuillParseError,
    QuillReadonlyContext,
    QuillUnknownProperty,
    QuillUnknownVariable,
)
from .uberspect import TRY_FAILED, Uberspect

__all__ = [
    "Arithmetic",
    "CallSiteCache",
    "CancelToken",
    "Closure",
    "EMPTY_CONTEXT",
    "Engine",
    "Interpreter",
    "MapContext",
    "NamespaceContext",
    "NullOperandError",
    "NumberCoercionError",
    "ObjectContext",
    "OptionsContext",
    "QuillArithmeticError",
    "QuillCancelled",
    "QuillCoercionError",
    "QuillError",
    "QuillIllegalAssignment",
    "QuillInvocationError",
    "QuillMethodNotFound",
    "QuillParseError",
    "QuillReadonlyContext",
    "QuillUnknownProperty",
    "QuillUnknownVariable",
    "ReadonlyContext",
    "ReadonlyContextError",
    "Script",
    "TRY_FAILED",
    "Uberspect",
    "parse",
]
