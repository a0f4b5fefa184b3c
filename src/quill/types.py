from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .tree import Tree, node_position

# ---------- Scopes & frames ----------

class Scope:
    """Register layout of one script or lambda.

    Parameters occupy the first registers, declared locals follow. A name
    declared in an enclosing scope is hoisted on first use: it gets a local
    register whose value is copied from the parent frame when the frame for
    this scope is created.
    """

    def __init__(self, parent: Optional['Scope'] = None, parameters: Sequence[str] = ()):
        self.parent = parent
        self.names: Dict[str, int] = {}
        self.parameter_count = 0
        self.hoisted: Dict[int, int] = {}

        for name in parameters:
            self.declare_parameter(name)

    def declare_parameter(self, name: str) -> int:
        if self.parameter_count != len(self.names):
            raise ValueError("parameters must be declared before variables")

        register = self._declare(name)
        self.parameter_count = len(self.names)
        return register

    def declare_variable(self, name: str) -> int:
        return self._declare(name)

    def _declare(self, name: str) -> int:
        register = self.names.get(name)
        if register is None:
            register = len(self.names)
            self.names[name] = register

        return register

    def get_register(self, name: str) -> int:
        register = self.names.get(name)
        if register is not None:
            return register

        if self.parent is None:
            return -1

        parent_register = self.parent.get_register(name)
        if parent_register < 0:
            return -1

        register = self._declare(name)
        self.hoisted[register] = parent_register
        return register

    @property
    def parameters(self) -> List[str]:
        return [name for name, reg in self.names.items() if reg < self.parameter_count]

    @property
    def local_variables(self) -> List[str]:
        return [name for name, reg in self.names.items() if reg >= self.parameter_count]

    def create_frame(self, parent_frame: Optional['Frame'] = None) -> 'Frame':
        registers: List[Any] = [None] * len(self.names)

        if parent_frame is not None:
            for register, parent_register in self.hoisted.items():
                registers[register] = parent_frame.registers[parent_register]

        return Frame(self, registers)

class Frame:
    """Register storage for one activation of a script or lambda."""

    def __init__(self, scope: Optional[Scope] = None, registers: Optional[List[Any]] = None):
        self.scope = scope
        self.registers: List[Any] = registers if registers is not None else []

    def assign(self, args: Sequence[Any]) -> 'Frame':
        count = self.scope.parameter_count if self.scope is not None else 0

        for index in range(count):
            self.registers[index] = args[index] if index < len(args) else None

        return self

    def get(self, register: int) -> Any:
        return self.registers[register]

    def set(self, register: int, value: Any) -> None:
        self.registers[register] = value

    def __repr__(self) -> str:
        return f"Frame({self.registers!r})"

# ---------- Values ----------

@dataclass
class Closure:
    """A lambda value bound to the frame captured when it was created."""
    lambda_node: Tree
    frame: Frame

    def __repr__(self) -> str:
        scope = self.lambda_node.scope
        params = ", ".join(scope.parameters) if scope is not None else ""
        return f"<closure ({params})>"

class CancelToken:
    """Cancellation flag that other threads may set."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def cancelled(self) -> bool:
        return self._event.is_set()

# ---------- Exceptions ----------

class QuillError(Exception):
    """Evaluation failure attributed to a syntax node."""

    def __init__(self, message: str, node: Optional[Tree] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.node = node
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def detail(self) -> str:
        return super().__str__()

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = self.detail

        if self.cause is not None:
            msg = f"{msg}: {self.cause}"

        line, col = node_position(self.node)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class QuillParseError(QuillError):
    pass

class QuillUnknownVariable(QuillError):
    def __init__(self, node: Optional[Tree], name: str):
        super().__init__(f"undefined variable {name}", node)
        self.name = name

class QuillUnknownProperty(QuillError):
    def __init__(self, node: Optional[Tree], name: Any, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        super().__init__(message or f"inaccessible or unknown property {name}", node, cause)
        self.name = name

class QuillIllegalAssignment(QuillError):
    pass

class QuillMethodNotFound(QuillError):
    def __init__(self, node: Optional[Tree], name: Optional[str]):
        super().__init__(f"unknown, ambiguous or inaccessible method {name}", node)
        self.name = name

class QuillInvocationError(QuillError):
    pass

class QuillArithmeticError(QuillError):
    pass

class QuillCoercionError(QuillError):
    pass

class QuillReadonlyContext(QuillError):
    pass

class QuillReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: Any, node: Optional[Tree] = None):
        super().__init__("return")
        self.value = value
        self.node = node

class QuillBreakSignal(Exception):
    """Internal control flow for `break`."""
    def __init__(self, node: Optional[Tree] = None):
        super().__init__("break")
        self.node = node

class QuillContinueSignal(Exception):
    """Internal control flow for `continue`."""
    def __init__(self, node: Optional[Tree] = None):
        super().__init__("continue")
        self.node = node

class QuillCancelled(Exception):
    """Raised when an evaluation observes cancellation; never silenced."""
    def __init__(self, node: Optional[Tree] = None):
        super().__init__("execution cancelled")
        self.node = node
