"""Engine facade: configuration shared by every script it creates."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .arithmetic import Arithmetic
from .cache import CallSiteCache
from .context import as_context
from .evaluator import Interpreter
from .parser import parse
from .tree import Tree
from .types import CancelToken
from .uberspect import Uberspect

_logger = logging.getLogger(__name__)


class Engine:
    """Creates scripts and holds the settings their evaluations use.

    ``strict`` makes unknown variables, unknown properties and failed calls
    raise instead of yielding null; ``silent`` makes `Script.execute` log
    errors and return None instead of raising. ``functions`` maps namespace
    prefixes (``None`` for the global one) to objects or classes whose
    methods scripts may call as ``prefix:name(...)``.
    """

    def __init__(self, strict: bool = False, silent: bool = False, cache: bool = True,
                 arithmetic: Optional[Arithmetic] = None, uberspect: Optional[Uberspect] = None,
                 functions: Optional[Dict[Optional[str], Any]] = None, logger: Optional[logging.Logger] = None):
        self.strict = strict
        self.silent = silent
        self.cache = cache
        self.arithmetic = arithmetic if arithmetic is not None else Arithmetic(strict)
        self.uberspect = uberspect if uberspect is not None else Uberspect()
        self.functions: Dict[Optional[str], Any] = dict(functions) if functions else {}
        self.logger = logger if logger is not None else _logger

    def parse(self, source: str, parameters: tuple[str, ...] = ()) -> Tree:
        return parse(source, parameters)

    def create_script(self, source: str, *parameters: str) -> 'Script':
        return Script(self, source, self.parse(source, parameters))

    def create_expression(self, source: str) -> 'Script':
        return self.create_script(source)

    def create_interpreter(self, context: Any, frame: Any = None, cache: Optional[CallSiteCache] = None,
                           cancel_token: Optional[CancelToken] = None) -> Interpreter:
        return Interpreter(self, as_context(context), frame, cache, cancel_token)


class Script:
    """A parsed script bound to its engine; reusable and thread-safe to share."""

    def __init__(self, engine: Engine, source: str, tree: Tree):
        self.engine = engine
        self.source = source
        self.tree = tree
        self.cache = CallSiteCache() if engine.cache else None

    @property
    def parameters(self) -> List[str]:
        return self.tree.scope.parameters

    @property
    def local_variables(self) -> List[str]:
        return self.tree.scope.local_variables

    def execute(self, context: Any = None, *args: Any, cancel_token: Optional[CancelToken] = None) -> Any:
        frame = self.tree.scope.create_frame().assign(args)
        interp = self.engine.create_interpreter(context, frame, self.cache, cancel_token)
        return interp.interpret(self.tree)

    def evaluate(self, context: Any = None) -> Any:
        return self.execute(context)

    def __repr__(self) -> str:
        return f"Script({self.source!r})"
