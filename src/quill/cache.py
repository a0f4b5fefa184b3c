from __future__ import annotations

from typing import Any, Dict

from .tree import Tree


class CallSiteCache:
    """Side table of introspection handles keyed by syntax node identity.

    Owned by a `Script` and shared by every interpreter evaluating it. There is
    no locking: concurrent writers race and the last one wins, which is safe
    because every handle is re-validated by `try_invoke` before use.
    """

    def __init__(self) -> None:
        self._slots: Dict[int, Any] = {}

    def get(self, node: Tree) -> Any:
        return self._slots.get(id(node))

    def put(self, node: Tree, handle: Any) -> None:
        self._slots[id(node)] = handle

    def clear(self) -> None:
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, node: Tree) -> bool:
        return id(node) in self._slots
