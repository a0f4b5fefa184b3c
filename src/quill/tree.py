"""Syntax tree node used by the parser and the interpreter.

Nodes keep Lark's ``data``/``children``/``meta`` shape so lark transformers
can build them directly, and add the few annotations evaluation needs: a
parent link, the literal/identifier value, the register index of local
identifiers and the scope of script/lambda roots.
"""
from __future__ import annotations

from typing import Any, Iterator, List, Optional


class Tree:
    """Immutable-once-built syntax node."""
    __slots__ = ('data', 'children', 'meta', 'parent', 'value', 'register', 'scope')

    def __init__(self, data: str, children: Optional[List[Tree]] = None, meta: Optional[Any] = None,
                 value: Any = None, register: int = -1):
        self.data = data
        self.children: List[Tree] = list(children) if children else []
        self.meta = meta
        self.parent: Optional[Tree] = None
        self.value = value
        self.register = register
        self.scope: Optional[Any] = None

    def __repr__(self) -> str:
        if self.value is not None:
            return f'Tree({self.data!r}, {self.value!r})'
        return f'Tree({self.data!r}, {self.children!r})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree):
            return False
        return self.data == other.data and self.value == other.value and self.children == other.children

    def __hash__(self) -> int:
        return id(self)

    def iter_subtrees(self) -> Iterator[Tree]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def link_parents(root: Tree) -> Tree:
    """Set ``parent`` on every node below ``root``; returns ``root``."""
    root.parent = None

    for node in root.iter_subtrees():
        for child in node.children:
            child.parent = node

    return root


def tree_label(node: Optional[Tree]) -> Optional[str]:
    return node.data if isinstance(node, Tree) else None

def node_meta(node: Optional[Tree]) -> Optional[Any]:
    return getattr(node, "meta", None)

def node_position(node: Optional[Tree]) -> tuple[Optional[int], Optional[int]]:
    meta = node_meta(node)
    if meta is None or getattr(meta, "empty", False):
        return None, None

    return getattr(meta, "line", None), getattr(meta, "column", None)

def is_identifier(node: Optional[Tree]) -> bool:
    return tree_label(node) in ('identifier', 'var')

def is_integer_literal(node: Optional[Tree]) -> bool:
    return (
        tree_label(node) == 'number'
        and isinstance(node.value, int)
        and not isinstance(node.value, bool)
    )

def node_image(node: Tree) -> str:
    """Source-ish text of a leaf node, used to build dotted variable names."""
    if node.value is None:
        return node.data

    return str(node.value)

def is_property_link(node: Tree) -> bool:
    """True for an identifier naming a property of the previous chain link."""
    parent = node.parent
    if parent is None:
        return False

    if parent.data == 'reference':
        return parent.children[0] is not node

    if parent.data == 'array_access' and parent.children[0] is node:
        return is_property_link(parent)

    return False
