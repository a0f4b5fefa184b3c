from __future__ import annotations

from typing import Any, Sequence

from ..arithmetic import NullOperandError
from ..tree import Tree, node_image, tree_label

# nodes a chain can be nested in without losing ternary protection
_CHAIN_NODES = frozenset({'reference', 'array_access'})


def is_ternary_protected(node: Tree) -> bool:
    """True when ``node`` only sits inside chain nodes below a ternary."""
    walk = node.parent

    while walk is not None:
        if walk.data == 'ternary':
            return True

        if walk.data not in _CHAIN_NODES:
            break

        walk = walk.parent

    return False


def find_null_operand(exc: BaseException, node: Tree, left: Any, right: Any) -> Tree:
    if isinstance(exc, NullOperandError):
        if left is None:
            return node.children[0]

        if right is None:
            return node.children[1]

    return node


def dotted_name(links: Sequence[Tree], upto: int) -> str:
    """Join the images of ``links[0..upto]`` with dots."""
    return '.'.join(node_image(link) for link in links[:upto + 1])


def is_literal_key(node: Tree) -> bool:
    return tree_label(node) in ('number', 'string')
