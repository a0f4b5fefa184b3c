from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from ..tree import Tree
from ..types import Closure, QuillError

if TYPE_CHECKING:
    from ..evaluator import Interpreter


def eval_lambda(interp: 'Interpreter', node: Tree, data: Any) -> Closure:
    if node.scope is None:
        raise QuillError("lambda without scope", node)

    # captured values are copied now; later writes in the parent are not seen
    return Closure(node, node.scope.create_frame(interp.frame))


def call_closure(interp: 'Interpreter', closure: Closure, args: Sequence[Any]) -> Any:
    """Run ``closure`` with ``args`` written into its captured frame.

    Every call shares that one frame, so locals survive between calls and a
    closure must not be invoked concurrently.
    """
    frame = closure.frame.assign(args)
    body = closure.lambda_node.children[-1]
    return interp.spawn(frame).interpret(body)
