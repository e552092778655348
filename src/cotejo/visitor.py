"""Tree traversal for Cotejo documents.

Provides ``walk`` (pre-order generator), ``iter_children`` and BaseVisitor,
a container-depth-aware visitor the validator builds its collectors on.

Example, collecting link targets:

    class TargetCollector(BaseVisitor):
        def __init__(self) -> None:
            super().__init__()
            self.targets: list[str] = []

        def visit_link(self, node: Link) -> None:
            self.targets.append(node.target)

    TargetCollector().visit(doc).targets

Thread Safety:
    Visitors accumulate mutable state; create one per traversal. ``walk``
    and ``iter_children`` are pure and safe to call from any thread.

"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Self

from cotejo.nodes import BlockQuote, ListItem, Node


def iter_children(node: Node) -> tuple[Node, ...]:
    """Direct children of ``node`` (empty for leaves)."""
    return getattr(node, "children", ())


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all descendants in document (pre-order) order."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(iter_children(current)))


class BaseVisitor:
    """Pre-order visitor dispatching on node kind.

    ``visit`` calls ``visit_<kind>`` (``visit_heading``, ``visit_link``,
    ``visit_table_cell``, ...) for every node, falling back to
    ``visit_default``. Returning True from a hook skips that node's
    children.

    While a hook runs, ``depth`` is the number of BlockQuote and ListItem
    ancestors of the node. Traversal is iterative, so arbitrarily deep
    trees do not hit the recursion limit.

    """

    def __init__(self) -> None:
        self.depth = 0

    def visit(self, node: Node) -> Self:
        """Visit ``node`` and its descendants in document order."""
        start = self.depth
        stack: list[tuple[Node, int]] = [(node, start)]
        while stack:
            current, self.depth = stack.pop()
            hook = getattr(self, f"visit_{current.kind.value}", self.visit_default)
            if hook(current):
                continue
            inner = self.depth + 1 if isinstance(current, BlockQuote | ListItem) else self.depth
            stack.extend((child, inner) for child in reversed(iter_children(current)))
        self.depth = start
        return self

    def visit_default(self, node: Node) -> bool | None:
        """Called for node kinds without a ``visit_<kind>`` hook."""
        return None
