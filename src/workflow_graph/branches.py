"""Branch resolution for branching block types.

If-else nodes always expose ``true`` then ``false``; question classifiers
expose one branch per class, in the order the author wrote them. Every other
block type has a single undifferentiated output and resolves to no branches.
"""

from __future__ import annotations

from collections.abc import Iterable

from workflow_graph.types import BlockType, Branch, Node

IF_ELSE_BRANCHES: tuple[Branch, ...] = (
    Branch(id="true", name="IS TRUE"),
    Branch(id="false", name="IS FALSE"),
)

BRANCHING_TYPES = frozenset({BlockType.IfElse, BlockType.QuestionClassifier})


def is_branching(block_type: BlockType) -> bool:
    return block_type in BRANCHING_TYPES


def resolve_branches(node: Node) -> tuple[Branch, ...]:
    """Return the ordered output branches of ``node`` (empty if not branching)."""
    if node.type is BlockType.IfElse:
        return IF_ELSE_BRANCHES
    if node.type is BlockType.QuestionClassifier:
        return node.classes
    return ()


def build_branch_table(nodes: Iterable[Node]) -> dict[str, tuple[Branch, ...]]:
    """Map node id -> ordered branches, for branching nodes only."""
    table: dict[str, tuple[Branch, ...]] = {}
    for node in nodes:
        if is_branching(node.type):
            table[node.id] = resolve_branches(node)
    return table


def branch_index(branches: tuple[Branch, ...], handle: str | None) -> int:
    """Position of ``handle`` in ``branches``; -1 when it is not declared."""
    for index, branch in enumerate(branches):
        if branch.id == handle:
            return index
    return -1
