"""Branch ancestry: the chain of upstream nodes feeding one input slot.

Starting at a node, the walk follows the single incoming edge that targets the
requested slot, then repeats from that edge's source with the same slot id.
It stops as soon as a step finds zero or several such edges. The chain only
counts if it ends at the Start node.

The slot id is reused unchanged at every hop. That matches how variable
assigner slots are wired today but is an assumption: nodes whose input slots
use unrelated ids end the chain early.
"""

from __future__ import annotations

import logging

from workflow_graph.graph import WorkflowGraph
from workflow_graph.types import BlockType, Node, Snapshot

logger = logging.getLogger(__name__)


def get_before_nodes_in_same_branch(
    node_id: str,
    target_handle: str | None,
    snapshot: Snapshot | WorkflowGraph,
) -> list[Node]:
    """Upstream nodes of ``node_id`` feeding ``target_handle``, Start first.

    Returns an empty list when the node is unknown, when any step is
    ambiguous before reaching Start, or when the chain ends elsewhere.
    """
    graph = snapshot if isinstance(snapshot, WorkflowGraph) else WorkflowGraph(snapshot)
    current = graph.node(node_id)
    if current is None:
        logger.debug("ancestry: unknown node %r", node_id)
        return []

    chain: list[Node] = []
    seen: set[str] = {current.id}

    while True:
        feeding = [edge for edge in graph.incoming_edges(current.id) if edge.target_handle == target_handle]
        if len(feeding) != 1:
            if len(feeding) > 1:
                logger.debug("ancestry: %d edges into %r slot %r", len(feeding), current.id, target_handle)
            break

        before = graph.node(feeding[0].source)
        if before is None:
            break
        if before.id in seen:
            logger.debug("ancestry: cycle through %r", before.id)
            break

        chain.append(before)
        seen.add(before.id)
        current = before

    if chain and chain[-1].type is BlockType.Start:
        chain.reverse()
        return chain
    return []
