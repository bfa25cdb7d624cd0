"""Branch-aware level-order traversal.

Walks the graph breadth-first from a start node and gives every reached node a
(depth, breadth) coordinate:

  - depth is the hop count from the start node along the edges followed;
  - breadth is the sibling slot within a depth level, handed out left to right
    from a running counter that resets whenever the depth changes.

Branching nodes (if-else, question classifier) enqueue their targets in
declared branch order and consume one breadth slot per target (or one slot
when the node dead-ends). Other nodes only continue a single-child chain, which
stays at breadth 0, and always consume one slot.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable

from workflow_graph.branches import branch_index
from workflow_graph.graph import WorkflowGraph
from workflow_graph.types import Edge, Node, Snapshot, Visit

logger = logging.getLogger(__name__)

Visitor = Callable[[Visit], None]


def sort_branch_edges(edges: Iterable[Edge], graph: WorkflowGraph, node_id: str) -> list[Edge]:
    """Order a branching node's outgoing edges by declared branch position.

    Edges whose source handle is not a declared branch get index -1 and so come
    first. The sort is stable, so ties keep snapshot order.
    """
    branches = graph.branches(node_id)
    return sorted(edges, key=lambda edge: branch_index(branches, edge.source_handle))


def traverse(start: Node, graph: WorkflowGraph, visit: Visitor | None = None) -> list[Visit]:
    """Level-order traversal from ``start``.

    Args:
        start: Node to seed the queue with, at depth 0 and breadth 0.
        graph: Indexed snapshot to walk.
        visit: Called once per reached node, in visiting order.

    Returns:
        The visits in the order they were made.

    A node is enqueued at most once, so converging branches and cyclic input
    (which the editor should never produce) both terminate.
    """
    queue: deque[tuple[Node, int, int]] = deque([(start, 0, 0)])
    enqueued: set[str] = {start.id}
    visits: list[Visit] = []

    current_depth = 0
    current_breadth = 0

    while queue:
        node, depth, breadth = queue.popleft()

        if depth != current_depth:
            current_depth = depth
            current_breadth = 0

        record = Visit(node=node, depth=depth, breadth=breadth)
        visits.append(record)
        if visit is not None:
            visit(record)

        if graph.branches(node.id):
            sorted_edges = sort_branch_edges(graph.outgoing_edges(node.id), graph, node.id)
            outgoers = graph.outgoers(node.id, sorted_edges)

            fresh = [outgoer for outgoer in outgoers if outgoer.id not in enqueued]
            if len(fresh) < len(outgoers):
                logger.debug("node %r: %d branch target(s) already queued", node.id, len(outgoers) - len(fresh))

            for index, outgoer in enumerate(fresh):
                enqueued.add(outgoer.id)
                queue.append((outgoer, depth + 1, current_breadth + index))

            # A dead-end branch still reserves its slot.
            current_breadth += len(fresh) or 1
        else:
            outgoers = graph.outgoers(node.id)

            if len(outgoers) == 1:
                child = outgoers[0]
                if child.id in enqueued:
                    logger.debug("node %r: successor %r already queued", node.id, child.id)
                else:
                    enqueued.add(child.id)
                    queue.append((child, depth + 1, 0))
            elif len(outgoers) > 1:
                logger.debug("node %r has %d outgoers but no branches; not descending", node.id, len(outgoers))

            current_breadth += 1

    return visits


def nodes_level_order_traverse(
    start: Node,
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    visit: Visitor | None = None,
) -> list[Visit]:
    """``traverse`` over plain node and edge lists."""
    graph = WorkflowGraph(Snapshot.of(nodes, edges))
    return traverse(start, graph, visit)
