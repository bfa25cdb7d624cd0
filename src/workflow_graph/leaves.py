"""Leaf path collection: the terminal node of every branch reachable from Start."""

from __future__ import annotations

import logging

from workflow_graph.graph import WorkflowGraph
from workflow_graph.traversal import sort_branch_edges
from workflow_graph.types import Node, Snapshot

logger = logging.getLogger(__name__)


def _children(graph: WorkflowGraph, node: Node) -> list[Node]:
    edges = graph.outgoing_edges(node.id)
    if graph.branches(node.id):
        edges = sort_branch_edges(edges, graph, node.id)
    return graph.outgoers(node.id, edges)


def get_tree_leaf_nodes(snapshot: Snapshot | WorkflowGraph) -> list[Node]:
    """Nodes without outgoers, in depth-first pre-order from Start.

    Siblings are visited in branch order for branching nodes and in edge order
    otherwise. A node reachable along several paths is reported once.
    """
    graph = snapshot if isinstance(snapshot, WorkflowGraph) else WorkflowGraph(snapshot)
    start = graph.start_node
    if start is None:
        logger.debug("no start node; no leaves")
        return []

    leaves: list[Node] = []
    visited: set[str] = set()
    stack: list[Node] = [start]

    while stack:
        node = stack.pop()
        if node.id in visited:
            continue
        visited.add(node.id)

        children = _children(graph, node)
        if not children:
            leaves.append(node)
            continue
        # Reversed so the first child is popped first.
        stack.extend(reversed(children))

    return leaves
