"""Graph accessor: adjacency queries over a snapshot.

``WorkflowGraph`` indexes a snapshot once on a networkx ``MultiDiGraph`` keyed
by edge position, so node lookup and per-node outgoing/incoming edges are O(1)
instead of scans over the flat lists. The free functions ``connected_edges``
and ``get_outgoers`` answer the same questions over arbitrary node/edge
subsets.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from workflow_graph.branches import build_branch_table
from workflow_graph.types import Branch, Edge, Node, Snapshot

logger = logging.getLogger(__name__)


# ─── Free Functions ───────────────────────────────────────────────────────────


def connected_edges(nodes: Iterable[Node], edges: Iterable[Edge]) -> list[Edge]:
    """Every edge whose source or target is one of ``nodes``, in edge order."""
    ids = {node.id for node in nodes}
    return [edge for edge in edges if edge.source in ids or edge.target in ids]


def get_outgoers(node: Node, nodes: Iterable[Node], edges: Iterable[Edge]) -> list[Node]:
    """Distinct targets of ``edges`` leaving ``node`` that are present in ``nodes``.

    Targets come back in edge order.
    """
    by_id = {n.id: n for n in nodes}
    result: list[Node] = []
    seen: set[str] = set()
    for edge in edges:
        if edge.source != node.id or edge.target in seen:
            continue
        target = by_id.get(edge.target)
        if target is not None:
            seen.add(edge.target)
            result.append(target)
    return result


# ─── Indexed Graph ────────────────────────────────────────────────────────────


class WorkflowGraph:
    """Read-only index over one snapshot.

    Edges pointing at ids that are not in the node set are kept for edge
    queries but never resolve to a node.
    """

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self._nodes: dict[str, Node] = {}
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()

        for node in snapshot.nodes:
            # First occurrence wins if the editor ever sends a duplicate id.
            if node.id in self._nodes:
                logger.debug("duplicate node id %r ignored", node.id)
                continue
            self._nodes[node.id] = node
            self._graph.add_node(node.id)

        for order, edge in enumerate(snapshot.edges):
            self._graph.add_edge(edge.source, edge.target, key=order, edge=edge, order=order)

        self._branches = build_branch_table(self._nodes.values())
        self._start = snapshot.start_node

    @property
    def start_node(self) -> Node | None:
        return self._start

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def node(self, node_id: str) -> Node | None:
        """Look up a node by id."""
        return self._nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def branches(self, node_id: str) -> tuple[Branch, ...]:
        """Declared branches of a node; empty for non-branching nodes."""
        return self._branches.get(node_id, ())

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        """Edges whose source is ``node_id``, in snapshot order."""
        if node_id not in self._graph:
            return []
        return self._ordered(self._graph.out_edges(node_id, data=True))

    def incoming_edges(self, node_id: str) -> list[Edge]:
        """Edges whose target is ``node_id``, in snapshot order."""
        if node_id not in self._graph:
            return []
        return self._ordered(self._graph.in_edges(node_id, data=True))

    def connected_edges(self, node_ids: Iterable[str]) -> list[Edge]:
        """Edges touching any of ``node_ids``, in snapshot order, without duplicates."""
        found: dict[int, Edge] = {}
        for node_id in node_ids:
            if node_id not in self._graph:
                continue
            for _src, _tgt, attrs in self._graph.out_edges(node_id, data=True):
                found[attrs["order"]] = attrs["edge"]
            for _src, _tgt, attrs in self._graph.in_edges(node_id, data=True):
                found[attrs["order"]] = attrs["edge"]
        return [found[order] for order in sorted(found)]

    def outgoers(self, node_id: str, edges: Iterable[Edge] | None = None) -> list[Node]:
        """Distinct nodes reached from ``node_id``.

        With ``edges`` given, only those edges are followed and their order
        decides the result order; otherwise the node's outgoing edges are used.
        """
        candidates = self.outgoing_edges(node_id) if edges is None else edges
        result: list[Node] = []
        seen: set[str] = set()
        for edge in candidates:
            if edge.source != node_id or edge.target in seen:
                continue
            target = self._nodes.get(edge.target)
            if target is not None:
                seen.add(edge.target)
                result.append(target)
        return result

    def to_networkx(self) -> nx.MultiDiGraph:
        """A frozen copy of the underlying networkx graph."""
        return nx.freeze(self._graph.copy())

    @staticmethod
    def _ordered(edge_view: Iterable[tuple[str, str, dict]]) -> list[Edge]:
        rows = sorted(edge_view, key=lambda row: row[2]["order"])
        return [attrs["edge"] for _src, _tgt, attrs in rows]
