"""Layered (Sugiyama-style) layout engine.

Phases:
  1. Cycle removal (greedy-FAS), so malformed cyclic input still lays out
  2. Layer assignment (longest path from the sources)
  3. Dummy node insertion for edges spanning several layers
  4. Crossing minimisation (barycenter heuristic)
  5. Coordinate assignment, left to right, upper-left aligned

Every phase iterates in input order, never over hash order, so the same input
always yields the same layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import networkx as nx

from workflow_graph.config import ALIGN_UL, LAYERED_LAYOUT, RANKDIR_LR, LayeredLayoutConfig
from workflow_graph.types import LayoutBox, LayoutInput

logger = logging.getLogger(__name__)


class LayoutEngine(Protocol):
    """Protocol for layered layout backends."""

    def layout(self, graph: LayoutInput, config: LayeredLayoutConfig) -> dict[str, LayoutBox]:
        """Place every node of ``graph``; keys are the input node ids."""
        ...


# ─── Cycle Removal (Greedy-FAS) ───────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Node ordering that keeps most edges pointing forward.

    Eades, Lin, Smyth (1993): repeatedly peel sinks to the right and sources
    to the left; when only cycles remain, move the node with the largest
    (out - in) degree surplus to the left. Result is left + reversed(right).
    """
    active: dict[str, None] = dict.fromkeys(graph.nodes)
    out_deg: dict[str, int] = {}
    in_deg: dict[str, int] = {}
    for node in graph.nodes:
        out_deg[node] = sum(1 for succ in graph.successors(node) if succ != node)
        in_deg[node] = sum(1 for pred in graph.predecessors(node) if pred != node)

    left: list[str] = []
    right: list[str] = []

    def take(node: str) -> None:
        del active[node]
        for succ in graph.successors(node):
            if succ in active:
                in_deg[succ] -= 1
        for pred in graph.predecessors(node):
            if pred in active:
                out_deg[pred] -= 1

    while active:
        changed = True
        while changed:
            changed = False
            for sink in [n for n in active if out_deg[n] == 0]:
                take(sink)
                right.append(sink)
                changed = True

        changed = True
        while changed:
            changed = False
            for source in [n for n in active if in_deg[n] == 0]:
                take(source)
                left.append(source)
                changed = True

        if active:
            # max() keeps the first of equal candidates, i.e. input order.
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            take(best)
            left.append(best)

    right.reverse()
    return left + right


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Copy of ``graph`` with back-edges reversed and self-loops dropped.

    Returns the acyclic copy and the set of original (src, tgt) pairs that
    were reversed or dropped.
    """
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    position = {node: pos for pos, node in enumerate(greedy_fas_ordering(graph))}

    reversed_edges: set[tuple[str, str]] = set()
    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(graph.nodes(data=True))
    for src, tgt, attrs in graph.edges(data=True):
        if src == tgt:
            reversed_edges.add((src, tgt))
            continue
        if position[src] > position[tgt]:
            reversed_edges.add((src, tgt))
            dag.add_edge(tgt, src, **attrs)
        else:
            dag.add_edge(src, tgt, **attrs)

    if reversed_edges:
        logger.debug("cycle removal reversed %d edge(s)", len(reversed_edges))
    return dag, reversed_edges


# ─── Layer Assignment ─────────────────────────────────────────────────────────


def assign_layers(dag: nx.DiGraph) -> dict[str, int]:
    """Longest-path layering: layer[v] = max(layer[u] + 1) over edges u -> v."""
    layers: dict[str, int] = {node: 0 for node in dag.nodes}
    for node in nx.topological_sort(dag):
        for succ in dag.successors(node):
            if layers[succ] < layers[node] + 1:
                layers[succ] = layers[node] + 1
    return layers


# ─── Dummy Node Insertion ─────────────────────────────────────────────────────

DUMMY_PREFIX = "__dummy_"


@dataclass
class AugmentedGraph:
    """Layered graph in which every edge joins adjacent layers."""

    graph: nx.DiGraph
    layers: dict[str, int]
    layer_count: int
    dummies: set[str] = field(default_factory=set)


def insert_dummy_nodes(dag: nx.DiGraph, layers: dict[str, int]) -> AugmentedGraph:
    """Replace every edge u -> v spanning k > 1 layers by a chain of k - 1 dummies."""
    g: nx.DiGraph = nx.DiGraph()
    g.add_nodes_from(dag.nodes)
    aug_layers = dict(layers)
    dummies: set[str] = set()

    for edge_no, (src, tgt) in enumerate(list(dag.edges())):
        span = layers[tgt] - layers[src]
        if span <= 1:
            g.add_edge(src, tgt)
            continue

        prev = src
        for step in range(span - 1):
            dummy = f"{DUMMY_PREFIX}{edge_no}_{step}"
            g.add_node(dummy)
            aug_layers[dummy] = layers[src] + step + 1
            dummies.add(dummy)
            g.add_edge(prev, dummy)
            prev = dummy
        g.add_edge(prev, tgt)

    layer_count = (max(aug_layers.values()) + 1) if aug_layers else 0
    return AugmentedGraph(graph=g, layers=aug_layers, layer_count=layer_count, dummies=dummies)


# ─── Crossing Minimisation (Barycenter) ───────────────────────────────────────

MAX_SWEEPS = 24


def minimise_crossings(aug: AugmentedGraph) -> list[list[str]]:
    """Order each layer to reduce edge crossings.

    Starts from input order and alternates top-down and bottom-up barycenter
    sweeps until the crossing count stops improving.
    """
    ordering: list[list[str]] = [[] for _ in range(aug.layer_count)]
    for node in aug.graph.nodes:
        ordering[aug.layers[node]].append(node)

    best = count_crossings(ordering, aug.graph)
    best_ordering = [list(layer) for layer in ordering]

    for _sweep in range(MAX_SWEEPS):
        for idx in range(1, aug.layer_count):
            prev = {nid: float(i) for i, nid in enumerate(ordering[idx - 1])}
            ordering[idx].sort(key=lambda n, p=prev: _barycenter(n, aug.graph, p, incoming=True))

        for idx in range(aug.layer_count - 2, -1, -1):
            nxt = {nid: float(i) for i, nid in enumerate(ordering[idx + 1])}
            ordering[idx].sort(key=lambda n, p=nxt: _barycenter(n, aug.graph, p, incoming=False))

        crossings = count_crossings(ordering, aug.graph)
        if crossings >= best:
            break
        best = crossings
        best_ordering = [list(layer) for layer in ordering]

    return best_ordering


def _barycenter(node: str, graph: nx.DiGraph, neighbor_pos: dict[str, float], incoming: bool) -> float:
    """Mean position of the node's neighbours in the adjacent layer.

    Nodes without such neighbours sort last (inf) and keep their relative order.
    """
    neighbors = graph.predecessors(node) if incoming else graph.successors(node)
    positions = [neighbor_pos[nb] for nb in neighbors if nb in neighbor_pos]
    if not positions:
        return float("inf")
    return sum(positions) / len(positions)


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    """Count edge crossings between consecutive layers."""
    total = 0
    for idx in range(len(ordering) - 1):
        tgt_pos = {nid: i for i, nid in enumerate(ordering[idx + 1])}
        pairs: list[tuple[int, int]] = []
        for sp, src in enumerate(ordering[idx]):
            for succ in graph.successors(src):
                if succ in tgt_pos:
                    pairs.append((sp, tgt_pos[succ]))
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                (a0, a1), (b0, b1) = pairs[i], pairs[j]
                if (a0 < b0 and a1 > b1) or (a0 > b0 and a1 < b1):
                    total += 1
    return total


# ─── Coordinate Assignment ────────────────────────────────────────────────────


def assign_coordinates(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    sizes: dict[str, tuple[float, float]],
    config: LayeredLayoutConfig,
) -> dict[str, LayoutBox]:
    """Place layers as columns from left to right.

    Column x is the sum of the widest node of each earlier layer plus
    ``ranksep``. Within a column nodes are stacked top-down in crossing order,
    ``nodesep`` apart; each node is pulled up to the topmost y of its
    predecessors when there is room, which keeps single chains on one row.
    Dummy nodes have zero size. Only real nodes are returned.
    """

    def dims(node: str) -> tuple[float, float]:
        if node in aug.dummies:
            return (0.0, 0.0)
        return sizes.get(node, (float(config.default_width), float(config.default_height)))

    column_x: list[float] = []
    x = 0.0
    for layer in ordering:
        column_x.append(x)
        widest = max((dims(n)[0] for n in layer), default=0.0)
        x += widest + config.ranksep

    y_of: dict[str, float] = {}
    boxes: dict[str, LayoutBox] = {}
    for idx, layer in enumerate(ordering):
        next_free = 0.0
        for node in layer:
            width, height = dims(node)
            pred_ys = [y_of[p] for p in aug.graph.predecessors(node) if p in y_of]
            y = max(next_free, min(pred_ys)) if pred_ys else next_free
            y_of[node] = y
            next_free = y + height + config.nodesep
            if node not in aug.dummies:
                boxes[node] = LayoutBox(x=column_x[idx], y=y, width=width, height=height)

    return boxes


# ─── Engine ───────────────────────────────────────────────────────────────────


class SugiyamaLayoutEngine:
    """Default ``LayoutEngine``: runs the full pipeline above."""

    def layout(self, graph: LayoutInput, config: LayeredLayoutConfig = LAYERED_LAYOUT) -> dict[str, LayoutBox]:
        if (config.rankdir, config.align) != (RANKDIR_LR, ALIGN_UL):
            logger.warning(
                "rankdir=%s align=%s not supported; laying out %s/%s",
                config.rankdir,
                config.align,
                RANKDIR_LR,
                ALIGN_UL,
            )

        digraph: nx.DiGraph = nx.DiGraph()
        digraph.add_nodes_from(graph.nodes)
        for src, tgt in graph.edges:
            if src in graph.nodes and tgt in graph.nodes:
                digraph.add_edge(src, tgt)

        dag, _reversed = remove_cycles(digraph)
        layers = assign_layers(dag)
        aug = insert_dummy_nodes(dag, layers)
        ordering = minimise_crossings(aug)
        boxes = assign_coordinates(ordering, aug, graph.nodes, config)

        logger.debug(
            "layered layout: %d node(s), %d layer(s), %d dummy node(s)",
            len(boxes),
            aug.layer_count,
            len(aug.dummies),
        )
        return boxes
