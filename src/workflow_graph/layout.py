"""Layout coordinate builder.

Two strategies produce a node id -> position map:

  - simple: the level-order traversal's (depth, breadth) used as a grid cell;
  - layered: node sizes and edge pairs handed to a ``LayoutEngine``
    (left-to-right, upper-left aligned, 64 units apart).
"""

from __future__ import annotations

import logging

from workflow_graph.config import LAYERED_LAYOUT, LayeredLayoutConfig
from workflow_graph.graph import WorkflowGraph
from workflow_graph.layered import LayoutEngine, SugiyamaLayoutEngine
from workflow_graph.traversal import traverse
from workflow_graph.types import GridIndex, LayoutBox, LayoutInput, Snapshot, Visit

logger = logging.getLogger(__name__)


def get_nodes_position_map(snapshot: Snapshot | WorkflowGraph) -> dict[str, GridIndex]:
    """Simple strategy: x = depth, y = breadth for every node reachable from Start.

    Returns an empty map while the snapshot has no Start node.
    """
    graph = snapshot if isinstance(snapshot, WorkflowGraph) else WorkflowGraph(snapshot)
    position_map: dict[str, GridIndex] = {}

    start = graph.start_node
    if start is None:
        logger.debug("no start node; empty position map")
        return position_map

    def place(visit: Visit) -> None:
        position_map[visit.node.id] = GridIndex(x=visit.depth, y=visit.breadth)

    traverse(start, graph, place)
    return position_map


def build_layout_input(
    snapshot: Snapshot | WorkflowGraph,
    config: LayeredLayoutConfig = LAYERED_LAYOUT,
) -> LayoutInput:
    """Collect node sizes and edge pairs for a layered layout engine.

    Nodes the editor has not measured yet get the configured default size.
    Edges touching unknown node ids are left out.
    """
    if isinstance(snapshot, WorkflowGraph):
        snapshot = snapshot.snapshot
    layout_input = LayoutInput()
    for node in snapshot.nodes:
        width = node.width if node.width is not None else float(config.default_width)
        height = node.height if node.height is not None else float(config.default_height)
        layout_input.nodes.setdefault(node.id, (width, height))

    for edge in snapshot.edges:
        if edge.source in layout_input.nodes and edge.target in layout_input.nodes:
            layout_input.edges.append((edge.source, edge.target))
    return layout_input


def get_layered_layout(
    snapshot: Snapshot | WorkflowGraph,
    engine: LayoutEngine | None = None,
    config: LayeredLayoutConfig = LAYERED_LAYOUT,
) -> dict[str, LayoutBox]:
    """Layered strategy: delegate to ``engine`` (Sugiyama by default)."""
    engine = engine or SugiyamaLayoutEngine()
    return engine.layout(build_layout_input(snapshot, config), config)
