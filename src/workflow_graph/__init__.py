"""workflow_graph: read-only graph queries for a workflow block editor."""

from __future__ import annotations

from workflow_graph.ancestry import get_before_nodes_in_same_branch
from workflow_graph.branches import IF_ELSE_BRANCHES, build_branch_table, is_branching, resolve_branches
from workflow_graph.config import LAYERED_LAYOUT, LayeredLayoutConfig
from workflow_graph.errors import SnapshotError, WorkflowGraphError
from workflow_graph.graph import WorkflowGraph, connected_edges, get_outgoers
from workflow_graph.layered import LayoutEngine, SugiyamaLayoutEngine
from workflow_graph.layout import build_layout_input, get_layered_layout, get_nodes_position_map
from workflow_graph.leaves import get_tree_leaf_nodes
from workflow_graph.traversal import nodes_level_order_traverse, traverse
from workflow_graph.types import (
    BlockType,
    Branch,
    Edge,
    GridIndex,
    LayoutBox,
    LayoutInput,
    Node,
    Position,
    Snapshot,
    Visit,
    can_run_by_single,
)

__all__ = [
    "IF_ELSE_BRANCHES",
    "LAYERED_LAYOUT",
    "BlockType",
    "Branch",
    "Edge",
    "GridIndex",
    "LayeredLayoutConfig",
    "LayoutBox",
    "LayoutEngine",
    "LayoutInput",
    "Node",
    "Position",
    "Snapshot",
    "SnapshotError",
    "SugiyamaLayoutEngine",
    "Visit",
    "WorkflowGraph",
    "WorkflowGraphError",
    "build_branch_table",
    "build_layout_input",
    "can_run_by_single",
    "connected_edges",
    "get_before_nodes_in_same_branch",
    "get_layered_layout",
    "get_nodes_position_map",
    "get_outgoers",
    "get_tree_leaf_nodes",
    "is_branching",
    "nodes_level_order_traverse",
    "resolve_branches",
    "traverse",
]
