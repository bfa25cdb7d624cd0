"""Core data model: block types, nodes, edges and immutable snapshots.

A snapshot is what the editor hands over for one query. Nothing in this
package mutates it; derived data (branch tables, coordinates, position maps)
lives in the query layer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from workflow_graph.errors import SnapshotError


class BlockType(str, Enum):
    """Kind tag carried by every node."""

    Start = "start"
    End = "end"
    DirectAnswer = "direct-answer"
    LLM = "llm"
    KnowledgeRetrieval = "knowledge-retrieval"
    QuestionClassifier = "question-classifier"
    IfElse = "if-else"
    Code = "code"
    TemplateTransform = "template-transform"
    HttpRequest = "http-request"
    VariableAssigner = "variable-assigner"
    Tool = "tool"


_SINGLE_RUN_TYPES = frozenset(
    {
        BlockType.LLM,
        BlockType.KnowledgeRetrieval,
        BlockType.Code,
        BlockType.TemplateTransform,
        BlockType.QuestionClassifier,
        BlockType.HttpRequest,
        BlockType.Tool,
    }
)


def can_run_by_single(block_type: BlockType) -> bool:
    """Whether a block of this type can be run on its own from the editor."""
    return block_type in _SINGLE_RUN_TYPES


@dataclass(frozen=True)
class Branch:
    """A named output path of a branching node."""

    id: str
    name: str = ""


@dataclass(frozen=True)
class Position:
    """A point on the canvas."""

    x: float
    y: float


@dataclass(frozen=True)
class Node:
    """A block in the workflow graph.

    ``classes`` is the authored class list of a question classifier, kept in
    authoring order. It is empty for every other block type.
    """

    id: str
    type: BlockType
    title: str = ""
    desc: str = ""
    position: Position | None = None
    width: float | None = None
    height: float | None = None
    classes: tuple[Branch, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], path: str = "node") -> Node:
        """Build a node from the editor's JSON shape.

        Expected keys: ``id``, ``data.type``; optional ``data.title``,
        ``data.desc``, ``data.classes``, ``position``, ``width``, ``height``.
        """
        if not isinstance(payload, Mapping):
            raise SnapshotError("node must be an object", path)

        node_id = payload.get("id")
        if not isinstance(node_id, str) or not node_id:
            raise SnapshotError("node id must be a non-empty string", f"{path}.id")

        data = payload.get("data") or {}
        if not isinstance(data, Mapping):
            raise SnapshotError("node data must be an object", f"{path}.data")

        raw_type = data.get("type")
        try:
            block_type = BlockType(raw_type)
        except ValueError:
            raise SnapshotError(f"unknown block type {raw_type!r}", f"{path}.data.type") from None

        classes: tuple[Branch, ...] = ()
        if block_type is BlockType.QuestionClassifier:
            raw_classes = data.get("classes") or []
            if not isinstance(raw_classes, list):
                raise SnapshotError("classes must be a list", f"{path}.data.classes")
            classes = tuple(_branch_from_dict(item, f"{path}.data.classes[{i}]") for i, item in enumerate(raw_classes))

        position = None
        raw_position = payload.get("position")
        if raw_position is not None:
            try:
                position = Position(x=float(raw_position["x"]), y=float(raw_position["y"]))
            except (KeyError, TypeError, ValueError):
                raise SnapshotError("position needs numeric x and y", f"{path}.position") from None

        return cls(
            id=node_id,
            type=block_type,
            title=str(data.get("title") or ""),
            desc=str(data.get("desc") or ""),
            position=position,
            width=_optional_number(payload.get("width"), f"{path}.width"),
            height=_optional_number(payload.get("height"), f"{path}.height"),
            classes=classes,
        )


@dataclass(frozen=True)
class Edge:
    """A directed connection between two nodes.

    ``source_handle`` selects the output branch of the source node,
    ``target_handle`` selects the input slot of the target node.
    """

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], path: str = "edge") -> Edge:
        """Build an edge from the editor's JSON shape (camelCase handles).

        Handles are compared against branch ids, which are strings, so numeric
        handles are converted.
        """
        if not isinstance(payload, Mapping):
            raise SnapshotError("edge must be an object", path)

        source = payload.get("source")
        target = payload.get("target")
        if not isinstance(source, str) or not source:
            raise SnapshotError("edge source must be a non-empty string", f"{path}.source")
        if not isinstance(target, str) or not target:
            raise SnapshotError("edge target must be a non-empty string", f"{path}.target")

        edge_id = payload.get("id") or f"{source}-{target}"
        return cls(
            id=str(edge_id),
            source=source,
            target=target,
            source_handle=_optional_handle(payload.get("sourceHandle"), f"{path}.sourceHandle"),
            target_handle=_optional_handle(payload.get("targetHandle"), f"{path}.targetHandle"),
        )


@dataclass(frozen=True)
class Snapshot:
    """The full node and edge set at one point in time."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    @classmethod
    def of(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> Snapshot:
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Snapshot:
        """Build a snapshot from ``{"nodes": [...], "edges": [...]}``."""
        if not isinstance(payload, Mapping):
            raise SnapshotError("snapshot must be an object")
        raw_nodes = payload.get("nodes") or []
        raw_edges = payload.get("edges") or []
        if not isinstance(raw_nodes, list):
            raise SnapshotError("nodes must be a list", "nodes")
        if not isinstance(raw_edges, list):
            raise SnapshotError("edges must be a list", "edges")

        nodes = tuple(Node.from_dict(item, f"nodes[{i}]") for i, item in enumerate(raw_nodes))
        edges = tuple(Edge.from_dict(item, f"edges[{i}]") for i, item in enumerate(raw_edges))
        return cls(nodes=nodes, edges=edges)

    @property
    def start_node(self) -> Node | None:
        """The first node of type Start, or None while none is placed."""
        return next((node for node in self.nodes if node.type is BlockType.Start), None)


@dataclass(frozen=True)
class Visit:
    """A node reached by the level-order traversal with its coordinate."""

    node: Node
    depth: int
    breadth: int


@dataclass(frozen=True)
class GridIndex:
    """Logical grid cell produced by the simple layout strategy."""

    x: int
    y: int


@dataclass
class LayoutInput:
    """Graph handed to a layered layout engine.

    nodes: node id -> (width, height), in snapshot order.
    edges: (source, target) pairs, in snapshot order.
    """

    nodes: dict[str, tuple[float, float]] = field(default_factory=dict)
    edges: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class LayoutBox:
    """A node placed by the layered layout: upper-left corner plus size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Position:
        return Position(x=self.x + self.width / 2, y=self.y + self.height / 2)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _branch_from_dict(item: Any, path: str) -> Branch:
    if not isinstance(item, Mapping) or not item.get("id"):
        raise SnapshotError("class needs an id", path)
    return Branch(id=str(item["id"]), name=str(item.get("name") or ""))


def _optional_handle(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise SnapshotError(f"handle must be a string or integer, got {value!r}", path)
    return str(value)


def _optional_number(value: Any, path: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotError(f"expected a number, got {value!r}", path)
    return float(value)
