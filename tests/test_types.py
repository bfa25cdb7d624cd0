"""Tests for types.py: block types, editor payload ingestion, snapshots."""

from __future__ import annotations

import pytest

from workflow_graph.errors import SnapshotError, WorkflowGraphError
from workflow_graph.layout import get_nodes_position_map
from workflow_graph.types import (
    BlockType,
    Branch,
    Edge,
    GridIndex,
    LayoutBox,
    Node,
    Position,
    Snapshot,
    can_run_by_single,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_payload() -> dict:
    """A small editor document: start -> question classifier -> two answers."""
    return {
        "nodes": [
            {"id": "start", "data": {"type": "start", "title": "Start"}, "position": {"x": 0, "y": 0}},
            {
                "id": "qc",
                "data": {
                    "type": "question-classifier",
                    "title": "Classify",
                    "classes": [{"id": "billing", "name": "Billing"}, {"id": "tech", "name": "Tech"}],
                },
                "width": 240,
                "height": 120,
            },
            {"id": "a1", "data": {"type": "direct-answer"}},
            {"id": "a2", "data": {"type": "direct-answer"}},
        ],
        "edges": [
            {"id": "e1", "source": "start", "target": "qc"},
            {"id": "e2", "source": "qc", "target": "a1", "sourceHandle": "billing"},
            {"source": "qc", "target": "a2", "sourceHandle": "tech", "targetHandle": "target"},
        ],
    }


# ─── BlockType ────────────────────────────────────────────────────────────────


class TestBlockType:
    def test_values_match_editor_tags(self):
        assert BlockType("if-else") is BlockType.IfElse
        assert BlockType("question-classifier") is BlockType.QuestionClassifier
        assert BlockType.HttpRequest.value == "http-request"

    def test_single_run_types(self):
        runnable = {t for t in BlockType if can_run_by_single(t)}
        assert runnable == {
            BlockType.LLM,
            BlockType.KnowledgeRetrieval,
            BlockType.Code,
            BlockType.TemplateTransform,
            BlockType.QuestionClassifier,
            BlockType.HttpRequest,
            BlockType.Tool,
        }

    def test_start_and_branching_cannot_run_alone(self):
        assert not can_run_by_single(BlockType.Start)
        assert not can_run_by_single(BlockType.IfElse)
        assert not can_run_by_single(BlockType.End)


# ─── Ingestion ────────────────────────────────────────────────────────────────


class TestSnapshotFromDict:
    def test_nodes_and_edges_parsed(self):
        snapshot = Snapshot.from_dict(make_payload())
        assert [n.id for n in snapshot.nodes] == ["start", "qc", "a1", "a2"]
        assert len(snapshot.edges) == 3

    def test_classifier_classes_keep_authored_order(self):
        snapshot = Snapshot.from_dict(make_payload())
        qc = snapshot.nodes[1]
        assert qc.classes == (Branch("billing", "Billing"), Branch("tech", "Tech"))

    def test_geometry_parsed(self):
        snapshot = Snapshot.from_dict(make_payload())
        assert snapshot.nodes[0].position == Position(0.0, 0.0)
        assert snapshot.nodes[1].width == 240.0
        assert snapshot.nodes[1].height == 120.0
        assert snapshot.nodes[2].width is None

    def test_edge_handles_parsed(self):
        snapshot = Snapshot.from_dict(make_payload())
        e2, e3 = snapshot.edges[1], snapshot.edges[2]
        assert e2.source_handle == "billing"
        assert e2.target_handle is None
        assert e3.target_handle == "target"

    def test_edge_id_defaults_from_endpoints(self):
        snapshot = Snapshot.from_dict(make_payload())
        assert snapshot.edges[2].id == "qc-a2"

    def test_empty_payload(self):
        snapshot = Snapshot.from_dict({})
        assert snapshot.nodes == ()
        assert snapshot.edges == ()
        assert snapshot.start_node is None

    def test_unknown_block_type_raises(self):
        payload = {"nodes": [{"id": "x", "data": {"type": "webhook"}}]}
        with pytest.raises(SnapshotError) as exc:
            Snapshot.from_dict(payload)
        assert exc.value.path == "nodes[0].data.type"

    def test_missing_node_id_raises(self):
        with pytest.raises(SnapshotError):
            Snapshot.from_dict({"nodes": [{"data": {"type": "llm"}}]})

    def test_edge_without_target_raises(self):
        payload = {"nodes": [], "edges": [{"id": "e", "source": "a"}]}
        with pytest.raises(SnapshotError) as exc:
            Snapshot.from_dict(payload)
        assert "edges[0].target" in str(exc.value)

    def test_bad_position_raises(self):
        payload = {"nodes": [{"id": "a", "data": {"type": "llm"}, "position": {"x": "left"}}]}
        with pytest.raises(SnapshotError):
            Snapshot.from_dict(payload)

    def test_bad_width_raises(self):
        payload = {"nodes": [{"id": "a", "data": {"type": "llm"}, "width": "wide"}]}
        with pytest.raises(SnapshotError):
            Snapshot.from_dict(payload)

    def test_classifier_class_without_id_raises(self):
        payload = {"nodes": [{"id": "q", "data": {"type": "question-classifier", "classes": [{"name": "x"}]}}]}
        with pytest.raises(SnapshotError):
            Snapshot.from_dict(payload)

    def test_non_object_node_item_raises(self):
        with pytest.raises(SnapshotError) as exc:
            Snapshot.from_dict({"nodes": ["oops"]})
        assert exc.value.path == "nodes[0]"

    def test_non_object_edge_item_raises(self):
        with pytest.raises(SnapshotError) as exc:
            Snapshot.from_dict({"edges": ["oops"]})
        assert exc.value.path == "edges[0]"

    def test_non_list_classes_raises(self):
        payload = {"nodes": [{"id": "q", "data": {"type": "question-classifier", "classes": 5}}]}
        with pytest.raises(SnapshotError) as exc:
            Snapshot.from_dict(payload)
        assert exc.value.path == "nodes[0].data.classes"

    def test_non_list_nodes_raises(self):
        with pytest.raises(SnapshotError):
            Snapshot.from_dict({"nodes": 3})

    def test_non_object_payload_raises(self):
        with pytest.raises(SnapshotError):
            Snapshot.from_dict(["nodes"])  # type: ignore[arg-type]

    def test_integer_handles_become_strings(self):
        edge = Edge.from_dict({"source": "a", "target": "b", "sourceHandle": 2, "targetHandle": 7})
        assert edge.source_handle == "2"
        assert edge.target_handle == "7"

    def test_object_handle_raises(self):
        with pytest.raises(SnapshotError) as exc:
            Edge.from_dict({"source": "a", "target": "b", "sourceHandle": {"id": 1}}, "edges[0]")
        assert exc.value.path == "edges[0].sourceHandle"

    def test_numeric_class_ids_keep_authored_order(self):
        payload = {
            "nodes": [
                {"id": "start", "data": {"type": "start"}},
                {"id": "qc", "data": {"type": "question-classifier", "classes": [{"id": 1}, {"id": 2}]}},
                {"id": "x", "data": {"type": "llm"}},
                {"id": "y", "data": {"type": "llm"}},
            ],
            "edges": [
                {"source": "start", "target": "qc"},
                {"source": "qc", "target": "y", "sourceHandle": 2},
                {"source": "qc", "target": "x", "sourceHandle": 1},
            ],
        }
        positions = get_nodes_position_map(Snapshot.from_dict(payload))
        assert positions["x"] == GridIndex(2, 0)
        assert positions["y"] == GridIndex(2, 1)

    def test_snapshot_error_is_value_error(self):
        assert issubclass(SnapshotError, ValueError)
        assert issubclass(SnapshotError, WorkflowGraphError)


# ─── Snapshot ─────────────────────────────────────────────────────────────────


class TestSnapshot:
    def test_start_node_found(self):
        snapshot = Snapshot.of(
            [Node("a", BlockType.LLM), Node("s", BlockType.Start)],
            [Edge("e", "s", "a")],
        )
        assert snapshot.start_node is not None
        assert snapshot.start_node.id == "s"

    def test_start_node_missing(self):
        snapshot = Snapshot.of([Node("a", BlockType.LLM)], [])
        assert snapshot.start_node is None

    def test_snapshot_is_frozen(self):
        snapshot = Snapshot.of([], [])
        with pytest.raises(AttributeError):
            snapshot.nodes = ()  # type: ignore[misc]


class TestLayoutBox:
    def test_center(self):
        box = LayoutBox(x=10, y=20, width=100, height=40)
        assert box.center == Position(60, 40)
