"""Exceptions raised by workflow_graph.

Graph queries never raise; they degrade to empty results. Only ingestion of
editor payloads (``Snapshot.from_dict`` and friends) reports failures.
"""

from __future__ import annotations


class WorkflowGraphError(Exception):
    """Base class for all workflow_graph errors."""


class SnapshotError(WorkflowGraphError, ValueError):
    """An editor payload could not be turned into a snapshot.

    Attributes:
        path: Location of the offending value inside the payload, e.g.
            ``"nodes[3].data.type"``.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
