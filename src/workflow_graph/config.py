"""Layout configuration.

The layered layout is always left-to-right, upper-left aligned, with the same
separation between nodes of a rank and between ranks.
"""

from __future__ import annotations

from dataclasses import dataclass

# ─── Geometry Constants ───────────────────────────────────────────────────────

NODE_SEP: int = 64  # gap between nodes stacked in the same rank
RANK_SEP: int = 64  # gap between adjacent ranks
DEFAULT_NODE_WIDTH: int = 240  # used when the editor has not measured a node yet
DEFAULT_NODE_HEIGHT: int = 100

RANKDIR_LR = "LR"
ALIGN_UL = "UL"


@dataclass(frozen=True)
class LayeredLayoutConfig:
    """Settings handed to a layered layout engine."""

    rankdir: str = RANKDIR_LR
    align: str = ALIGN_UL
    nodesep: int = NODE_SEP
    ranksep: int = RANK_SEP
    default_width: int = DEFAULT_NODE_WIDTH
    default_height: int = DEFAULT_NODE_HEIGHT


LAYERED_LAYOUT = LayeredLayoutConfig()
