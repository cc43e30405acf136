"""Funnel node kinds and the fixed per-kind lookup tables.

Titles and call-to-action labels are derived once at node creation from
these tables and never recomputed afterwards.
"""

from __future__ import annotations

from enum import StrEnum


class NodeKind(StrEnum):
    """Semantic role of a step in a sales funnel."""

    SALES = "sales"
    ORDER = "order"
    UPSELL = "upsell"
    DOWNSELL = "downsell"
    THANKYOU = "thankyou"


SNAPSHOT_VERSION = 1
NODE_TYPE = "funnel"
DEFAULT_EDGE_TYPE = "smoothstep"
DEFAULT_MARKER_TYPE = "arrowclosed"

PRIMARY_CTA: dict[NodeKind, str] = {
    NodeKind.SALES: "Go to checkout",
    NodeKind.ORDER: "Complete order",
    NodeKind.UPSELL: "Accept upsell",
    NodeKind.DOWNSELL: "Accept offer",
    NodeKind.THANKYOU: "Done",
}

# Palette labels, also used as the fixed titles of non-ordinal kinds.
KIND_LABELS: dict[NodeKind, str] = {
    NodeKind.SALES: "Sales Page",
    NodeKind.ORDER: "Order Page",
    NodeKind.UPSELL: "Upsell",
    NodeKind.DOWNSELL: "Downsell",
    NodeKind.THANKYOU: "Thank You",
}

ORDINAL_KINDS = frozenset({NodeKind.UPSELL, NodeKind.DOWNSELL})


def node_title(kind: NodeKind, ordinal: int) -> str:
    """Return the display title for a new node of *kind*.

    Only upsell and downsell titles carry the *ordinal*; the other kinds
    have fixed titles regardless of the counter value.
    """
    label = KIND_LABELS[kind]
    if kind in ORDINAL_KINDS:
        return f"{label} {ordinal}"
    return label


def parse_kind(value: str) -> NodeKind | None:
    """Parse a drag-source kind string, returning None when unrecognized."""
    try:
        return NodeKind(value.strip().lower())
    except ValueError:
        return None
