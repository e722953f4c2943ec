"""
Connection style catalog.

Every edge is drawn with one of a fixed set of connection styles. The catalog
is static: styles cannot be added or edited at runtime, and an edge copies
the rendering contract of its style when it is created.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MarkerType(str, Enum):
    """SVG marker definitions the canvas provides for edge endpoints."""
    ARROW = "arrow"
    ARROW_CLOSED = "arrow-closed"


class ConnectionStyleId(str, Enum):
    """Identifiers of the available connection styles."""
    SINGLE = "single"
    DOUBLE = "double"
    DOTTED = "dotted"
    THICK = "thick"
    ANIMATED = "animated"


class ConnectionStyle(BaseModel):
    """An immutable catalog entry describing how an edge is rendered."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    stroke: str
    stroke_width: float = 2.0
    stroke_dasharray: Optional[str] = None
    marker_start: Optional[str] = None
    marker_end: Optional[str] = None
    animated: bool = False


CONNECTION_STYLES: dict[str, ConnectionStyle] = {
    style.id: style
    for style in (
        ConnectionStyle(
            id=ConnectionStyleId.SINGLE.value,
            label="Arrow →",
            stroke="#4CAF50",
            marker_end=MarkerType.ARROW.value,
        ),
        ConnectionStyle(
            id=ConnectionStyleId.DOUBLE.value,
            label="Double ↔",
            stroke="#2196F3",
            marker_start=MarkerType.ARROW.value,
            marker_end=MarkerType.ARROW.value,
        ),
        ConnectionStyle(
            id=ConnectionStyleId.DOTTED.value,
            label="Dotted ⋯→",
            stroke="#9C27B0",
            stroke_dasharray="5 5",
            marker_end=MarkerType.ARROW_CLOSED.value,
        ),
        ConnectionStyle(
            id=ConnectionStyleId.THICK.value,
            label="Thick ⇒",
            stroke="#FF9800",
            stroke_width=4.0,
            marker_end=MarkerType.ARROW_CLOSED.value,
        ),
        ConnectionStyle(
            id=ConnectionStyleId.ANIMATED.value,
            label="Animated ⇢",
            stroke="#F44336",
            marker_end=MarkerType.ARROW.value,
            animated=True,
        ),
    )
}

DEFAULT_CONNECTION_STYLE = CONNECTION_STYLES[ConnectionStyleId.SINGLE.value]


def get_connection_style(style: "str | ConnectionStyle") -> ConnectionStyle:
    """
    Resolve a style identifier to its catalog entry.

    Raises:
        ValueError: if the identifier is not in the catalog
    """
    if isinstance(style, ConnectionStyle):
        style = style.id
    if isinstance(style, ConnectionStyleId):
        style = style.value
    try:
        return CONNECTION_STYLES[style]
    except KeyError:
        raise ValueError(f"Unknown connection style: {style}") from None


def list_connection_styles() -> list[ConnectionStyle]:
    """Return the catalog in display order."""
    return list(CONNECTION_STYLES.values())
