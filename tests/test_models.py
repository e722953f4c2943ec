"""Unit tests for the mind map models."""

from mindmap_core.models import (
    CENTRAL_TOPIC_COLOR,
    NODE_PALETTE,
    ConnectRequest,
    Document,
    Edge,
    Node,
    palette_color,
)
from mindmap_core.styles import CONNECTION_STYLES


def test_palette_cycles_by_creation_index():
    """Palette color repeats every five nodes."""
    assert len(NODE_PALETTE) == 5
    assert palette_color(0) == NODE_PALETTE[0]
    assert palette_color(2) == NODE_PALETTE[2]
    assert palette_color(7) == NODE_PALETTE[2]


def test_node_defaults():
    """A new node has no documents and the palette color."""
    node = Node(id="3", creation_index=3)
    assert node.documents == []
    assert node.color is None
    assert node.resolved_color == NODE_PALETTE[3]


def test_explicit_color_wins():
    node = Node(id="1", creation_index=1, color=CENTRAL_TOPIC_COLOR)
    assert node.resolved_color == CENTRAL_TOPIC_COLOR
    assert node.to_json_dict()["color"] == CENTRAL_TOPIC_COLOR


def test_with_document_returns_copy():
    """Appending a document leaves the original node untouched."""
    node = Node(id="2")
    doc = Document(name="notes.txt", type="text/plain", size=5, content="hello")

    updated = node.with_document(doc)

    assert node.documents == []
    assert updated.documents == [doc]
    assert updated.id == node.id


def test_document_is_text():
    assert Document(name="a.md", type="text/markdown").is_text
    assert not Document(name="a.pdf", type="application/pdf").is_text


def test_edge_copies_style():
    """An edge carries the rendering contract of its style."""
    dotted = CONNECTION_STYLES["dotted"]
    edge = Edge.from_style(id="e1", source="1", target="2", style=dotted)

    assert edge.style == "dotted"
    assert edge.stroke == dotted.stroke
    assert edge.stroke_dasharray == "5 5"
    assert edge.marker_end == "arrow-closed"
    assert edge.animated is False


def test_edge_json_omits_unset_handles():
    edge = Edge.from_style(id="e1", source="1", target="2", style=CONNECTION_STYLES["single"])
    assert "source_handle" not in edge.to_json_dict()

    edge = Edge.from_style(
        id="e2", source="1", target="2",
        style=CONNECTION_STYLES["single"], source_handle="right",
    )
    assert edge.to_json_dict()["source_handle"] == "right"


def test_connect_request_accepts_canvas_handle_names():
    request = ConnectRequest(**{"source": "1", "target": "2", "sourceHandle": "top", "targetHandle": "left"})
    assert request.source_handle == "top"
    assert request.target_handle == "left"
    assert request.style is None
