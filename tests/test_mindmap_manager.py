"""Tests for the mind map manager: registries, cascade and attachments."""

import asyncio

import pytest

from mindmap_core.documents import FileHandle
from mindmap_core.models import (
    CENTRAL_TOPIC_COLOR,
    NODE_PALETTE,
    EdgeChange,
    NodeChange,
    Position,
)
from mindmap_core.validation import IssueSeverity


def test_starts_with_central_topic(manager):
    nodes = manager.nodes
    assert len(nodes) == 1
    assert nodes[0].id == "1"
    assert nodes[0].label == "Central Topic"
    assert nodes[0].resolved_color == CENTRAL_TOPIC_COLOR
    assert nodes[0].position == Position(x=0, y=0)
    assert manager.edges == []


def test_create_node_defaults(manager):
    node = manager.create_node()
    assert node.id == "2"
    assert node.label == "New Topic"
    assert node.documents == []
    assert node.resolved_color == NODE_PALETTE[2]
    assert -250 <= node.position.x <= 250
    assert -250 <= node.position.y <= 250


def test_node_ids_never_reused(manager):
    """IDs stay unique even after deletions."""
    seen = {"1"}
    for _ in range(5):
        node = manager.create_node("topic")
        assert node.id not in seen
        seen.add(node.id)
        manager.delete_node(node.id)

    node = manager.create_node("after")
    assert node.id not in seen


def test_update_label_accepts_empty_text(manager):
    node = manager.create_node("A")
    updated = manager.update_label(node.id, "")
    assert updated.label == ""
    assert manager.get_node(node.id).label == ""


def test_set_color_and_restore_default(manager):
    node = manager.create_node("A")
    manager.set_color(node.id, "#123456")
    assert manager.get_node(node.id).resolved_color == "#123456"
    manager.set_color(node.id, None)
    assert manager.get_node(node.id).resolved_color == NODE_PALETTE[node.creation_index % 5]


def test_updates_on_missing_node_return_none(manager):
    assert manager.update_label("99", "x") is None
    assert manager.set_color("99", "#fff") is None
    assert manager.move_node("99", 1, 2) is None


def test_delete_cascades_only_incident_edges(manager):
    a = manager.create_node("A")
    b = manager.create_node("B")
    c = manager.create_node("C")
    ab = manager.connect(a.id, b.id, "single")
    bc = manager.connect(b.id, c.id, "single")
    ca = manager.connect(c.id, a.id, "single")
    bb = manager.connect(b.id, b.id, "single")

    assert manager.delete_node(b.id) is True

    remaining = {e.id for e in manager.edges}
    assert remaining == {ca.id}
    assert ab.id not in remaining and bc.id not in remaining and bb.id not in remaining
    assert manager.get_node(b.id) is None


def test_delete_is_idempotent(manager):
    node = manager.create_node("A")
    assert manager.delete_node(node.id) is True
    assert manager.delete_node(node.id) is False
    assert manager.delete_node("does-not-exist") is False


def test_connect_rejects_missing_endpoint(manager):
    a = manager.create_node("A")
    assert manager.connect(a.id, "42", "single") is None
    assert manager.connect("42", a.id, "single") is None
    assert manager.edges == []


def test_connect_allows_self_loops_and_parallel_edges(manager):
    a = manager.create_node("A")
    b = manager.create_node("B")
    first = manager.connect(a.id, b.id, "single")
    second = manager.connect(a.id, b.id, "single")
    loop = manager.connect(a.id, a.id, "thick")

    assert first.id != second.id
    assert loop.source == loop.target == a.id
    assert len(manager.edges) == 3


def test_connect_with_unknown_style_raises(manager):
    a = manager.create_node("A")
    with pytest.raises(ValueError):
        manager.connect(a.id, a.id, "zigzag")


def test_edge_style_fixed_at_creation(manager):
    """Changing the selected style does not restyle existing edges."""
    a = manager.create_node("A")
    b = manager.create_node("B")
    manager.select_connection_style("dotted")
    edge = manager.connect(a.id, b.id, manager.current_style)

    manager.select_connection_style("animated")

    assert manager.get_edge(edge.id).style == "dotted"
    assert manager.get_edge(edge.id).animated is False
    assert manager.current_style.id == "animated"


def test_select_unknown_style_keeps_current(manager):
    with pytest.raises(ValueError):
        manager.select_connection_style("zigzag")
    assert manager.current_style.id == "single"


def test_remove_edge(manager):
    a = manager.create_node("A")
    edge = manager.connect(a.id, "1", "double")
    assert manager.remove_edge(edge.id) is True
    assert manager.remove_edge(edge.id) is False
    assert manager.get_node(a.id) is not None


def test_apply_canvas_changes(manager):
    a = manager.create_node("A")
    b = manager.create_node("B")
    edge = manager.connect(a.id, b.id, "single")

    applied = manager.apply_node_changes([
        NodeChange(type="position", id=a.id, position=Position(x=10, y=-5)),
        NodeChange(type="select", id=a.id),
        NodeChange(type="remove", id="404"),
    ])
    assert applied == 1
    assert manager.get_node(a.id).position == Position(x=10, y=-5)

    assert manager.apply_edge_changes([EdgeChange(type="remove", id=edge.id)]) == 1
    assert manager.edges == []

    assert manager.apply_node_changes([NodeChange(type="remove", id=b.id)]) == 1
    assert manager.get_node(b.id) is None


def test_change_callbacks(manager):
    calls = []
    callback = lambda: calls.append(1)
    manager.on_change(callback)

    manager.create_node("A")
    manager.delete_node("404")
    assert len(calls) == 1

    manager.off_change(callback)
    manager.create_node("B")
    assert len(calls) == 1


def test_reset_restores_seed(manager):
    manager.create_node("A")
    manager.connect("1", "2", "single")
    manager.select_connection_style("thick")

    manager.reset()

    assert [n.label for n in manager.nodes] == ["Central Topic"]
    assert manager.edges == []
    assert manager.current_style.id == "single"


def test_validate_reports_no_errors_after_cascade(manager):
    a = manager.create_node("A")
    manager.connect(a.id, "1", "single")
    manager.connect(a.id, a.id, "single")
    manager.delete_node(a.id)

    assert not [i for i in manager.validate() if i.severity == IssueSeverity.ERROR]


# --- Attachments ---


@pytest.mark.asyncio
async def test_attach_valid_and_rejected_files(manager):
    """Invalid files are rejected one by one; the rest attach in order."""
    node = manager.create_node("Docs")
    files = [
        FileHandle.from_bytes("a.txt", "text/plain", b"alpha"),
        FileHandle.from_bytes("virus.exe", "application/x-msdownload", b"MZ"),
        FileHandle.from_bytes("b.pdf", "application/pdf", b"%PDF"),
        FileHandle.from_bytes("c.md", "text/markdown", b"# c"),
        FileHandle.from_bytes("d.png", "image/png", b"\x89PNG"),
    ]

    result = await manager.attach_documents(node.id, files)

    assert [r.file_name for r in result.rejected] == ["virus.exe", "d.png"]
    assert [d.name for d in manager.get_node(node.id).documents] == ["a.txt", "b.pdf", "c.md"]
    assert len(result.attached) == 3
    assert result.discarded == []


@pytest.mark.asyncio
async def test_attach_only_exe_leaves_documents_unchanged(manager):
    node = manager.create_node("Docs")
    result = await manager.attach_documents(
        node.id, [FileHandle.from_bytes("setup.exe", "application/x-msdownload", b"MZ")]
    )
    assert len(result.rejected) == 1
    assert manager.get_node(node.id).documents == []


@pytest.mark.asyncio
async def test_attach_replaces_node_record(manager):
    """Attachment produces a new node record instead of mutating the old one."""
    node = manager.create_node("Docs")
    await manager.attach_documents(node.id, [FileHandle.from_bytes("a.txt", "text/plain", b"a")])

    assert node.documents == []
    assert len(manager.get_node(node.id).documents) == 1


@pytest.mark.asyncio
async def test_slow_read_does_not_block_other_files(manager):
    node = manager.create_node("Docs")
    release = asyncio.Event()

    async def slow_read():
        await release.wait()
        return b"slow"

    slow = FileHandle(name="slow.txt", type="text/plain", read=slow_read, size=4)
    fast = FileHandle.from_bytes("fast.txt", "text/plain", b"fast")

    attach = asyncio.create_task(manager.attach_documents(node.id, [slow, fast]))
    for _ in range(5):
        await asyncio.sleep(0)

    assert [d.name for d in manager.get_node(node.id).documents] == ["fast.txt"]

    release.set()
    result = await attach
    assert [d.name for d in manager.get_node(node.id).documents] == ["fast.txt", "slow.txt"]
    assert len(result.attached) == 2


@pytest.mark.asyncio
async def test_read_finishing_after_delete_is_discarded(manager):
    node = manager.create_node("Doomed")
    release = asyncio.Event()

    async def slow_read():
        await release.wait()
        return b"late"

    attach = asyncio.create_task(manager.attach_documents(
        node.id, [FileHandle(name="late.txt", type="text/plain", read=slow_read)]
    ))
    await asyncio.sleep(0)

    manager.delete_node(node.id)
    release.set()
    result = await attach

    assert result.attached == []
    assert result.discarded == ["late.txt"]
    assert manager.get_node(node.id) is None
    assert all(n.id != node.id for n in manager.nodes)


@pytest.mark.asyncio
async def test_open_attached_document(manager):
    node = manager.create_node("Docs")
    await manager.attach_documents(node.id, [
        FileHandle.from_bytes("a.txt", "text/plain", b"plain words"),
        FileHandle.from_bytes("b.pdf", "application/pdf", b"%PDF-bytes"),
    ])

    assert manager.open_document(node.id, 0).body == b"plain words"
    assert manager.open_document(node.id, 1).body == b"%PDF-bytes"
    assert manager.open_document(node.id, 2) is None
    assert manager.open_document("404", 0) is None


def test_reset_does_not_reuse_ids(manager):
    before = manager.create_node("A")
    manager.connect(before.id, "1", "single")

    manager.reset()
    seed = manager.nodes[0]
    fresh = manager.create_node("Fresh")
    edge = manager.connect(fresh.id, seed.id, "single")

    assert seed.id not in {"1", before.id}
    assert fresh.id not in {"1", before.id, seed.id}
    assert edge.id != "e1"


@pytest.mark.asyncio
async def test_read_pending_across_reset_is_discarded(manager):
    node = manager.create_node("Old")
    release = asyncio.Event()

    async def slow_read():
        await release.wait()
        return b"late"

    attach = asyncio.create_task(manager.attach_documents(
        node.id, [FileHandle(name="late.txt", type="text/plain", read=slow_read)]
    ))
    await asyncio.sleep(0)

    manager.reset()
    fresh = manager.create_node("Fresh")
    release.set()
    result = await attach

    assert manager.get_node(fresh.id).documents == []
    assert all(n.documents == [] for n in manager.nodes)
    assert result.discarded == ["late.txt"]


@pytest.mark.asyncio
async def test_failed_read_is_reported_per_file(manager):
    """A read that raises does not cost the rest of the batch."""
    node = manager.create_node("Docs")

    async def broken_read():
        raise OSError("stream reset")

    files = [
        FileHandle(name="broken.txt", type="text/plain", read=broken_read),
        FileHandle.from_bytes("x.exe", "application/x-msdownload", b"MZ"),
        FileHandle.from_bytes("ok.txt", "text/plain", b"fine"),
    ]

    result = await manager.attach_documents(node.id, files)

    assert [r.file_name for r in result.rejected] == ["x.exe"]
    assert [f.file_name for f in result.failed] == ["broken.txt"]
    assert "stream reset" in result.failed[0].message
    assert [d.name for d in result.attached] == ["ok.txt"]
    assert [d.name for d in manager.get_node(node.id).documents] == ["ok.txt"]
    assert result.to_dict()["failed"][0]["file_name"] == "broken.txt"
