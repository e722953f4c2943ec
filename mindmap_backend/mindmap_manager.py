"""
Mind Map Manager - Owner of the mind map state.

This module implements:
- The node registry (insertion ordered, O(1) lookups)
- The edge registry, with cascade removal when a node is deleted
- The connection style currently selected for new edges
- Document attachment with per-file validation and async reads
- Change callbacks for real-time sync

All mutations run on the event loop thread; only file reads suspend.
"""

import asyncio
import logging
import random
from typing import Callable, Iterable, Optional

from mindmap_core.documents import (
    AttachmentResult,
    DocumentView,
    FileHandle,
    check_file,
    open_document,
    read_document,
    read_failure,
)
from mindmap_core.models import (
    CENTRAL_TOPIC_COLOR,
    CENTRAL_TOPIC_LABEL,
    NEW_TOPIC_LABEL,
    Document,
    Edge,
    EdgeChange,
    Node,
    NodeChange,
    Position,
)
from mindmap_core.styles import (
    DEFAULT_CONNECTION_STYLE,
    ConnectionStyle,
    get_connection_style,
    list_connection_styles,
)
from mindmap_core.summary import MindMapSummary, generate_summary
from mindmap_core.validation import ValidationIssue, validate_mindmap

from .node_view import NodeView

logger = logging.getLogger(__name__)


class MindMapManager:
    """
    Manages the mind map's nodes, edges and attachments.

    Features:
    - Monotonic node and edge IDs, never reused within a session
    - Cascade deletion of edges when their endpoint is deleted
    - Node records are replaced, never mutated, when documents arrive
    - Change callbacks for real-time sync
    """

    def __init__(self, spawn_radius: float = 250.0, rng: Optional[random.Random] = None):
        self._spawn_radius = spawn_radius
        self._rng = rng or random.Random()
        self._on_change_callbacks: list[Callable] = []

        # Registries (dicts keep insertion order)
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._next_node = 0
        self._next_edge = 0

        self._current_style: ConnectionStyle = DEFAULT_CONNECTION_STYLE

        self._seed()

    def _seed(self):
        """Create the Central Topic node."""
        self.create_node(
            label=CENTRAL_TOPIC_LABEL,
            color=CENTRAL_TOPIC_COLOR,
            x=0,
            y=0,
            notify=False,
        )

    # --- Properties ---

    @property
    def nodes(self) -> list[Node]:
        """Snapshot of the nodes in registry order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        """Snapshot of the edges in insertion order."""
        return list(self._edges.values())

    @property
    def current_style(self) -> ConnectionStyle:
        """The connection style new edges are drawn with."""
        return self._current_style

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for mind map changes."""
        self._on_change_callbacks.append(callback)

    def off_change(self, callback: Callable):
        """Remove a previously registered change callback."""
        if callback in self._on_change_callbacks:
            self._on_change_callbacks.remove(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    # --- Lifecycle ---

    def reset(self):
        """Clear everything and start over with only the Central Topic."""
        self._nodes.clear()
        self._edges.clear()
        # ID counters are never rewound within a session
        self._current_style = DEFAULT_CONNECTION_STYLE
        self._seed()
        self._notify_change()

    # --- Node Operations ---

    def _random_coordinate(self) -> float:
        return self._rng.uniform(-self._spawn_radius, self._spawn_radius)

    def create_node(
        self,
        label: str = NEW_TOPIC_LABEL,
        color: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        notify: bool = True,
    ) -> Node:
        """Add a new topic. Missing coordinates are randomized around the origin."""
        self._next_node += 1
        node = Node(
            id=str(self._next_node),
            label=label,
            color=color,
            creation_index=self._next_node,
            position=Position(
                x=self._random_coordinate() if x is None else x,
                y=self._random_coordinate() if y is None else y,
            ),
        )
        self._nodes[node.id] = node
        logger.debug("Created node %s", node.id)
        if notify:
            self._notify_change()
        return node

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(1) lookup)."""
        return self._nodes.get(node_id)

    def _replace_node(self, node: Node) -> Node:
        """Single path through which existing node records change."""
        self._nodes[node.id] = node
        self._notify_change()
        return node

    def update_label(self, node_id: str, text: str) -> Optional[Node]:
        """Set a node's label. Any text, including empty, is accepted."""
        node = self._nodes.get(node_id)
        if node is None:
            return None
        return self._replace_node(node.model_copy(update={"label": text}))

    def set_color(self, node_id: str, color: Optional[str]) -> Optional[Node]:
        """Override the palette color. None restores the default."""
        node = self._nodes.get(node_id)
        if node is None:
            return None
        return self._replace_node(node.model_copy(update={"color": color}))

    def move_node(self, node_id: str, x: float, y: float) -> Optional[Node]:
        """Store a position reported by the canvas."""
        node = self._nodes.get(node_id)
        if node is None:
            return None
        return self._replace_node(node.model_copy(update={"position": Position(x=x, y=y)}))

    def delete_node(self, node_id: str) -> bool:
        """
        Delete a node and every edge that starts or ends at it.

        Unknown IDs are ignored, so deleting twice is harmless.
        """
        if self._nodes.pop(node_id, None) is None:
            return False

        connected = [
            edge_id for edge_id, edge in self._edges.items()
            if edge.source == node_id or edge.target == node_id
        ]
        for edge_id in connected:
            del self._edges[edge_id]

        logger.info("Deleted node %s and %d connected edge(s)", node_id, len(connected))
        self._notify_change()
        return True

    def apply_node_changes(self, changes: Iterable[NodeChange]) -> int:
        """
        Apply a change list emitted by the canvas.

        Supports "position" and "remove" changes; others are ignored.
        Returns the number of changes applied.
        """
        applied = 0
        for change in changes:
            if change.type == "remove":
                applied += int(self.delete_node(change.id))
            elif change.type == "position" and change.position is not None:
                if self.move_node(change.id, change.position.x, change.position.y):
                    applied += 1
            else:
                logger.debug("Ignoring node change %s for %s", change.type, change.id)
        return applied

    def node_view(self, node_id: str, request_delete: Callable[[str], None]) -> Optional[NodeView]:
        """Build the node-local view, wired to the given delete-request channel."""
        node = self._nodes.get(node_id)
        if node is None:
            return None
        return NodeView(node, request_delete)

    # --- Edge Operations ---

    def select_connection_style(self, style: "str | ConnectionStyle") -> ConnectionStyle:
        """
        Change the style used for edges drawn from now on.

        Raises:
            ValueError: if the style is not in the catalog
        """
        self._current_style = get_connection_style(style)
        self._notify_change()
        return self._current_style

    def connect(
        self,
        source: str,
        target: str,
        style: "str | ConnectionStyle",
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
    ) -> Optional[Edge]:
        """
        Connect two nodes with the given style.

        Self-loops and parallel edges are allowed. Returns None, creating
        nothing, if either endpoint does not exist.

        Raises:
            ValueError: if the style is not in the catalog
        """
        resolved = get_connection_style(style)

        if source not in self._nodes or target not in self._nodes:
            logger.debug("Dropping connection %s -> %s: missing endpoint", source, target)
            return None

        self._next_edge += 1
        edge = Edge.from_style(
            id=f"e{self._next_edge}",
            source=source,
            target=target,
            style=resolved,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        self._edges[edge.id] = edge
        self._notify_change()
        return edge

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(1) lookup)."""
        return self._edges.get(edge_id)

    def remove_edge(self, edge_id: str) -> bool:
        """Delete an edge."""
        if self._edges.pop(edge_id, None) is None:
            return False
        self._notify_change()
        return True

    def apply_edge_changes(self, changes: Iterable[EdgeChange]) -> int:
        """Apply an edge change list emitted by the canvas ("remove" only)."""
        applied = 0
        for change in changes:
            if change.type == "remove":
                applied += int(self.remove_edge(change.id))
            else:
                logger.debug("Ignoring edge change %s for %s", change.type, change.id)
        return applied

    # --- Documents ---

    def _append_document(self, node_id: str, document: Document) -> bool:
        """Append a finished read, unless the node is gone."""
        node = self._nodes.get(node_id)
        if node is None:
            logger.info("Discarding %s: node %s was deleted during the read",
                        document.name, node_id)
            return False
        self._replace_node(node.with_document(document))
        return True

    async def _read_and_append(self, node_id: str, file: FileHandle,
                               result: AttachmentResult) -> None:
        try:
            document = await read_document(file)
        except Exception as e:
            logger.exception("Reading %s for node %s failed", file.name, node_id)
            result.failed.append(read_failure(file, e))
            return
        if self._append_document(node_id, document):
            result.attached.append(document)
        else:
            result.discarded.append(document.name)

    async def attach_documents(self, node_id: str, files: Iterable[FileHandle]) -> AttachmentResult:
        """
        Attach a batch of files to a node.

        Unsupported files are rejected one by one; the rest are read
        concurrently, each appended as soon as its own read completes.
        """
        result = AttachmentResult(node_id=node_id)
        tasks = []

        for file in files:
            rejection = check_file(file)
            if rejection is not None:
                logger.warning("Rejected %s for node %s: %s",
                               file.name, node_id, rejection.message)
                result.rejected.append(rejection)
                continue
            tasks.append(asyncio.create_task(self._read_and_append(node_id, file, result)))

        if tasks:
            await asyncio.gather(*tasks)
        return result

    def open_document(self, node_id: str, index: int) -> Optional[DocumentView]:
        """Open a node's document by position. None if either is missing."""
        node = self._nodes.get(node_id)
        if node is None or not 0 <= index < len(node.documents):
            return None
        return open_document(node.documents[index])

    # --- Read-only views ---

    def summarize(self) -> MindMapSummary:
        """Summary of the current mind map."""
        return generate_summary(self.nodes, self.edges)

    def validate(self) -> list[ValidationIssue]:
        return validate_mindmap(self.nodes, self.edges)

    def get_state(self) -> dict:
        """Get the full current state for the canvas."""
        return {
            "nodes": [n.to_json_dict() for n in self._nodes.values()],
            "edges": [e.to_json_dict() for e in self._edges.values()],
            "styles": [s.model_dump() for s in list_connection_styles()],
            "current_style": self._current_style.id,
        }
