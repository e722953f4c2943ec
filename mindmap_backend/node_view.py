"""
Node view - the node-local side of the canvas.

A NodeView holds a read-only snapshot of one node and the delete-request
callable it was constructed with. It never touches the registries.
"""

from typing import Callable

from mindmap_core.documents import DocumentView, open_document
from mindmap_core.models import Document, Node


class NodeView:
    """Display model for a single node."""

    def __init__(self, node: Node, request_delete: Callable[[str], None]):
        self._node = node
        self._request_delete = request_delete
        self._delete_requested = False

    @property
    def id(self) -> str:
        return self._node.id

    @property
    def label(self) -> str:
        return self._node.label

    @property
    def color(self) -> str:
        return self._node.resolved_color

    @property
    def documents(self) -> list[Document]:
        return list(self._node.documents)

    @property
    def delete_requested(self) -> bool:
        return self._delete_requested

    def delete(self) -> bool:
        """
        Ask for this node to be removed.

        Only the first call emits a request; returns whether it did.
        """
        if self._delete_requested:
            return False
        self._delete_requested = True
        self._request_delete(self._node.id)
        return True

    def open_document(self, index: int) -> DocumentView:
        """Open the document at the given position in the list."""
        return open_document(self._node.documents[index])
