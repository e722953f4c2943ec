"""Mind Map Backend - state owner, deletion relay and HTTP/WebSocket API."""

from .mindmap_manager import MindMapManager
from .node_view import NodeView
from .relay import DeletionRelay, DeleteNodeRequest

__all__ = ["MindMapManager", "NodeView", "DeletionRelay", "DeleteNodeRequest"]
