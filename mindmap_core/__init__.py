"""
Mind Map Core - Shared models, connection styles, documents and summary.

This module provides the model layer used by the backend and the CLI,
ensuring a single source of truth for all mind map rules.
"""

from .models import (
    # Enums and constants
    DocumentType,
    ALLOWED_DOCUMENT_TYPES,
    NODE_PALETTE,
    palette_color,
    # Core models
    Position,
    Document,
    Node,
    Edge,
    # Request models (for API)
    CreateNodeRequest,
    UpdateNodeRequest,
    ConnectRequest,
    SelectStyleRequest,
    NodeChange,
    EdgeChange,
)

from .styles import (
    ConnectionStyle,
    ConnectionStyleId,
    CONNECTION_STYLES,
    DEFAULT_CONNECTION_STYLE,
    get_connection_style,
    list_connection_styles,
)
from .documents import FileHandle, AttachmentRejection, AttachmentResult, open_document
from .summary import MindMapSummary, generate_summary, SUMMARY_FILENAME
from .validation import validate_mindmap, ValidationIssue, IssueSeverity

__all__ = [
    # Enums and constants
    "DocumentType",
    "ALLOWED_DOCUMENT_TYPES",
    "NODE_PALETTE",
    "palette_color",
    # Models
    "Position",
    "Document",
    "Node",
    "Edge",
    # Request models
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "ConnectRequest",
    "SelectStyleRequest",
    "NodeChange",
    "EdgeChange",
    # Styles
    "ConnectionStyle",
    "ConnectionStyleId",
    "CONNECTION_STYLES",
    "DEFAULT_CONNECTION_STYLE",
    "get_connection_style",
    "list_connection_styles",
    # Documents
    "FileHandle",
    "AttachmentRejection",
    "AttachmentResult",
    "open_document",
    # Summary
    "MindMapSummary",
    "generate_summary",
    "SUMMARY_FILENAME",
    # Validation
    "validate_mindmap",
    "ValidationIssue",
    "IssueSeverity",
]
