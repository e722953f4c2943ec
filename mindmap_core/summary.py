"""
Mind map summary - Deterministic text report of a mind map.

Walks a snapshot of the nodes and edges and produces three sections:
- Node structure: every node with its document count
- Connections: one sentence per edge
- Documents: an excerpt of every attached document

The same content is available as plain text (the export artifact) and as an
HTML preview.
"""

import html
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import Document, Edge, Node


SUMMARY_FILENAME = "mindmap-summary.txt"
SUMMARY_TITLE = "MIND MAP SUMMARY"
EXCERPT_LENGTH = 100
BINARY_MARKER = "[Binary content]"


@dataclass
class DocumentBlock:
    """Documents attached to a single node."""
    label: str
    entries: list[str] = field(default_factory=list)

    def to_text(self) -> str:
        header = f'Node "{self.label}" contains {len(self.entries)} document(s):'
        return "\n".join([header, *self.entries])


@dataclass
class MindMapSummary:
    """The composed summary of a mind map."""
    node_structure: list[str] = field(default_factory=list)
    connections: list[str] = field(default_factory=list)
    documents: list[DocumentBlock] = field(default_factory=list)

    def to_text(self) -> str:
        """Plain-text report, exactly as written to the export file."""
        parts = [
            f"{SUMMARY_TITLE}\n\n"
            "NODE STRUCTURE:\n" + "\n".join(f"• {line}" for line in self.node_structure)
        ]
        if self.connections:
            parts.append("CONNECTIONS:\n" + "\n".join(f"• {line}" for line in self.connections))
        if self.documents:
            parts.append("DOCUMENTS:\n" + "\n\n".join(b.to_text() for b in self.documents))
        return "\n\n".join(parts)

    def to_bytes(self) -> bytes:
        return self.to_text().encode("utf-8")

    def to_html(self) -> str:
        """HTML preview of the report."""
        def items(lines: Iterable[str]) -> str:
            return "".join(f"<li>{html.escape(line)}</li>" for line in lines)

        sections = [
            "<h2>Mind Map Summary</h2>",
            "<h3>Node Structure</h3>",
            f"<ul>{items(self.node_structure)}</ul>",
        ]
        if self.connections:
            sections.append("<h3>Connections</h3>")
            sections.append(f"<ul>{items(self.connections)}</ul>")
        if self.documents:
            blocks = "\n\n".join(b.to_text() for b in self.documents)
            sections.append("<h3>Documents</h3>")
            sections.append(f'<div style="white-space: pre-wrap">{html.escape(blocks)}</div>')
        return "\n".join(sections)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "node_structure": list(self.node_structure),
            "connections": list(self.connections),
            "documents": [
                {"label": b.label, "entries": list(b.entries)} for b in self.documents
            ],
            "text": self.to_text(),
            "filename": SUMMARY_FILENAME,
        }


def document_excerpt(document: "Document") -> str:
    """First characters of a text document, or a marker for binary ones."""
    if document.is_text:
        return (document.content or "")[:EXCERPT_LENGTH] + "..."
    return BINARY_MARKER


def describe_connection(source_label: str, target_label: str, style: str) -> str:
    return f'"{source_label}" is connected to "{target_label}" with a {style} connection'


def generate_summary(nodes: list["Node"], edges: list["Edge"]) -> MindMapSummary:
    """
    Generate the summary of a mind map.

    Nodes are reported in registry order; within a source node, connections
    follow edge insertion order. Nothing is mutated.

    Args:
        nodes: Node snapshot, in registry order
        edges: Edge snapshot, in insertion order

    Returns:
        MindMapSummary with all three sections
    """
    labels = {node.id: node.label for node in nodes}

    # Build outgoing adjacency list, keeping edge order
    outgoing: dict[str, list["Edge"]] = defaultdict(list)
    for edge in edges:
        outgoing[edge.source].append(edge)

    summary = MindMapSummary()

    for node in nodes:
        summary.node_structure.append(f"{node.label} ({len(node.documents)} document(s))")

        for edge in outgoing.get(node.id, []):
            summary.connections.append(describe_connection(
                node.label,
                labels.get(edge.target, ""),
                edge.style,
            ))

        if node.documents:
            summary.documents.append(DocumentBlock(
                label=node.label,
                entries=[f"- {doc.name}: {document_excerpt(doc)}" for doc in node.documents],
            ))

    return summary
