"""
Mind map validation - Check mind maps for structural issues.

The manager never lets the registries reach an invalid state; these checks
exist so that the canvas (and the tests) can confirm it.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .documents import is_allowed_type

if TYPE_CHECKING:
    from .models import Edge, Node


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Allowed, reported for information


@dataclass
class ValidationIssue:
    """A single validation issue found in a mind map."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


def validate_mindmap(nodes: list["Node"], edges: list["Edge"]) -> list[ValidationIssue]:
    """
    Validate a mind map and return a list of issues.

    Checks for:
    - Duplicate node IDs - ERROR
    - Edges referencing missing nodes - ERROR
    - Documents with an unsupported type - ERROR
    - Empty labels - WARNING
    - Self-referencing edges - INFO
    - Parallel edges (same source->target) - INFO
    """
    issues: list[ValidationIssue] = []
    node_ids = {n.id for n in nodes}

    for node_id, count in Counter(n.id for n in nodes).items():
        if count > 1:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Node ID used {count} times",
                node_id=node_id
            ))

    for node in nodes:
        if not node.label.strip():
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Node has an empty label",
                node_id=node.id
            ))
        for doc in node.documents:
            if not is_allowed_type(doc.type):
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Document {doc.name} has unsupported type {doc.type}",
                    node_id=node.id
                ))

    seen_pairs: set[tuple[str, str]] = set()
    for edge in edges:
        if edge.source not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_id=edge.id
            ))
        if edge.target not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_id=edge.id
            ))
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message="Self-referencing edge (node points to itself)",
                edge_id=edge.id,
                node_id=edge.source
            ))

        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message=f"Parallel edge from {edge.source} to {edge.target}",
                edge_id=edge.id
            ))
        else:
            seen_pairs.add(pair)

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """Create a summary of validation issues with counts by severity."""
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
