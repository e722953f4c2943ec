"""Usage help shown by the canvas and the CLI."""

from .styles import list_connection_styles


HELP_SECTIONS: list[tuple[str, list[str]]] = [
    ("Basic Operations", [
        'Add New Topic: click "Add New Topic" to create a new node',
        "Edit Text: click any node's text area to edit its content",
        "Delete Node: hover over a node and click the delete button",
        "Move Node: click and drag a node to reposition it",
    ]),
    ("Connections", [
        "Create Connection: drag from a node's connection point to another node",
        "Connection Types: pick a style before drawing; existing connections keep theirs",
    ]),
    ("Documents", [
        "Attach Files: attach PDF, TXT, MD, or DOC files to a node",
        "View Files: click an attached file's name to open it",
    ]),
    ("Summary", [
        'Generate Summary: click "Generate Summary" for an overview of the mind map',
        "Download Summary: save the summary as mindmap-summary.txt",
    ]),
]


def help_sections() -> list[dict]:
    """Help content with the connection styles listed under Connections."""
    sections = []
    for title, lines in HELP_SECTIONS:
        if title == "Connections":
            lines = lines + [f"{s.label}: {s.id} connection" for s in list_connection_styles()]
        sections.append({"title": title, "items": list(lines)})
    return sections


def help_text() -> str:
    """Help content as plain text."""
    blocks = []
    for section in help_sections():
        blocks.append(section["title"] + "\n" + "\n".join(f"  - {item}" for item in section["items"]))
    return "\n\n".join(blocks)
