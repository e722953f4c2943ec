#!/usr/bin/env python3
"""Mind map CLI - drive the mind map backend from the command line."""

import argparse
import json
import mimetypes
import os
import sys
from pathlib import Path

import httpx

from mindmap_core.help import help_text
from mindmap_core.styles import CONNECTION_STYLES
from mindmap_core.summary import SUMMARY_FILENAME

API_BASE = os.environ.get("MINDMAP_API_BASE", "http://127.0.0.1:8765/api")

# Extensions the platform's mimetypes table may not know
EXTENSION_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class CLIError(Exception):
    """Raised when a command cannot complete."""


def _json_out(data):
    print(json.dumps(data))


def _api_request(method, endpoint, **kwargs):
    """Make a request to the mind map backend and return the JSON body."""
    url = f"{API_BASE}{endpoint}"
    try:
        with httpx.Client(timeout=30.0) as client:
            response = client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise CLIError(f"Connection failed: {e}. Is the mind map backend running?") from e

    if response.status_code >= 400:
        try:
            detail = response.json().get("detail", "Unknown error")
        except ValueError:
            detail = response.text
        raise CLIError(f"API error ({response.status_code}): {detail}")

    if response.headers.get("content-type", "").startswith("application/json"):
        return response.json()
    return response.content


def guess_type(path: Path) -> str:
    """MIME type for a local file, by extension."""
    known = EXTENSION_TYPES.get(path.suffix.lower())
    if known:
        return known
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


# ── Mind map ─────────────────────────────────────────────────────────────────

def cmd_get_current(args):
    _json_out(_api_request("GET", "/mindmap"))


def cmd_reset(args):
    _json_out(_api_request("POST", "/mindmap/reset"))


def cmd_validate(args):
    _json_out(_api_request("GET", "/mindmap/validate"))


# ── Nodes ────────────────────────────────────────────────────────────────────

def cmd_add_topic(args):
    _json_out(_api_request("POST", "/nodes", json={
        "label": args.label,
        "color": args.color,
        "x": args.x,
        "y": args.y,
    }))


def cmd_update_topic(args):
    updates = {}
    if args.label is not None:
        updates["label"] = args.label
    if args.color is not None:
        updates["color"] = args.color
    if args.x is not None:
        updates["x"] = args.x
    if args.y is not None:
        updates["y"] = args.y
    _json_out(_api_request("PATCH", f"/nodes/{args.node_id}", json=updates))


def cmd_delete_topic(args):
    _json_out(_api_request("DELETE", f"/nodes/{args.node_id}"))


# ── Edges ────────────────────────────────────────────────────────────────────

def cmd_connect(args):
    data = {"source": args.source, "target": args.target}
    if args.style:
        data["style"] = args.style
    _json_out(_api_request("POST", "/edges", json=data))


def cmd_delete_edge(args):
    _json_out(_api_request("DELETE", f"/edges/{args.edge_id}"))


def cmd_styles(args):
    _json_out(_api_request("GET", "/styles"))


def cmd_set_style(args):
    _json_out(_api_request("PUT", "/styles/current", json={"style": args.style}))


# ── Documents ────────────────────────────────────────────────────────────────

def cmd_attach(args):
    paths = [Path(p) for p in args.files]
    missing = [str(p) for p in paths if not p.is_file()]
    if missing:
        raise CLIError(f"File not found: {', '.join(missing)}")

    handles = [open(p, "rb") for p in paths]
    try:
        files = [
            ("files", (p.name, fh, guess_type(p)))
            for p, fh in zip(paths, handles)
        ]
        _json_out(_api_request("POST", f"/nodes/{args.node_id}/documents", files=files))
    finally:
        for fh in handles:
            fh.close()


def cmd_open_document(args):
    body = _api_request("GET", f"/nodes/{args.node_id}/documents/{args.index}")
    if isinstance(body, (dict, list)):
        body = json.dumps(body).encode()
    if args.output:
        Path(args.output).write_bytes(body)
        _json_out({"success": True, "file_path": args.output})
    else:
        sys.stdout.buffer.write(body)


# ── Summary ──────────────────────────────────────────────────────────────────

def cmd_summary(args):
    result = _api_request("GET", "/summary")
    print(result["summary"]["text"])


def cmd_export(args):
    body = _api_request("GET", "/summary/download")
    path = Path(args.output or SUMMARY_FILENAME)
    path.write_bytes(body)
    _json_out({"success": True, "file_path": str(path)})


def cmd_help(args):
    print(help_text())


def build_parser():
    parser = argparse.ArgumentParser(prog="mindmap", description="Mind map CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("get-current", help="Show nodes, edges and styles")
    p.set_defaults(func=cmd_get_current)

    p = sub.add_parser("reset", help="Start over with only the Central Topic")
    p.set_defaults(func=cmd_reset)

    p = sub.add_parser("validate", help="Check the mind map for issues")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("add-topic", help="Add a topic")
    p.add_argument("--label", default="New Topic")
    p.add_argument("--color")
    p.add_argument("--x", type=float)
    p.add_argument("--y", type=float)
    p.set_defaults(func=cmd_add_topic)

    p = sub.add_parser("update-topic", help="Change a topic")
    p.add_argument("node_id")
    p.add_argument("--label")
    p.add_argument("--color")
    p.add_argument("--x", type=float)
    p.add_argument("--y", type=float)
    p.set_defaults(func=cmd_update_topic)

    p = sub.add_parser("delete-topic", help="Delete a topic and its connections")
    p.add_argument("node_id")
    p.set_defaults(func=cmd_delete_topic)

    p = sub.add_parser("connect", help="Connect two topics")
    p.add_argument("source")
    p.add_argument("target")
    p.add_argument("--style", choices=list(CONNECTION_STYLES),
                   help="Defaults to the currently selected style")
    p.set_defaults(func=cmd_connect)

    p = sub.add_parser("delete-edge", help="Delete a connection")
    p.add_argument("edge_id")
    p.set_defaults(func=cmd_delete_edge)

    p = sub.add_parser("styles", help="List connection styles")
    p.set_defaults(func=cmd_styles)

    p = sub.add_parser("set-style", help="Select the style for new connections")
    p.add_argument("style", choices=list(CONNECTION_STYLES))
    p.set_defaults(func=cmd_set_style)

    p = sub.add_parser("attach", help="Attach files to a topic")
    p.add_argument("node_id")
    p.add_argument("files", nargs="+")
    p.set_defaults(func=cmd_attach)

    p = sub.add_parser("open-document", help="Fetch an attached document")
    p.add_argument("node_id")
    p.add_argument("index", type=int)
    p.add_argument("--output", "-o")
    p.set_defaults(func=cmd_open_document)

    p = sub.add_parser("summary", help="Print the summary")
    p.set_defaults(func=cmd_summary)

    p = sub.add_parser("export", help=f"Save the summary to {SUMMARY_FILENAME}")
    p.add_argument("--output", "-o")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("help", help="How to use the mind map")
    p.set_defaults(func=cmd_help)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except CLIError as e:
        _json_out({"status": "error", "error": str(e)})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
