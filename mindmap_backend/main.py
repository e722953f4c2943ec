"""
Mind Map Backend - FastAPI Application

This is the main entry point for the mind map backend. It provides:
- REST API for the canvas (nodes, edges, styles, documents, summary)
- WebSocket endpoint for real-time updates
- The deletion relay consumer, bound to the application lifespan
- CORS configuration for local frontend development
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from mindmap_core.documents import FileHandle
from mindmap_core.help import help_sections
from mindmap_core.models import (
    ConnectRequest,
    CreateNodeRequest,
    EdgeChange,
    NodeChange,
    SelectStyleRequest,
    UpdateNodeRequest,
)
from mindmap_core.styles import list_connection_styles
from mindmap_core.summary import SUMMARY_FILENAME
from mindmap_core.validation import validation_summary

from .config import Settings, configure_logging, settings as default_settings
from .mindmap_manager import MindMapManager
from .relay import DeletionRelay
from .websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)


def create_app(
    manager: Optional[MindMapManager] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Build the application around a mind map manager."""
    config = config or default_settings
    manager = manager or MindMapManager(spawn_radius=config.spawn_radius)
    ws_manager = WebSocketManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire change broadcasts and the deletion relay for the app's lifetime."""
        # Bridge between sync manager callbacks and async WebSocket broadcasts
        change_event = asyncio.Event()

        def on_mindmap_change():
            change_event.set()

        async def change_broadcaster():
            while True:
                await change_event.wait()
                change_event.clear()
                await ws_manager.notify_mindmap_updated()

        relay = DeletionRelay()
        unsubscribe = relay.subscribe(manager.delete_node)
        app.state.relay = relay

        manager.on_change(on_mindmap_change)
        tasks = [
            asyncio.create_task(change_broadcaster()),
            asyncio.create_task(relay.run()),
        ]
        logger.info("Mind map backend started")

        yield

        # Cleanup
        unsubscribe()
        manager.off_change(on_mindmap_change)
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Mind map backend stopped")

    app = FastAPI(
        title="Mind Map API",
        description="Backend API for the mind map canvas",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.manager = manager
    app.state.ws_manager = ws_manager

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "connections": ws_manager.connection_count}

    # --- Mind Map State ---

    @app.get("/api/mindmap")
    async def get_mindmap():
        """Get the current nodes, edges and connection styles."""
        return manager.get_state()

    @app.post("/api/mindmap/reset")
    async def reset_mindmap():
        """Discard everything except a fresh Central Topic."""
        manager.reset()
        return {"success": True, **manager.get_state()}

    @app.get("/api/mindmap/validate")
    async def validate_mindmap():
        """Check the mind map for structural issues."""
        issues = manager.validate()
        return {
            "success": True,
            "issues": [issue.to_dict() for issue in issues],
            "summary": validation_summary(issues)
        }

    # --- Node Operations ---

    @app.post("/api/nodes")
    async def create_node(request: CreateNodeRequest):
        """Add a new topic."""
        node = manager.create_node(
            label=request.label,
            color=request.color,
            x=request.x,
            y=request.y
        )
        return {"success": True, "node": node.to_json_dict()}

    # Change-list endpoint MUST be before the parameterized routes
    @app.post("/api/nodes/changes")
    async def apply_node_changes(changes: list[NodeChange]):
        """Apply position/remove changes emitted by the canvas."""
        applied = manager.apply_node_changes(changes)
        return {"success": True, "applied": applied}

    @app.get("/api/nodes/{node_id}")
    async def get_node(node_id: str):
        """Get a specific node."""
        node = manager.get_node(node_id)
        if node:
            return {"success": True, "node": node.to_json_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.patch("/api/nodes/{node_id}")
    async def update_node(node_id: str, request: UpdateNodeRequest):
        """Update a node's label, color or position."""
        node = manager.get_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Node not found")

        if request.label is not None:
            node = manager.update_label(node_id, request.label)
        if "color" in request.model_fields_set:
            node = manager.set_color(node_id, request.color)
        if request.x is not None or request.y is not None:
            x = request.x if request.x is not None else node.position.x
            y = request.y if request.y is not None else node.position.y
            node = manager.move_node(node_id, x, y)

        return {"success": True, "node": node.to_json_dict()}

    @app.delete("/api/nodes/{node_id}")
    async def delete_node(node_id: str):
        """Delete a node and its connected edges. Missing nodes are a no-op."""
        deleted = manager.delete_node(node_id)
        return {"success": True, "deleted": deleted}

    @app.post("/api/nodes/{node_id}/request-delete")
    async def request_node_delete(node_id: str, request: Request):
        """Delete through the node's own view and the deletion relay."""
        view = manager.node_view(node_id, request.app.state.relay.request_deletion)
        if view is None:
            return {"success": True, "requested": False}
        return {"success": True, "requested": view.delete()}

    # --- Documents ---

    @app.post("/api/nodes/{node_id}/documents")
    async def attach_documents(node_id: str, files: list[UploadFile] = File(...)):
        """Attach files to a node. Unsupported files are rejected individually."""
        if manager.get_node(node_id) is None:
            raise HTTPException(status_code=404, detail="Node not found")

        result = await manager.attach_documents(
            node_id, [FileHandle.from_upload(f) for f in files]
        )
        payload = result.to_dict()
        notices = payload["rejected"] + payload["failed"]
        if notices:
            await ws_manager.notify_attachment_rejected(node_id, notices)
        return {"success": True, **payload}

    @app.get("/api/nodes/{node_id}/documents/{index}")
    async def open_document(node_id: str, index: int):
        """Open an attached document."""
        try:
            view = manager.open_document(node_id, index)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if view is None:
            raise HTTPException(status_code=404, detail="Document not found")
        return Response(content=view.body, media_type=view.media_type)

    # --- Edge Operations ---

    @app.post("/api/edges")
    async def create_edge(request: ConnectRequest):
        """Connect two nodes with the given or currently selected style."""
        try:
            edge = manager.connect(
                source=request.source,
                target=request.target,
                style=request.style or manager.current_style,
                source_handle=request.source_handle,
                target_handle=request.target_handle
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if edge is None:
            return {"success": False, "edge": None}
        return {"success": True, "edge": edge.to_json_dict()}

    @app.post("/api/edges/changes")
    async def apply_edge_changes(changes: list[EdgeChange]):
        """Apply remove changes emitted by the canvas."""
        applied = manager.apply_edge_changes(changes)
        return {"success": True, "applied": applied}

    @app.get("/api/edges/{edge_id}")
    async def get_edge(edge_id: str):
        """Get a specific edge."""
        edge = manager.get_edge(edge_id)
        if edge:
            return {"success": True, "edge": edge.to_json_dict()}
        raise HTTPException(status_code=404, detail="Edge not found")

    @app.delete("/api/edges/{edge_id}")
    async def delete_edge(edge_id: str):
        """Delete an edge."""
        if manager.remove_edge(edge_id):
            return {"success": True}
        raise HTTPException(status_code=404, detail="Edge not found")

    # --- Connection Styles ---

    @app.get("/api/styles")
    async def get_styles():
        """Get the connection style catalog and the current selection."""
        return {
            "styles": [s.model_dump() for s in list_connection_styles()],
            "current": manager.current_style.id
        }

    @app.put("/api/styles/current")
    async def select_style(request: SelectStyleRequest):
        """Select the style for edges drawn from now on."""
        try:
            style = manager.select_connection_style(request.style)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "current": style.id}

    # --- Summary ---

    @app.get("/api/summary")
    async def get_summary():
        """Get the summary as structured data, plain text and HTML."""
        summary = manager.summarize()
        return {"success": True, "summary": summary.to_dict(), "html": summary.to_html()}

    @app.get("/api/summary/preview")
    async def preview_summary():
        """Render the summary for display."""
        return HTMLResponse(manager.summarize().to_html())

    @app.get("/api/summary/download")
    async def download_summary():
        """Download the summary as mindmap-summary.txt."""
        return Response(
            content=manager.summarize().to_bytes(),
            media_type="text/plain; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{SUMMARY_FILENAME}"'}
        )

    @app.get("/api/help")
    async def get_help():
        """How to use the mind map."""
        return {"sections": help_sections()}

    # --- WebSocket ---

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket endpoint for real-time updates.

        Clients connect here to receive mindmap_updated events.
        """
        await ws_manager.connect(websocket)

        try:
            while True:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text('{"type": "pong"}')
        except WebSocketDisconnect:
            await ws_manager.disconnect(websocket)
        except Exception:
            logger.exception("WebSocket error")
            await ws_manager.disconnect(websocket)

    @app.get("/")
    async def root():
        """Placeholder page; the canvas is served separately."""
        return HTMLResponse("<h1>Mind Map API</h1><p>Connect a canvas to /api and /ws.</p>")

    return app


app = create_app()


def run():
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    configure_logging(default_settings)
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


# --- Run with uvicorn ---

if __name__ == "__main__":
    run()
