"""FastAPI application for previewing a symark site as JSON."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..graph import build_link_graph
from ..render import render_note


def _summary(note: Any) -> dict[str, Any]:
    return {"id": note.id, "title": note.title, "tags": note.tag_list}


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with the loaded note index
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="SyMark API",
        description="Local JSON preview API for a symark note tree",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    # Add CORS middleware if enabled
    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Security setup
    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    index = runtime.index

    def note_or_404(note_id: str) -> Any:
        note = index.get(note_id)
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        return note

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "notes": len(index), "failed": len(runtime.vault.failed)}

    @app.get("/notes")
    async def list_notes(auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Every note, by id."""
        return [_summary(index[nid]) for nid in sorted(index)]

    @app.get("/notes/{note_id}")
    async def get_note(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Note metadata with its rendered HTML and table of contents."""
        note = note_or_404(note_id)
        content, toc = render_note(note, index)
        return {**_summary(note), "html": content, "toc": toc}

    @app.get("/notes/{note_id}/backlinks")
    async def backlinks(note_id: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Notes whose block references point into this note."""
        note_or_404(note_id)
        return [_summary(n) for n in index.backlinks(note_id)]

    @app.get("/tags/{tag}")
    async def tagged(tag: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Notes carrying a tag."""
        notes = index.tagged(tag)
        if not notes:
            raise HTTPException(status_code=404, detail=f"Tag {tag} not found")
        return {"tag": tag, "notes": [_summary(n) for n in notes]}

    @app.get("/graph")
    async def graph(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Undirected link graph between notes."""
        return build_link_graph(index).to_dict()

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
