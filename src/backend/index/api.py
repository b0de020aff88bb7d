"""
API routes for the media listing, file streaming and delete/archive requests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from src.backend.errors import ConfigError, InvalidTargetError, RenameError, ScanError, UnknownIDError
from src.backend.fs.identifiers import is_valid_id
from src.shared.intent_kind import IntentKind

from .index import MediaIndex
from .models import ActionResult, FileEntry


class FileEntryOut(BaseModel):
    id: str
    path: str
    title: str
    modified_at: str


class FileListOut(BaseModel):
    archive_enabled: bool
    files: list[FileEntryOut]


class IntentOut(BaseModel):
    marker_path: str
    original_path: str
    undo_id: str
    kind: IntentKind
    requested_at: str


class PendingOut(BaseModel):
    intents: list[IntentOut]


class ActionOut(BaseModel):
    """Response for a delete/archive request or its undo."""
    success: bool
    kind: IntentKind
    undo: bool
    id: str
    source: str
    destination: str


def _action_out(result: ActionResult) -> ActionOut:
    return ActionOut(
        success=True,
        kind=result.kind,
        undo=result.undo,
        id=result.file_id,
        source=str(result.source),
        destination=str(result.destination),
    )


def _list_or_500(index: MediaIndex) -> list[FileEntry]:
    try:
        return index.list_files()
    except ScanError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def create_index_router(*, index: MediaIndex, frontend_dir: Path) -> APIRouter:
    """
    Create the media index router.

    Args:
        index: The shared media index.
        frontend_dir: Directory holding templates/index.html.

    Returns:
        FastAPI router with listing, file and action endpoints.
    """
    router = APIRouter(tags=["index"])
    templates = Jinja2Templates(directory=str(Path(frontend_dir) / "templates"))

    @router.get("/", response_class=HTMLResponse)
    def list_page(request: Request) -> HTMLResponse:
        files = _list_or_500(index)
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "enable_archive": index.archive_enabled,
                "files": files,
                "pending": index.pending(),
            },
        )

    @router.get("/api/files", response_model=FileListOut)
    def list_files() -> FileListOut:
        files = _list_or_500(index)
        return FileListOut(
            archive_enabled=index.archive_enabled,
            files=[FileEntryOut(**f.to_public_dict()) for f in files],
        )

    @router.get("/api/pending", response_model=PendingOut)
    def list_pending() -> PendingOut:
        return PendingOut(intents=[IntentOut(**i.to_public_dict()) for i in index.pending()])

    @router.get("/f/{file_id}")
    def serve_file(file_id: str) -> FileResponse:
        if not is_valid_id(file_id):
            raise HTTPException(status_code=400, detail="Invalid path")
        try:
            path = index.resolve_id(file_id)
        except UnknownIDError as exc:
            raise HTTPException(status_code=404, detail="Not found") from exc
        if not path.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(str(path))

    def _act(kind: IntentKind, file_id: str, undo: bool) -> ActionOut:
        try:
            if kind == IntentKind.ARCHIVE:
                result = index.request_archive(file_id, undo=undo)
            else:
                result = index.request_delete(file_id, undo=undo)
        except ConfigError as exc:
            raise HTTPException(status_code=400, detail="Archive not supported") from exc
        except UnknownIDError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid id to {kind.value}") from exc
        except InvalidTargetError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except RenameError as exc:
            status = 400 if exc.client_error else 500
            raise HTTPException(status_code=status, detail="Rename error") from exc
        return _action_out(result)

    @router.api_route("/delete/{file_id}", methods=["GET", "POST"], response_model=ActionOut)
    def delete_file(file_id: str, undo: Optional[str] = None) -> ActionOut:
        return _act(IntentKind.DELETE, file_id, undo is not None)

    @router.api_route("/archive/{file_id}", methods=["GET", "POST"], response_model=ActionOut)
    def archive_file(file_id: str, undo: Optional[str] = None) -> ActionOut:
        return _act(IntentKind.ARCHIVE, file_id, undo is not None)

    return router
