"""
Media index facade: listing, id resolution and delete/archive requests.

Provides:
- MediaIndex: the object shared by all request handlers
- FileEntry / ActionResult models
- create_index_router: HTTP routes (lazy FastAPI import)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .index import MediaIndex
from .models import ActionResult, FileEntry

if TYPE_CHECKING:
    from pathlib import Path
    from fastapi import APIRouter  # pragma: no cover


def create_index_router(*, index: MediaIndex, frontend_dir: "Path") -> "APIRouter":
    """
    Lazily import FastAPI router to keep non-web imports lightweight.
    """
    from .api import create_index_router as _create_index_router

    return _create_index_router(index=index, frontend_dir=frontend_dir)

__all__ = [
    "MediaIndex",
    "FileEntry",
    "ActionResult",
    "create_index_router",
]
