"""
Error taxonomy for the media index.

- ConfigError: misconfiguration (fatal at startup, 400 at the request boundary)
- UnknownIDError / InvalidTargetError: user errors, shared state untouched
- RenameError: mark/undo rename failed, no intent recorded or removed
- ScanError: a configured root directory cannot be read
- ReconciliationError: sweeper-side failure, logged and reported only
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class MediaFilerError(Exception):
    pass


class ConfigError(MediaFilerError):
    pass


class UnknownIDError(MediaFilerError):
    def __init__(self, file_id: str) -> None:
        super().__init__(f"unknown id: {file_id!r}")
        self.file_id = file_id


class InvalidTargetError(MediaFilerError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class RenameError(MediaFilerError):
    """
    A filesystem rename failed during mark or undo.

    client_error is True when the failure was caused by the request itself
    (source gone, destination name already taken) rather than by the host.
    """

    def __init__(self, src: Path, dst: Path, *, client_error: bool, cause: Optional[OSError] = None) -> None:
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"cannot rename {src} -> {dst}{detail}")
        self.src = src
        self.dst = dst
        self.client_error = client_error


class ScanError(MediaFilerError):
    def __init__(self, root: Path, cause: Optional[OSError] = None) -> None:
        detail = f": {cause.strerror or cause}" if cause is not None else ""
        super().__init__(f"cannot read root directory {root}{detail}")
        self.root = root


class ReconciliationError(MediaFilerError):
    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
