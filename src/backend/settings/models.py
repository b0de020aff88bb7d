from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from src.backend.errors import ConfigError


DEFAULT_SUFFIXES = "mp4,mkv"
DEFAULT_PORT = 5555
DEFAULT_HOST = "0.0.0.0"


def parse_suffixes(raw: str) -> tuple[str, ...]:
    """
    Parse a comma-separated suffix list ("mp4,mkv") into (".mp4", ".mkv").

    A leading dot is added when missing; blanks and duplicates are dropped.
    """
    suffixes: list[str] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.startswith("."):
            part = "." + part
        if part not in suffixes:
            suffixes.append(part)
    return tuple(suffixes)


@dataclass(frozen=True)
class MediaFilerSettings:
    """Process-wide configuration, immutable after startup."""
    roots: tuple[Path, ...]
    suffixes: tuple[str, ...] = parse_suffixes(DEFAULT_SUFFIXES)
    archive_dir: Optional[Path] = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def archive_enabled(self) -> bool:
        return self.archive_dir is not None

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "roots": [str(r) for r in self.roots],
            "suffixes": list(self.suffixes),
            "archive_dir": str(self.archive_dir) if self.archive_dir is not None else None,
            "host": self.host,
            "port": self.port,
        }

    @classmethod
    def build(
        cls,
        *,
        roots: Iterable[str | Path],
        suffixes: str | Iterable[str] = DEFAULT_SUFFIXES,
        archive_dir: Optional[str | Path] = None,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
    ) -> "MediaFilerSettings":
        """
        Validate raw values and build settings.

        Raises:
            ConfigError: If no root is given, no suffix is left, the archive
                directory is not a directory, or the port is out of range.
        """
        resolved_roots: list[Path] = []
        for raw in roots:
            root = Path(raw).expanduser().resolve()
            if root not in resolved_roots:
                resolved_roots.append(root)
        if not resolved_roots:
            raise ConfigError("no root directory is specified")

        if isinstance(suffixes, str):
            parsed = parse_suffixes(suffixes)
        else:
            parsed = parse_suffixes(",".join(suffixes))
        if not parsed:
            raise ConfigError("no file suffix is specified")

        archive: Optional[Path] = None
        if archive_dir is not None and str(archive_dir).strip():
            archive = Path(archive_dir).expanduser().resolve()
            if not archive.is_dir():
                raise ConfigError(f"archive directory does not exist: {archive}")

        if not 0 < port < 65536:
            raise ConfigError(f"invalid port: {port}")

        return cls(
            roots=tuple(resolved_roots),
            suffixes=parsed,
            archive_dir=archive,
            host=host,
            port=port,
        )
