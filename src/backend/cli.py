"""
Command line entry point.

Example:
  python -m src.backend -f mp4,mkv,webm -a /media/archive /media/a /media/b
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .errors import ConfigError, ScanError
from .settings.models import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SUFFIXES, MediaFilerSettings


logger = logging.getLogger("mediafiler")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mediafiler", description="Browse, delete and archive media files over HTTP.")
    parser.add_argument("dirs", nargs="*", help="root directories to scan")
    parser.add_argument("-f", "--suffixes", default=DEFAULT_SUFFIXES, help="suffixes supported (default: %(default)s)")
    parser.add_argument("-a", "--archive-dir", default="", help="archive dir; enables archiving when set")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help="port (default: %(default)s)")
    parser.add_argument("--host", default=DEFAULT_HOST, help="listen address (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = MediaFilerSettings.build(
            roots=args.dirs,
            suffixes=args.suffixes,
            archive_dir=args.archive_dir or None,
            host=args.host,
            port=args.port,
        )
        from .app import create_app

        app = create_app(settings)
    except (ConfigError, ScanError) as exc:
        logger.error("%s", exc)
        return 2

    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
