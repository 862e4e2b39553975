"""Command line entry point for the conversion extension.

Example:
-------
    >>> python -m drone_cache_convert serve --secret s3cr3t --port 3000
    >>> python -m drone_cache_convert convert .drone.yml

"""

from __future__ import annotations

# ==============================================================================
# IMPORTS
# ==============================================================================

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import uvicorn

from ..config.settings import AppSettings, load_settings
from ..conversion import DocumentRewriter
from ..utils.errors import FoundationError
from ..utils.logging import configure_logging
from .app import create_app


# ==============================================================================
# ARGUMENT PARSING
# ==============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drone-cache-convert",
        description="Drone conversion extension adding cache restore/rebuild steps",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--image", default=None, help="Cache plugin image for generated steps")
    parser.add_argument("--cache-path", default=None, help="Path to the cache directory on the host")

    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP conversion extension (default)")
    serve.add_argument("--host", default=None, help="Address to listen on")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve.add_argument("--secret", default=None, help="Shared secret for request signatures")

    convert = commands.add_parser("convert", help="Rewrite a configuration file and print it")
    convert.add_argument("path", help="Configuration file to rewrite, '-' for stdin")
    return parser


# ==============================================================================
# COMMANDS
# ==============================================================================


def serve(settings: AppSettings) -> None:
    app = create_app(settings)
    uvicorn.run(app, host=str(settings.host), port=settings.port, log_config=None)


def convert(settings: AppSettings, path: str) -> str:
    """Rewrite the configuration stored at ``path`` (``-`` reads stdin)."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    rewriter = DocumentRewriter(
        image=settings.image,
        cache_path=settings.cache_path,
        environment=dict(os.environ),
    )
    return rewriter.rewrite(text)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and dispatch to the selected command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "serve"

    try:
        settings = load_settings(
            debug=args.debug,
            image=args.image,
            cache_path=args.cache_path,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
            secret=getattr(args, "secret", None),
        )
        if command == "convert":
            configure_logging(settings.log_level, settings=settings.logging, stream=sys.stderr)
            sys.stdout.write(convert(settings, args.path))
        else:
            serve(settings)
    except FoundationError as exc:
        detail = f": {exc.problem.detail}" if exc.problem.detail else ""
        print(f"error: {exc}{detail}", file=sys.stderr)
        return 1
    return 0


# ==============================================================================
# EXPORTS
# ==============================================================================

__all__ = ["build_parser", "convert", "main", "serve"]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
