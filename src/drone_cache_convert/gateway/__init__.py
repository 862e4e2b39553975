"""HTTP gateway for the conversion extension."""

from .app import create_app

__all__ = ["create_app"]
