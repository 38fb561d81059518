"""HTTP API for the Tara call backend."""

from .app import create_app

__all__ = ["create_app"]
