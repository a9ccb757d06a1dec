"""HTTP surface -- FastAPI app factory and JSON routes."""

from fxquotes.api.app import create_app

__all__ = ["create_app"]
