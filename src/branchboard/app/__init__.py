"""Application layer for bootstrap and lifecycle management."""

from .bootstrap import AppContext, create_app  # noqa: F401
