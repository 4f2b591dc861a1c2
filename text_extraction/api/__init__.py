"""Routers for the text extraction FastAPI application."""

from __future__ import annotations

from .extraction import router as extraction_router

__all__ = ["extraction_router"]
