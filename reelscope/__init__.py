"""Compatibility shim exposing the MCP server factory."""

from __future__ import annotations

from app.main import create_server

__all__ = ["create_server"]
