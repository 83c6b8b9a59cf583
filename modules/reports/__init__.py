"""Compiled job reports."""

from __future__ import annotations

from .compiler import DocumentCompiler
from .cover import build_cover_page

__all__ = ["DocumentCompiler", "build_cover_page"]
