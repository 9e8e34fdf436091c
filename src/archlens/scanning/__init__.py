"""Lexical scanning of already-loaded source text into graph inputs."""

from .imports import detect_language, extract_imports, parse_sources, resolve_import

__all__ = ["detect_language", "extract_imports", "parse_sources", "resolve_import"]
