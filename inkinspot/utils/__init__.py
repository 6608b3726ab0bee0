"""Utility modules."""

from .text import normalize_query, tokenize_query

__all__ = ["normalize_query", "tokenize_query"]
