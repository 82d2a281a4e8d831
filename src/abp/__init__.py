"""Audiobook player library core.

Books and chapters, the in-memory book repository, voice search resolution
and chapter metadata helpers.
"""

__all__ = [
    "book",
    "repo",
    "search",
    "matroska",
]
