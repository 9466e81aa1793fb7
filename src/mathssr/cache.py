"""Render cache for mathssr.

Documents repeat the same notation often (``$n$``, ``$x$``). The cache
maps (expression, display_mode) to rendered markup so the typesetter is
invoked once per distinct expression. Only successful renders are
stored; a failure is retried (and reported) at every occurrence.

Thread Safety:
    DictRenderCache is not thread-safe. Use one cache per run, or wrap
    get/put in a lock when sharing across threads.

Example:
    >>> cache = DictRenderCache()
    >>> cache.put("x^2", False, "<span>...</span>")
    >>> cache.get("x^2", False)
    '<span>...</span>'
    >>> cache.get("x^2", True) is None
    True
"""

from __future__ import annotations

from typing import Protocol


class RenderCache(Protocol):
    """Protocol for render caches keyed by (expression, display_mode)."""

    def get(self, expression: str, display_mode: bool) -> str | None:
        """Return cached markup if present, else None."""
        ...

    def put(self, expression: str, display_mode: bool, html: str) -> None:
        """Store rendered markup."""
        ...

    def __contains__(self, key: tuple[str, bool]) -> bool:
        """Whether (expression, display_mode) is cached. Not counted as a hit."""
        ...


class DictRenderCache:
    """In-memory render cache using a dict."""

    __slots__ = ("_data", "hits")

    def __init__(self) -> None:
        self._data: dict[tuple[str, bool], str] = {}
        self.hits = 0

    def get(self, expression: str, display_mode: bool) -> str | None:
        """Return cached markup if present, else None."""
        html = self._data.get((expression, display_mode))
        if html is not None:
            self.hits += 1
        return html

    def put(self, expression: str, display_mode: bool, html: str) -> None:
        """Store rendered markup."""
        self._data[(expression, display_mode)] = html

    def __contains__(self, key: tuple[str, bool]) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


__all__ = [
    "DictRenderCache",
    "RenderCache",
]
