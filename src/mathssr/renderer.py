"""Expression renderer: the boundary around the math typesetter.

ExpressionRenderer turns one expression into a tagged outcome. It is
the only place backend exceptions are caught: a failed expression is
logged with its notation and the underlying message, and the outcome
carries a fallback that shows the original notation instead of a blank
or broken region.

Example:
    >>> renderer = ExpressionRenderer(lambda expr, opts: f"<b>{expr}</b>")
    >>> renderer.render("x^2", display_mode=False).text
    '<b>x^2</b>'

Thread Safety:
    The renderer holds no counters. Thread safety depends on the backend
    and on the cache (DictRenderCache is not thread-safe).
"""

from __future__ import annotations

from collections.abc import Iterable

from mathssr.cache import RenderCache
from mathssr.config import KatexOptions
from mathssr.katex import MathBackend, SimpleBackend
from mathssr.outcome import Rendered, RenderFailed, RenderOutcome
from mathssr.utils.logger import get_logger

logger = get_logger(__name__)


class ExpressionRenderer:
    """Render single expressions through a backend, never raising.

    Args:
        backend: MathBackend implementation or a plain callable
            ``(expression, options) -> markup``
        options: Base typesetting options; display mode is set per call
        cache: Optional render cache. With a cache and a backend that
            has ``render_batch``, prefetch renders a whole pass at once

    """

    __slots__ = ("_render", "_batch", "options", "cache")

    def __init__(
        self,
        backend: MathBackend | SimpleBackend,
        options: KatexOptions | None = None,
        cache: RenderCache | None = None,
    ) -> None:
        render_to_string = getattr(backend, "render_to_string", None)
        self._render: SimpleBackend = render_to_string if callable(render_to_string) else backend
        render_batch = getattr(backend, "render_batch", None)
        self._batch = render_batch if callable(render_batch) else None
        self.options = options or KatexOptions()
        self.cache = cache

    def render(self, expression: str, display_mode: bool) -> RenderOutcome:
        """Render an expression.

        Args:
            expression: Trimmed notation without delimiters
            display_mode: Block (True) or inline (False) rendering

        Returns:
            Rendered on success, RenderFailed otherwise
        """
        if self.cache is not None:
            cached = self.cache.get(expression, display_mode)
            if cached is not None:
                logger.debug("Cache hit: %s", expression)
                return Rendered(cached)

        options = self.options.for_mode(display_mode)
        try:
            html = self._render(expression, options)
        except Exception as e:
            # Renderer boundary: any backend failure degrades to the fallback.
            message = getattr(e, "message", None) or str(e) or type(e).__name__
            logger.warning("Error rendering: %s", expression)
            logger.warning("   %s", message)
            return RenderFailed(expression, message, display_mode)

        if self.cache is not None:
            self.cache.put(expression, display_mode, html)
        return Rendered(html)

    def prefetch(self, requests: Iterable[tuple[str, bool]]) -> int:
        """Warm the cache through the backend's batch call, if it has one.

        Pairs already cached or repeated are sent once. Expressions the
        batch could not render are left out of the cache, so ``render``
        retries them one by one and reports them the usual way. A failed
        batch is logged and otherwise ignored.

        Args:
            requests: (expression, display_mode) pairs

        Returns:
            Number of renders added to the cache
        """
        if self.cache is None or self._batch is None:
            return 0
        pending = [key for key in dict.fromkeys(requests) if key not in self.cache]
        if not pending:
            return 0

        try:
            results = self._batch(
                [(expression, self.options.for_mode(display_mode)) for expression, display_mode in pending]
            )
        except Exception as e:
            logger.warning("Batch render of %d expressions failed: %s", len(pending), e)
            return 0

        added = 0
        for (expression, display_mode), result in zip(pending, results):
            if isinstance(result, str):
                self.cache.put(expression, display_mode, result)
                added += 1
        logger.debug("Prefetched %d of %d expressions", added, len(pending))
        return added

    def render_to_string(self, expression: str, display_mode: bool) -> str:
        """Render and return markup or the fallback text."""
        return self.render(expression, display_mode).text


__all__ = [
    "ExpressionRenderer",
]
