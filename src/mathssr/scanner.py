"""Delimiter scanners for embedded math.

Two explicit left-to-right scanners, one per delimiter convention:

- scan_display(): ``\\[ ... \\]`` block spans
- scan_inline(): ``$ ... $`` inline spans

Both are single linear passes over the input. They yield Match objects
in document order; spans never overlap. Neither scanner looks at the
markup around a span (no tag tree is built), so math inside ``<script>``
or ``<pre>`` is matched like any other text.

Display rules:
    A span opens at ``\\[`` and closes at the first ``\\]`` after it.
    There is no nesting and no escaping. Once an opening has no closing
    after it, no later opening can have one either, so the scan stops.

Inline rules:
    An opening ``$`` must not be preceded by a backslash and must not be
    followed by another ``$``. The candidate closing is the nearest ``$``
    after the opening, so the expression never contains a ``$``. The
    closing has the same two constraints. When the closing is invalid the
    opening is dropped and the scan resumes at the candidate closing,
    which may open a span of its own. ``$$ ... $$`` is therefore never
    matched, and ``\\$5`` stays literal.

Example:
    >>> [m.expression for m in scan_inline(r"price: \\$5 and $x+1$")]
    ['x+1']
    >>> list(scan_inline("$$E=mc^2$$"))
    []
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

DISPLAY_OPEN = "\\["
DISPLAY_CLOSE = "\\]"
DOLLAR = "$"
BACKSLASH = "\\"


class MathKind(Enum):
    """Delimiter convention of a span."""

    DISPLAY = "display"
    INLINE = "inline"

    @property
    def display_mode(self) -> bool:
        return self is MathKind.DISPLAY


@dataclass(frozen=True, slots=True)
class Match:
    """A delimiter-bound span found by a scanner.

    Attributes:
        kind: DISPLAY or INLINE
        expression: Raw text between the delimiters (not trimmed)
        start: Offset of the opening delimiter
        end: Offset just past the closing delimiter
        source: The full delimited slice, text[start:end]

    """

    kind: MathKind
    expression: str
    start: int
    end: int
    source: str

    @property
    def display_mode(self) -> bool:
        return self.kind.display_mode


def scan_display(text: str) -> Iterator[Match]:
    """Yield ``\\[ ... \\]`` spans, shortest match, left to right.

    Args:
        text: Text to scan

    Yields:
        Match for each display span
    """
    pos = 0
    while True:
        start = text.find(DISPLAY_OPEN, pos)
        if start == -1:
            return
        content_start = start + len(DISPLAY_OPEN)
        close = text.find(DISPLAY_CLOSE, content_start)
        if close == -1:
            return
        end = close + len(DISPLAY_CLOSE)
        yield Match(
            kind=MathKind.DISPLAY,
            expression=text[content_start:close],
            start=start,
            end=end,
            source=text[start:end],
        )
        pos = end


def _escaped(text: str, pos: int) -> bool:
    """True if the character at pos is directly preceded by a backslash."""
    return pos > 0 and text[pos - 1] == BACKSLASH


def _doubled(text: str, pos: int) -> bool:
    """True if the character at pos is directly followed by another $."""
    return pos + 1 < len(text) and text[pos + 1] == DOLLAR


def scan_inline(text: str) -> Iterator[Match]:
    """Yield single-dollar ``$ ... $`` spans, left to right.

    Args:
        text: Text to scan

    Yields:
        Match for each inline span
    """
    pos = 0
    while True:
        start = text.find(DOLLAR, pos)
        if start == -1:
            return
        if _escaped(text, start) or _doubled(text, start):
            pos = start + 1
            continue

        # Not doubled, so close > start + 1 and the expression is non-empty.
        close = text.find(DOLLAR, start + 1)
        if close == -1:
            return
        if _escaped(text, close) or _doubled(text, close):
            pos = close
            continue

        end = close + 1
        yield Match(
            kind=MathKind.INLINE,
            expression=text[start + 1 : close],
            start=start,
            end=end,
            source=text[start:end],
        )
        pos = end


def scan(text: str, kind: MathKind) -> Iterator[Match]:
    """Dispatch to the scanner for kind."""
    if kind is MathKind.DISPLAY:
        return scan_display(text)
    return scan_inline(text)


__all__ = [
    "MathKind",
    "Match",
    "scan",
    "scan_display",
    "scan_inline",
]
