"""Substitution engine: replace embedded math with rendered markup.

Two passes over the document text:

1. Display pass: every ``\\[ ... \\]`` span is rendered in display mode.
2. Inline pass: every ``$ ... $`` span in the *output* of pass 1 is
   rendered in inline mode, except inside markup pass 1 produced.

Each pass walks the scanner's matches once, copying the text between
matches verbatim and splicing the rendered markup in place of each span.
Output is assembled from slices of the pass input, so markup produced by
a pass is never rescanned by that same pass and offsets never shift.
The display pass records where its rendered markup landed and the
inline pass only scans the gaps between those ranges. A failed display
span keeps its source text and stays visible to the inline pass.

Before a pass substitutes, its expressions are handed to the renderer's
``prefetch`` so a batching backend can render them in one call.

When an expression fails to render, the original delimited span is put
back unchanged. A document whose every expression fails comes out
identical to the input.

Example:
    >>> renderer = ExpressionRenderer(lambda e, o: "[D]" if o.display_mode else "[I]")
    >>> result = substitute(r"\\[a+b\\] and $c+d$", renderer)
    >>> result.text
    '[D] and [I]'
    >>> result.stats.succeeded
    2
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from mathssr.outcome import Rendered, RenderStats, SubstitutionResult
from mathssr.renderer import ExpressionRenderer
from mathssr.scanner import MathKind, scan
from mathssr.utils.logger import get_logger

logger = get_logger(__name__)

# Display spans first: the inline pass must see their output, not their source.
PASS_ORDER: tuple[MathKind, ...] = (MathKind.DISPLAY, MathKind.INLINE)

Span = tuple[int, int]


def _gaps(length: int, skip: Sequence[Span]) -> Iterator[Span]:
    """Yield the (start, end) ranges of [0, length) not covered by skip."""
    pos = 0
    for start, end in skip:
        if start > pos:
            yield pos, start
        pos = end
    if pos < length:
        yield pos, length


def substitute_pass(
    text: str,
    kind: MathKind,
    renderer: ExpressionRenderer,
    stats: RenderStats,
    skip: Sequence[Span] = (),
    rendered: list[Span] | None = None,
) -> str:
    """Run one scan-and-replace pass.

    Args:
        text: Pass input
        kind: Delimiter convention to scan for
        renderer: Expression renderer
        stats: Run totals, updated once per match
        skip: Sorted, disjoint ranges of text that are copied but not scanned
        rendered: If given, receives the output ranges of successful renders

    Returns:
        Pass output
    """
    matches = [
        (gap_start + m.start, gap_start + m.end, m)
        for gap_start, gap_end in _gaps(len(text), skip)
        for m in scan(text[gap_start:gap_end], kind)
    ]
    if not matches:
        return text
    renderer.prefetch((m.expression.strip(), m.display_mode) for _, _, m in matches)

    parts: list[str] = []
    pos = 0
    out_len = 0
    for start, end, match in matches:
        before = text[pos:start]
        parts.append(before)
        out_len += len(before)

        outcome = renderer.render(match.expression.strip(), match.display_mode)
        stats.record(outcome)
        if isinstance(outcome, Rendered):
            replacement = outcome.html
            if rendered is not None:
                rendered.append((out_len, out_len + len(replacement)))
        else:
            replacement = match.source
        parts.append(replacement)
        out_len += len(replacement)
        pos = end

    parts.append(text[pos:])
    return "".join(parts)


def substitute(text: str, renderer: ExpressionRenderer) -> SubstitutionResult:
    """Replace every display and inline math span in text.

    Never raises for a bad expression; failures are counted and the
    original notation is kept. Markup produced by a successful render is
    never scanned again, so a ``$`` inside rendered output stays literal.

    Args:
        text: Full document text
        renderer: Expression renderer

    Returns:
        SubstitutionResult with the new text and this run's counts
    """
    stats = RenderStats()
    protected: list[Span] = []
    for kind in PASS_ORDER:
        rendered: list[Span] = []
        text = substitute_pass(text, kind, renderer, stats, skip=protected, rendered=rendered)
        # Only the previous pass's output is protected; PASS_ORDER has two kinds.
        protected = rendered
        logger.debug("%s pass done: %d rendered, %d failed", kind.value, stats.succeeded, stats.failed)
    return SubstitutionResult(text=text, stats=stats)


class SubstitutionEngine:
    """Reusable engine bound to one renderer.

    Each call is a self-contained run with its own counts.

    Example:
        >>> engine = SubstitutionEngine(ExpressionRenderer(lambda e, o: "<m/>"))
        >>> engine("$x$").text
        '<m/>'
    """

    __slots__ = ("renderer",)

    def __init__(self, renderer: ExpressionRenderer) -> None:
        self.renderer = renderer

    def __call__(self, text: str) -> SubstitutionResult:
        return substitute(text, self.renderer)


__all__ = [
    "PASS_ORDER",
    "SubstitutionEngine",
    "substitute",
    "substitute_pass",
]
