"""Result values for rendering and substitution.

A render produces a tagged outcome instead of raising: either Rendered
(presentational markup) or RenderFailed (the error plus a fallback that
keeps the original notation visible). Counts are collected per run in
RenderStats and returned with the substituted text, so a run never
touches process-wide state.

Example:
    >>> outcome = RenderFailed("x^", "Expected group after '^'", display_mode=False)
    >>> outcome.ok, outcome.text
    (False, '$x^$')
"""

from __future__ import annotations

from dataclasses import dataclass, field


def wrap_expression(expression: str, display_mode: bool) -> str:
    """Re-wrap an expression in its source delimiters."""
    if display_mode:
        return f"\\[{expression}\\]"
    return f"${expression}$"


@dataclass(frozen=True, slots=True)
class Rendered:
    """Successful render.

    Attributes:
        html: Presentational markup from the typesetter

    """

    html: str

    @property
    def ok(self) -> bool:
        return True

    @property
    def text(self) -> str:
        """String to place into the document."""
        return self.html


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """Failed render.

    Attributes:
        expression: Notation that failed (trimmed, no delimiters)
        message: Underlying error message
        display_mode: Mode the expression was rendered in

    """

    expression: str
    message: str
    display_mode: bool = False

    @property
    def ok(self) -> bool:
        return False

    @property
    def fallback(self) -> str:
        """Original expression inside its source delimiters."""
        return wrap_expression(self.expression, self.display_mode)

    @property
    def text(self) -> str:
        """String to place into the document."""
        return self.fallback


RenderOutcome = Rendered | RenderFailed


@dataclass(slots=True)
class RenderStats:
    """Running totals for one substitution run.

    Attributes:
        succeeded: Expressions rendered to markup
        failed: Expressions left in their original notation
        failures: The failed outcomes, in document order

    """

    succeeded: int = 0
    failed: int = 0
    failures: list[RenderFailed] = field(default_factory=list)

    def record(self, outcome: RenderOutcome) -> None:
        """Count one outcome."""
        if isinstance(outcome, Rendered):
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append(outcome)

    def merge(self, other: RenderStats) -> None:
        """Add another run's totals to this one."""
        self.succeeded += other.succeeded
        self.failed += other.failed
        self.failures.extend(other.failures)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def summary(self) -> dict[str, int]:
        """Get counts as a dict.

        Returns:
            Dict with succeeded, failed and total.

        """
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class SubstitutionResult:
    """Output of a substitution run.

    Attributes:
        text: Document text with every matched span replaced
        stats: Success and failure counts for the run

    """

    text: str
    stats: RenderStats

    @property
    def succeeded(self) -> int:
        return self.stats.succeeded

    @property
    def failed(self) -> int:
        return self.stats.failed


__all__ = [
    "RenderFailed",
    "RenderOutcome",
    "RenderStats",
    "Rendered",
    "SubstitutionResult",
    "wrap_expression",
]
