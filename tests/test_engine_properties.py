"""Property-based tests for the substitution engine using Hypothesis.

These tests verify invariants that should hold for any document:
1. Text without delimiters passes through untouched
2. An always-failing renderer leaves every document byte-identical
3. Well-formed spans are each rendered exactly once
4. Markup from a display render is never rescanned by the inline pass
5. Scanner matches are ordered, non-overlapping slices of the input
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from mathssr.engine import substitute
from mathssr.errors import RenderError
from mathssr.renderer import ExpressionRenderer
from mathssr.scanner import scan_display, scan_inline

# Small alphabet that hits every delimiter edge case often.
delimiter_soup = st.text(alphabet="ab $\\[]\n", max_size=60)

plain_text = st.text(max_size=80).filter(lambda s: "$" not in s and "\\[" not in s)

expressions = st.text(alphabet="abcxyz0123+-^_{}=", min_size=1, max_size=12)
separators = st.text(alphabet="abc ,.<>/p\n", min_size=1, max_size=10)


def _failing(expression, options):
    raise RenderError(expression, "always fails", options.display_mode)


def _echo(expression, options):
    return f"<m d={int(options.display_mode)}>{expression}</m>"


class TestPassThroughProperties:
    @given(text=plain_text)
    @settings(max_examples=100)
    def test_text_without_delimiters_is_unchanged(self, text: str) -> None:
        calls: list[str] = []

        def backend(expression, options):
            calls.append(expression)
            return "<m/>"

        result = substitute(text, ExpressionRenderer(backend))
        assert result.text == text
        assert result.stats.total == 0
        assert calls == []

    @given(text=delimiter_soup)
    @settings(max_examples=200)
    def test_always_failing_renderer_round_trips(self, text: str) -> None:
        result = substitute(text, ExpressionRenderer(_failing))
        expected_failures = len(list(scan_display(text))) + len(list(scan_inline(text)))
        assert result.text == text
        assert result.stats.failed == expected_failures
        assert result.stats.succeeded == 0


class TestCompletenessProperties:
    @given(
        spans=st.lists(st.tuples(st.booleans(), expressions), max_size=8),
        seps=st.lists(separators, min_size=9, max_size=9),
    )
    @settings(max_examples=100)
    def test_every_span_rendered_once(self, spans, seps) -> None:
        calls: list[tuple[str, bool]] = []

        def backend(expression, options):
            calls.append((expression, options.display_mode))
            return _echo(expression, options)

        parts = [seps[0]]
        for i, (display, expr) in enumerate(spans):
            parts.append(f"\\[{expr}\\]" if display else f"${expr}$")
            parts.append(seps[i + 1])
        text = "".join(parts)

        result = substitute(text, ExpressionRenderer(backend))

        display_count = sum(1 for display, _ in spans if display)
        assert len(calls) == len(spans)
        assert result.stats.succeeded == len(spans)
        assert [c for c in calls if c[1]] == [(e, True) for d, e in spans if d]
        assert [c for c in calls if not c[1]] == [(e, False) for d, e in spans if not d]
        assert all(c[1] for c in calls[:display_count])
        assert "$" not in result.text
        assert "\\[" not in result.text
        assert "\\]" not in result.text


    @given(
        spans=st.lists(st.tuples(st.booleans(), expressions), max_size=8),
        seps=st.lists(separators, min_size=9, max_size=9),
    )
    @settings(max_examples=100)
    def test_dollars_in_display_markup_never_reach_inline_pass(self, spans, seps) -> None:
        calls: list[tuple[str, bool]] = []

        def backend(expression, options):
            calls.append((expression, options.display_mode))
            return "<m>$</m>" if options.display_mode else "<i/>"

        parts = [seps[0]]
        for i, (display, expr) in enumerate(spans):
            parts.append(f"\\[{expr}\\]" if display else f"${expr}$")
            parts.append(seps[i + 1])

        result = substitute("".join(parts), ExpressionRenderer(backend))

        assert sorted(calls) == sorted((e, d) for d, e in spans)
        assert result.text.count("$") == sum(1 for d, _ in spans if d)

class TestScannerProperties:
    @given(text=delimiter_soup)
    @settings(max_examples=200)
    def test_matches_are_ordered_slices(self, text: str) -> None:
        for scanner in (scan_display, scan_inline):
            last_end = 0
            for match in scanner(text):
                assert match.start >= last_end
                assert match.end > match.start
                assert text[match.start : match.end] == match.source
                last_end = match.end

    @given(text=delimiter_soup)
    @settings(max_examples=200)
    def test_inline_expressions_never_contain_dollar(self, text: str) -> None:
        for match in scan_inline(text):
            assert "$" not in match.expression
            assert match.expression
