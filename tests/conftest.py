"""Shared fixtures: fake math backends (tests never start node)."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

import pytest

from mathssr.config import KatexOptions
from mathssr.errors import RenderError
from mathssr.renderer import ExpressionRenderer


class RecordingBackend:
    """Backend that records calls and returns <D>expr</D> or <I>expr</I>."""

    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self.calls: list[tuple[str, bool]] = []
        self.options: list[KatexOptions] = []
        self.fail_on = set(fail_on)

    def render_to_string(self, expression: str, options: KatexOptions) -> str:
        self.calls.append((expression, options.display_mode))
        self.options.append(options)
        if expression in self.fail_on:
            raise RenderError(expression, "Undefined control sequence", options.display_mode)
        tag = "D" if options.display_mode else "I"
        return f"<{tag}>{expression}</{tag}>"


class BatchBackend(RecordingBackend):
    """RecordingBackend that also renders whole batches, recording each one."""

    def __init__(self, fail_on: Iterable[str] = (), batch_error: Exception | None = None) -> None:
        super().__init__(fail_on)
        self.batches: list[list[tuple[str, bool]]] = []
        self.batch_error = batch_error

    def render_batch(self, requests: Sequence[tuple[str, KatexOptions]]) -> list[str | RenderError]:
        self.batches.append([(expression, options.display_mode) for expression, options in requests])
        if self.batch_error is not None:
            raise self.batch_error
        results: list[str | RenderError] = []
        for expression, options in requests:
            if expression in self.fail_on:
                results.append(RenderError(expression, "Undefined control sequence", options.display_mode))
            else:
                tag = "D" if options.display_mode else "I"
                results.append(f"<{tag}>{expression}</{tag}>")
        return results


class FailingBackend:
    """Backend that rejects every expression."""

    def __init__(self) -> None:
        self.calls = 0

    def render_to_string(self, expression: str, options: KatexOptions) -> str:
        self.calls += 1
        raise RenderError(expression, "KaTeX parse error", options.display_mode)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_backend() -> Callable[..., RecordingBackend]:
    return RecordingBackend


@pytest.fixture
def failing_backend() -> FailingBackend:
    return FailingBackend()


@pytest.fixture
def renderer(backend: RecordingBackend) -> ExpressionRenderer:
    return ExpressionRenderer(backend)


@pytest.fixture
def failing_renderer(failing_backend: FailingBackend) -> ExpressionRenderer:
    return ExpressionRenderer(failing_backend)


@pytest.fixture
def make_batch_backend() -> Callable[..., BatchBackend]:
    return BatchBackend
