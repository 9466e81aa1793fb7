"""Document build: read, pre-render, neutralize, write.

This layer owns file I/O. It never catches I/O errors: an unreadable
input or an unwritable output raises the builtin OSError (or
UnicodeDecodeError, or UnicodeEncodeError when the rendered text has
characters the configured encoding cannot represent) unchanged. Output
is written atomically, so a failed write never truncates the file.
Render failures never stop a build; they are logged and counted.

Usage:
    >>> from mathssr.build import prerender_file
    >>> report = prerender_file("index.html")  # doctest: +SKIP
    >>> report.summary()  # doctest: +SKIP
    {'succeeded': 42, 'failed': 0, 'total': 42, 'output': 'index.html'}
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mathssr.cache import DictRenderCache
from mathssr.config import DEFAULT_CONFIG, BuildConfig
from mathssr.engine import substitute
from mathssr.katex import MathBackend, NodeKatexBackend, SimpleBackend
from mathssr.neutralize import client_render_off
from mathssr.outcome import RenderStats
from mathssr.renderer import ExpressionRenderer
from mathssr.utils.logger import get_logger

logger = get_logger(__name__)

# Permissions for an output file that did not exist before.
_NEW_FILE_MODE = 0o644


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Result of a document build.

    Attributes:
        text: Final document text
        stats: Render counts
        output_path: Where the text was written (None for in-memory builds)

    """

    text: str
    stats: RenderStats
    output_path: Path | None = None

    @property
    def ok(self) -> bool:
        """True when no expression failed."""
        return self.stats.failed == 0

    def summary(self) -> dict[str, Any]:
        """Get counts and output location as a dict."""
        summary: dict[str, Any] = dict(self.stats.summary())
        summary["output"] = str(self.output_path) if self.output_path is not None else None
        return summary


def create_renderer(
    config: BuildConfig = DEFAULT_CONFIG,
    backend: MathBackend | SimpleBackend | None = None,
) -> ExpressionRenderer:
    """Build an ExpressionRenderer from configuration.

    Args:
        config: Build configuration
        backend: Backend override (defaults to NodeKatexBackend)

    Returns:
        ExpressionRenderer with a fresh cache when caching is enabled
    """
    if backend is None:
        backend = NodeKatexBackend(node_command=config.node_command, timeout=config.timeout)
    cache = DictRenderCache() if config.cache else None
    return ExpressionRenderer(backend, options=config.katex, cache=cache)


def prerender_text(
    text: str,
    renderer: ExpressionRenderer,
    *,
    neutralize: bool = True,
) -> BuildReport:
    """Pre-render all math in text and optionally disable client rendering.

    Args:
        text: Document text
        renderer: Expression renderer
        neutralize: Comment out KaTeX scripts and renderMath()

    Returns:
        BuildReport without an output path
    """
    result = substitute(text, renderer)
    output = client_render_off(result.text) if neutralize else result.text
    return BuildReport(text=output, stats=result.stats)


def _write_atomic(target: Path, text: str, encoding: str) -> None:
    """Replace target with text, leaving it untouched if anything fails.

    The text is encoded before any file is opened, then written to a
    temporary file beside target and renamed over it.
    """
    data = text.encode(encoding)
    with tempfile.NamedTemporaryFile(
        "wb", dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
    ) as tmp:
        tmp_path = Path(tmp.name)
    try:
        tmp_path.write_bytes(data)
        if target.exists():
            shutil.copymode(target, tmp_path)
        else:
            tmp_path.chmod(_NEW_FILE_MODE)
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def prerender_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    *,
    config: BuildConfig = DEFAULT_CONFIG,
    backend: MathBackend | SimpleBackend | None = None,
) -> BuildReport:
    """Pre-render a document file.

    Args:
        input_path: Document to read
        output_path: Destination (defaults to overwriting input_path)
        config: Build configuration
        backend: Backend override (defaults to NodeKatexBackend)

    Returns:
        BuildReport for the written document

    Raises:
        OSError: Input unreadable or output unwritable (propagated unchanged)
        UnicodeError: Input undecodable or output unencodable; the
            destination is left as it was
    """
    source = Path(input_path)
    target = Path(output_path) if output_path is not None else source

    logger.info("Processing %s", source)
    # newline="" keeps CRLF documents unchanged outside math spans.
    with source.open(encoding=config.encoding, newline="") as f:
        text = f.read()

    report = prerender_text(text, create_renderer(config, backend), neutralize=config.neutralize)
    _write_atomic(target, report.text, config.encoding)

    stats = report.stats
    logger.info("%d math expressions rendered", stats.succeeded)
    if stats.failed:
        logger.warning("%d expressions failed to render", stats.failed)
    logger.info("Output: %s", target)

    return BuildReport(text=report.text, stats=stats, output_path=target)


__all__ = [
    "BuildReport",
    "create_renderer",
    "prerender_file",
    "prerender_text",
]
