"""
mathssr — Pre-render LaTeX math in static HTML with KaTeX

Replaces every ``\\[ ... \\]`` and ``$ ... $`` expression in a document
with KaTeX markup ahead of time, so readers never see raw notation or a
rendering flicker, and switches off the client-side KaTeX scripts.

Quick Start:
    >>> from mathssr import prerender_file
    >>> report = prerender_file("index.html")  # doctest: +SKIP
    >>> report.stats.succeeded, report.stats.failed  # doctest: +SKIP
    (42, 0)

Custom backend:
    >>> from mathssr import ExpressionRenderer, substitute
    >>> renderer = ExpressionRenderer(lambda expr, opts: f"<m>{expr}</m>")
    >>> substitute("Let $x$ be real.", renderer).text
    'Let <m>x</m> be real.'

Installation:
    pip install mathssr
    npm install katex        # the default backend runs KaTeX in node
"""

from mathssr.build import BuildReport, create_renderer, prerender_file, prerender_text
from mathssr.cache import DictRenderCache, RenderCache
from mathssr.config import BuildConfig, KatexOptions
from mathssr.engine import SubstitutionEngine, substitute
from mathssr.errors import BackendUnavailableError, ConfigError, MathSSRError, RenderError
from mathssr.katex import MathBackend, NodeKatexBackend
from mathssr.neutralize import Policy, client_render_off, neutralize
from mathssr.outcome import (
    Rendered,
    RenderFailed,
    RenderOutcome,
    RenderStats,
    SubstitutionResult,
)
from mathssr.renderer import ExpressionRenderer
from mathssr.scanner import MathKind, Match, scan_display, scan_inline

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailableError",
    "BuildConfig",
    "BuildReport",
    "ConfigError",
    "DictRenderCache",
    "ExpressionRenderer",
    "KatexOptions",
    "Match",
    "MathBackend",
    "MathKind",
    "MathSSRError",
    "NodeKatexBackend",
    "Policy",
    "RenderCache",
    "RenderError",
    "RenderFailed",
    "RenderOutcome",
    "RenderStats",
    "Rendered",
    "SubstitutionEngine",
    "SubstitutionResult",
    "__version__",
    "client_render_off",
    "create_renderer",
    "neutralize",
    "prerender_file",
    "prerender_text",
    "scan_display",
    "scan_inline",
    "substitute",
]
