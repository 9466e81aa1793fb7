"""KaTeX backend for mathssr.

The typesetter is an external collaborator. Anything implementing the
MathBackend protocol can be plugged into ExpressionRenderer; the default,
NodeKatexBackend, runs ``katex.renderToString`` in a Node.js process.

The expression and options travel to node as JSON on stdin, so no
quoting of LaTeX into JavaScript source is needed. KaTeX must be
resolvable by ``require('katex')`` from the working directory (a local
``npm install katex``) or through NODE_PATH.

Usage:
    >>> backend = NodeKatexBackend(timeout=5)
    >>> backend.render_to_string("x^2", KatexOptions())  # doctest: +SKIP
    '<span class="katex">...</span>'

Custom backends:
    def fake_backend(expression: str, options: KatexOptions) -> str:
        return f"<span class='math'>{expression}</span>"

    renderer = ExpressionRenderer(fake_backend)
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable, Sequence
from typing import Protocol

from mathssr.config import KatexOptions
from mathssr.errors import BackendUnavailableError, RenderError
from mathssr.utils.logger import get_logger

logger = get_logger(__name__)


class MathBackend(Protocol):
    """Protocol for math typesetters.

    Contract:
        - Returns presentational markup for the expression
        - MAY raise on failure (RenderError preferred); the expression
          renderer converts any exception into a failed outcome
        - MUST NOT perform network I/O
    """

    def render_to_string(self, expression: str, options: KatexOptions) -> str:
        """Render one expression.

        Args:
            expression: Notation without delimiters
            options: Typesetting options (display mode included)

        Returns:
            Markup string
        """
        ...


# Support for plain callables: (expression, options) -> markup
SimpleBackend = Callable[[str, KatexOptions], str]


_RENDER_SCRIPT = """
const katex = require('katex');
let input = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', (chunk) => { input += chunk; });
process.stdin.on('end', () => {
  const request = JSON.parse(input);
  try {
    process.stdout.write(katex.renderToString(request.expression, request.options));
  } catch (e) {
    process.stderr.write(String(e && e.message ? e.message : e));
    process.exitCode = 1;
  }
});
"""

_BATCH_SCRIPT = """
const katex = require('katex');
let input = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', (chunk) => { input += chunk; });
process.stdin.on('end', () => {
  const results = JSON.parse(input).map((request) => {
    try {
      return { html: katex.renderToString(request.expression, request.options) };
    } catch (e) {
      return { error: String(e && e.message ? e.message : e) };
    }
  });
  process.stdout.write(JSON.stringify(results));
});
"""

_PROBE_SCRIPT = """
try {
  require('katex');
  process.exit(0);
} catch (e) {
  process.exit(1);
}
"""

_MISSING_MODULE = "Cannot find module 'katex'"

# Added to the base timeout for each expression in a batch.
_BATCH_TIMEOUT_PER_EXPRESSION = 0.5


class NodeKatexBackend:
    """Run KaTeX through ``node -e``.

    ``render_to_string`` starts one process per expression. Node startup
    dominates that cost, so ``render_batch`` renders many expressions in
    a single process; ExpressionRenderer.prefetch uses it to fill the
    render cache once per pass.

    Thread Safety:
        Stateless apart from configuration. Safe for concurrent use.
    """

    __slots__ = ("node_command", "timeout", "cwd")

    def __init__(
        self,
        node_command: str = "node",
        timeout: float = 10.0,
        cwd: str | None = None,
    ) -> None:
        self.node_command = node_command
        self.timeout = timeout
        self.cwd = cwd

    def _run(
        self, script: str, payload: str, timeout: float, expression: str, display_mode: bool
    ) -> subprocess.CompletedProcess[str]:
        try:
            result = subprocess.run(
                [self.node_command, "-e", script],
                input=payload,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=timeout,
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise BackendUnavailableError(
                expression, f"{self.node_command!r} not found", display_mode
            ) from e
        except subprocess.TimeoutExpired as e:
            raise BackendUnavailableError(expression, f"timed out after {timeout}s", display_mode) from e

        if result.returncode != 0:
            message = result.stderr.strip() or f"node exited with status {result.returncode}"
            if _MISSING_MODULE in message:
                raise BackendUnavailableError(expression, _MISSING_MODULE, display_mode)
            raise RenderError(expression, message, display_mode)
        return result

    def render_to_string(self, expression: str, options: KatexOptions) -> str:
        """Render one expression with KaTeX.

        Raises:
            RenderError: KaTeX rejected the expression
            BackendUnavailableError: node or the katex module is missing,
                or the process timed out
        """
        request = json.dumps({"expression": expression, "options": options.to_js()})
        result = self._run(_RENDER_SCRIPT, request, self.timeout, expression, options.display_mode)
        return result.stdout

    def render_batch(self, requests: Sequence[tuple[str, KatexOptions]]) -> list[str | RenderError]:
        """Render many expressions in one node process.

        Args:
            requests: (expression, options) pairs

        Returns:
            One entry per request, in order: markup on success, or the
            RenderError KaTeX raised for that expression

        Raises:
            BackendUnavailableError: node or the katex module is missing,
                or the process timed out
            RenderError: the process failed or its output was unreadable
        """
        if not requests:
            return []
        label = f"<batch of {len(requests)}>"
        payload = json.dumps(
            [{"expression": expression, "options": options.to_js()} for expression, options in requests]
        )
        timeout = self.timeout + _BATCH_TIMEOUT_PER_EXPRESSION * len(requests)
        result = self._run(_BATCH_SCRIPT, payload, timeout, label, False)

        try:
            items = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RenderError(label, f"unreadable batch output: {e}") from e
        if not isinstance(items, list) or len(items) != len(requests):
            raise RenderError(label, "batch output does not match the request count")

        results: list[str | RenderError] = []
        for (expression, options), item in zip(requests, items):
            if isinstance(item, dict) and isinstance(item.get("html"), str):
                results.append(item["html"])
            else:
                error = item.get("error") if isinstance(item, dict) else None
                results.append(RenderError(expression, error or "unknown error", options.display_mode))
        return results

    def is_available(self) -> bool:
        """Check that node runs and can load KaTeX."""
        try:
            result = subprocess.run(
                [self.node_command, "-e", _PROBE_SCRIPT],
                capture_output=True,
                text=True,
                timeout=5,
                cwd=self.cwd,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False
        if result.returncode != 0:
            logger.debug("KaTeX probe failed: %s", result.stderr.strip())
        return result.returncode == 0


__all__ = [
    "MathBackend",
    "NodeKatexBackend",
    "SimpleBackend",
]
