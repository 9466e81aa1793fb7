"""Composable policies that switch off client-side math rendering.

Once every expression is pre-rendered, the page no longer needs the
KaTeX scripts or its own ``renderMath()`` hook. These text policies
comment them out. The KaTeX stylesheet is left alone because the
pre-rendered markup still needs it. Policies compose via the | operator.

Example:
    >>> from mathssr.neutralize import client_render_off, disable_render_calls
    >>> disable_render_calls("renderMath();")
    '// renderMath(); // Disabled - using SSR'
    >>> html = client_render_off(html)  # doctest: +SKIP

Each policy leaves already neutralized text unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Callable

_KATEX_CDN = r"https://cdn\.jsdelivr\.net/npm/katex@[\d.]+/dist/"

_KATEX_SCRIPT_PATTERN = re.compile(
    r"(?<!<!-- )<script(?:\s+[^>]*?)?\s+src=\"" + _KATEX_CDN + r"katex\.min\.js\"[^>]*></script>"
)

_AUTO_RENDER_SCRIPT_PATTERN = re.compile(
    r"(?<!<!-- )<script(?:\s+[^>]*?)?\s+src=\""
    + _KATEX_CDN
    + r"contrib/auto-render\.min\.js\"[^>]*></script>"
)

_RENDER_CALL_PATTERN = re.compile(r"(?<!// )renderMath\(\);")

_RENDER_FUNCTION_PATTERN = re.compile(r"function renderMath\(\) \{(?! return;)")

# Ends after the debounced requestAnimationFrame block that closes renderMath().
_RENDER_FUNCTION_BODY_PATTERN = re.compile(
    r"function renderMath\(\) \{ return;[\s\S]*?"
    r"requestAnimationFrame\(\(\) => \{[\s\S]*?\}\);\s*\}, 150\);\s*\}"
)

DISABLED_NOTE = "Disabled - using SSR"


class Policy:
    """Wrapper for a str -> str transform, supports composition via |."""

    __slots__ = ("_fn", "name")

    def __init__(self, fn: Callable[[str], str], name: str | None = None) -> None:
        self._fn = fn
        self.name = name or fn.__name__.lstrip("_")

    def __call__(self, text: str) -> str:
        return self._fn(text)

    def __or__(self, other: Policy) -> Policy:
        """Chain policies: (self | other)(text) applies self then other."""

        def chained(text: str) -> str:
            return other._fn(self._fn(text))

        return Policy(chained, f"{self.name} | {other.name}")

    def __repr__(self) -> str:
        return f"Policy({self.name})"


def _comment_out_katex_script(text: str) -> str:
    """Comment out the KaTeX runtime script tag."""
    return _KATEX_SCRIPT_PATTERN.sub(
        lambda m: f"<!-- KaTeX JS not needed - using SSR -->\n  <!-- {m.group(0)} -->",
        text,
    )


def _comment_out_auto_render_script(text: str) -> str:
    """Comment out the KaTeX auto-render extension script tag."""
    return _AUTO_RENDER_SCRIPT_PATTERN.sub(lambda m: f"<!-- {m.group(0)} -->", text)


def _disable_render_calls(text: str) -> str:
    """Turn ``renderMath();`` calls into line comments."""
    return _RENDER_CALL_PATTERN.sub(f"// renderMath(); // {DISABLED_NOTE}", text)


def _disable_render_function(text: str) -> str:
    """Make renderMath() return immediately and comment out its body."""
    text = _RENDER_FUNCTION_PATTERN.sub(
        f"function renderMath() {{ return; // {DISABLED_NOTE}\n    /*", text
    )
    # Only the first definition is closed; a page defines renderMath once.
    match = _RENDER_FUNCTION_BODY_PATTERN.search(text)
    if match is None or text.startswith(" */", match.end()):
        return text
    return f"{text[: match.end()]} */{text[match.end() :]}"


comment_out_katex_script = Policy(_comment_out_katex_script)
comment_out_auto_render_script = Policy(_comment_out_auto_render_script)
disable_render_calls = Policy(_disable_render_calls)
disable_render_function = Policy(_disable_render_function)

client_render_off: Policy = (
    comment_out_katex_script
    | comment_out_auto_render_script
    | disable_render_calls
    | disable_render_function
)


def neutralize(text: str, *, policy: Policy | Callable[[str], str] = client_render_off) -> str:
    """Apply a neutralization policy to document text.

    Args:
        text: Document text
        policy: Policy or callable str -> str

    Returns:
        Transformed text
    """
    return policy(text)


__all__ = [
    "DISABLED_NOTE",
    "Policy",
    "client_render_off",
    "comment_out_auto_render_script",
    "comment_out_katex_script",
    "disable_render_calls",
    "disable_render_function",
    "neutralize",
]
