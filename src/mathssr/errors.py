"""Exception classes for mathssr.

Backends raise these; the expression renderer catches them at its
boundary and turns them into tagged outcomes. File I/O errors are never
wrapped here, they propagate to the caller as the builtin exceptions.
"""

from __future__ import annotations


class MathSSRError(Exception):
    """Base exception for all mathssr errors."""

    pass


class RenderError(MathSSRError):
    """A single expression failed to typeset.

    Raised by math backends. Recoverable: the renderer logs it, counts it
    and keeps the original notation in the document.
    """

    def __init__(
        self,
        expression: str,
        message: str,
        display_mode: bool = False,
    ) -> None:
        """Initialize render error.

        Args:
            expression: The notation that failed (without delimiters)
            message: Underlying error message from the typesetter
            display_mode: Whether the expression was rendered as a block
        """
        self.expression = expression
        self.message = message
        self.display_mode = display_mode

        mode = "display" if display_mode else "inline"
        super().__init__(f"Cannot render {mode} math {expression!r}: {message}")


class BackendUnavailableError(RenderError):
    """The typesetting backend could not be started at all.

    Raised when ``node`` is missing or the render process times out.
    Still a RenderError, so a build degrades instead of crashing.
    """

    pass


class ConfigError(MathSSRError):
    """Invalid configuration value."""

    def __init__(self, key: str, message: str) -> None:
        """Initialize config error.

        Args:
            key: Name of the offending configuration key
            message: Description of the problem
        """
        self.key = key
        super().__init__(f"Config '{key}': {message}")
