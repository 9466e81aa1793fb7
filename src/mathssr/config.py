"""Configuration for mathssr.

Two immutable configuration objects:

- KatexOptions: the option object handed to ``katex.renderToString`` for
  one expression. Defaults never abort a build: errors are reported
  instead of thrown, validation is relaxed, every macro is trusted
  (input is first-party) and the output is HTML markup, not SVG.
- BuildConfig: settings for a whole document build (node executable,
  timeout, whether to neutralize client scripts, encoding, cache).

Usage:
    >>> from mathssr.config import BuildConfig, KatexOptions
    >>> KatexOptions().for_mode(display_mode=True).to_js()["displayMode"]
    True
    >>> config = BuildConfig.from_dict({"timeout": 5, "unknown": 1})
    >>> config.timeout
    5.0

BuildConfig can also be read from a ``[tool.mathssr]`` table:

    [tool.mathssr]
    node_command = "/usr/local/bin/node"
    timeout = 20
    neutralize = true
"""

from __future__ import annotations

import dataclasses
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mathssr.errors import ConfigError

_OUTPUT_FORMATS = frozenset(("html", "mathml", "htmlAndMathml"))


@dataclass(frozen=True, slots=True)
class KatexOptions:
    """Options for one renderToString call.

    Attributes:
        display_mode: Render as a block (True) or inline (False)
        throw_on_error: Let KaTeX throw on parse errors
        strict: Enforce LaTeX faithfulness
        trust: Allow macros such as \\href and \\includegraphics
        output: "html", "mathml" or "htmlAndMathml"

    """

    display_mode: bool = False
    throw_on_error: bool = False
    strict: bool = False
    trust: bool = True
    output: str = "html"

    def __post_init__(self) -> None:
        if self.output not in _OUTPUT_FORMATS:
            raise ConfigError("output", f"expected one of {sorted(_OUTPUT_FORMATS)}, got {self.output!r}")

    def for_mode(self, display_mode: bool) -> KatexOptions:
        """Return a copy with the given display mode."""
        if display_mode == self.display_mode:
            return self
        return dataclasses.replace(self, display_mode=display_mode)

    def to_js(self) -> dict[str, Any]:
        """Return the camelCase option object KaTeX expects."""
        return {
            "displayMode": self.display_mode,
            "throwOnError": self.throw_on_error,
            "strict": self.strict,
            "trust": self.trust,
            "output": self.output,
        }


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Immutable settings for a document build.

    Attributes:
        node_command: Executable used to run KaTeX
        timeout: Seconds allowed for a single expression
        neutralize: Disable client-side KaTeX scripts after rendering
        encoding: Text encoding of input and output documents
        cache: Reuse rendered markup for repeated expressions
        katex: Base typesetting options

    """

    node_command: str = "node"
    timeout: float = 10.0
    neutralize: bool = True
    encoding: str = "utf-8"
    cache: bool = True
    katex: KatexOptions = KatexOptions()

    def __post_init__(self) -> None:
        if not self.node_command:
            raise ConfigError("node_command", "must not be empty")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigError("timeout", f"expected a number, got {self.timeout!r}")
        if self.timeout <= 0:
            raise ConfigError("timeout", f"must be positive, got {self.timeout!r}")
        # Normalize ints from TOML/CLI so equality checks behave.
        object.__setattr__(self, "timeout", float(self.timeout))

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> BuildConfig:
        """Create BuildConfig from a dictionary.

        Unknown keys are silently ignored. A nested ``katex`` table is
        turned into KatexOptions (using the Python field names).

        Args:
            config_dict: Dictionary with config values

        Returns:
            New BuildConfig instance

        Raises:
            ConfigError: If a value is invalid

        Example:
            >>> BuildConfig.from_dict({"neutralize": False}).neutralize
            False

        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}

        katex = filtered.get("katex")
        if isinstance(katex, dict):
            katex_fields = {f.name for f in dataclasses.fields(KatexOptions)}
            filtered["katex"] = KatexOptions(**{k: v for k, v in katex.items() if k in katex_fields})
        elif katex is not None and not isinstance(katex, KatexOptions):
            raise ConfigError("katex", f"expected a table, got {type(katex).__name__}")

        return cls(**filtered)

    @classmethod
    def from_pyproject(cls, path: str | Path) -> BuildConfig:
        """Load the ``[tool.mathssr]`` table of a pyproject.toml.

        A missing table yields the default configuration. A missing or
        unreadable file raises the underlying OSError; a ``tool`` or
        ``tool.mathssr`` entry that is not a table raises ConfigError.
        """
        with Path(path).open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError("pyproject", str(e)) from e
        tool = data.get("tool", {})
        if not isinstance(tool, dict):
            raise ConfigError("tool", f"expected a table, got {type(tool).__name__}")
        table = tool.get("mathssr", {})
        if not isinstance(table, dict):
            raise ConfigError("tool.mathssr", f"expected a table, got {type(table).__name__}")
        return cls.from_dict(table)


DEFAULT_CONFIG: BuildConfig = BuildConfig()


__all__ = [
    "DEFAULT_CONFIG",
    "BuildConfig",
    "KatexOptions",
]
