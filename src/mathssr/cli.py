"""Command line entry point.

Usage:
    mathssr index.html                  # pre-render in place
    mathssr src.html -o dist/index.html
    mathssr index.html --check          # exit 1 if any expression failed
    mathssr --check-backend             # verify node + KaTeX

Options:
    -o, --output       Write here instead of overwriting the input
    --no-neutralize    Keep the client-side KaTeX scripts enabled
    --node             Node.js executable
    --timeout          Seconds allowed per expression
    --config           pyproject.toml with a [tool.mathssr] table
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Sequence

from mathssr import __version__
from mathssr.build import prerender_file
from mathssr.config import BuildConfig
from mathssr.errors import ConfigError
from mathssr.katex import NodeKatexBackend


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mathssr",
        description="Pre-render LaTeX math in an HTML document with KaTeX",
    )
    parser.add_argument("input", nargs="?", help="Document to pre-render")
    parser.add_argument("-o", "--output", help="Output path (default: overwrite input)")
    parser.add_argument(
        "--no-neutralize",
        dest="neutralize",
        action="store_false",
        default=None,
        help="Keep client-side KaTeX scripts and renderMath() enabled",
    )
    parser.add_argument("--node", dest="node_command", help="Node.js executable")
    parser.add_argument("--timeout", type=float, help="Seconds allowed per expression")
    parser.add_argument("--config", help="pyproject.toml to read [tool.mathssr] from")
    parser.add_argument("--check", action="store_true", help="Exit 1 if any expression failed")
    parser.add_argument(
        "--check-backend", action="store_true", help="Verify node and KaTeX are available, then exit"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> BuildConfig:
    """Merge the config file (if any) with command line overrides."""
    config = BuildConfig.from_pyproject(args.config) if args.config else BuildConfig()
    overrides = {
        key: getattr(args, key)
        for key in ("node_command", "timeout", "neutralize")
        if getattr(args, key) is not None
    }
    return dataclasses.replace(config, **overrides) if overrides else config


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args)
    except ConfigError as e:
        parser.error(str(e))

    if args.check_backend:
        backend = NodeKatexBackend(node_command=config.node_command, timeout=config.timeout)
        if backend.is_available():
            print("KaTeX backend available")
            return 0
        print("KaTeX backend unavailable: install Node.js and `npm install katex`", file=sys.stderr)
        return 1

    if not args.input:
        parser.error("the following arguments are required: input")

    report = prerender_file(args.input, args.output, config=config)
    stats = report.stats

    print(f"{stats.succeeded} LaTeX expressions rendered")
    if stats.failed:
        print(f"{stats.failed} expressions failed to render")
    print(f"Output: {report.output_path}")

    if args.check and not report.ok:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
