"""Command-line interface for bundlestrap."""

from bundlestrap.cli.app import build_parser, entrypoint, main

__all__ = [
    "build_parser",
    "entrypoint",
    "main",
]
