"""Command line entry point (`webfuzz` console script, `python -m webfuzz`)."""

from .main import build_parser, main

__all__ = ["build_parser", "main"]
