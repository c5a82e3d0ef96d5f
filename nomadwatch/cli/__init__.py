"""Command line interface for nomadwatch."""

from .main import cli

__all__ = ["cli"]
