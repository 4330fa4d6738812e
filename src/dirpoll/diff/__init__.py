"""Snapshot comparison."""

from .differ import diff, iter_diff, summarize

__all__ = ["diff", "iter_diff", "summarize"]
