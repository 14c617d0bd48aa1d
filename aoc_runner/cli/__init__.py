"""
CLI commands for aoc-runner.
"""

from .main import app, cli

__all__ = [
    "app",
    "cli",
]
