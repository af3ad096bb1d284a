"""
CLI module for rimecfg.

Provides the command-line interface using Click.
"""

from rimecfg.cli.main import cli, main

__all__ = ["main", "cli"]
