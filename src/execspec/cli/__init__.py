"""
CLI layer for execspec.

Terminal transport only: argument parsing and output formatting. All
behavior lives in ``execspec.execution``.

Entry point::

    execspec --help
"""

from execspec.cli.app import app

__all__ = ["app"]
