"""Allow ``python -m execspec``."""

from execspec.cli import app

app()
