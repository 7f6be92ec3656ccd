"""Entry point for ``python -m gapsdeb``."""

from gapsdeb.cli import app

app(prog_name="gapsdeb")
