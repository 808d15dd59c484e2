"""Allow ``python -m fkfixer``."""

from fkfixer.cli import app

app()
