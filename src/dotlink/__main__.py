"""Allow running dotlink with ``python -m dotlink``."""

from .cli import app

app(prog_name="dotlink")
