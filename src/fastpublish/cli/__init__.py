"""fastpublish CLI."""

from fastpublish.cli.app import app, main

__all__ = ["app", "main"]
