"""Terminal front end."""

from .app import TrmnotesApp, main

__all__ = ["TrmnotesApp", "main"]
