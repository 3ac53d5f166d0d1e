"""Markdown blog generator with watch and live-reload modes."""

__version__ = "0.1.0"
