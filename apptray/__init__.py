"""Apps To Tray: launch applications and push their windows into the background."""

__version__ = "1.0.0"
