"""scangate — run security scanners in disposable containers and judge their output."""

__version__ = "0.1.0"
