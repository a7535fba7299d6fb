"""C0deC0re chat bot package."""

__version__ = "0.1.0"
