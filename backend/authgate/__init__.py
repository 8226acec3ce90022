"""Authentication gateway backed by Firebase Authentication."""

__version__ = "1.0.0"
