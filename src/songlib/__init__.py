"""songlib - online song library service."""

__version__ = "1.0.0"
