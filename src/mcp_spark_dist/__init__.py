"""Local Spark distribution management."""

__version__ = "0.1.0"
