"""Monster-collection run battle engine."""

__version__ = "0.1.0"
