"""High-risk point store and proximity queries over MongoDB."""

__version__ = "0.1.0"
