"""Turn-based multi-region economy simulation."""

__version__ = "0.1.0"
