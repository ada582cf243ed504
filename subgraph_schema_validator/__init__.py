"""Offline validation of subgraph schemas."""

__version__ = "0.1.0"
