# src/__init__.py — v1
"""clipsight: client-side video analysis with frame sampling and a local result cache."""

__version__ = "0.1.0"
