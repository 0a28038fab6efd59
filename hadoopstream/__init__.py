"""Typed mapper and reducer framework for Hadoop Streaming jobs."""

__version__ = "0.1.0"

__all__ = ["__version__"]