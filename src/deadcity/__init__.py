"""Dead City: a turn-based survival simulation engine."""

__version__ = "0.1.0"

__all__ = ["__version__"]
