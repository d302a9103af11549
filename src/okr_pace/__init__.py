"""OKR progress and pace analytics."""

__version__ = "0.1.0"
