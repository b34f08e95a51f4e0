"""Discovery engine for the services marketplace."""

__version__ = "0.1.0"
