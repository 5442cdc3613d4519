"""prefpanes - preferences window controller."""

__version__ = "0.1.0"
