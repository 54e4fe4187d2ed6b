"""Keep Lightwave dimmers and sockets in sync with their bridge."""

__version__ = "0.1.0"
