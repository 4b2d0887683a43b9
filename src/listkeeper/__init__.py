"""listkeeper: a chat-driven grocery list assistant backed by browser automation."""

__version__ = "0.1.0"
