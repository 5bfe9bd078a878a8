"""Scripts for a redstone computer server, driven over a websocket."""

__version__ = "0.3.0"
__all__ = ["datatype", "errors", "script", "hello"]