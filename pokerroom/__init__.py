"""A Texas Hold'em room server with an HTTP and WebSocket interface."""

__version__ = "0.1.0"