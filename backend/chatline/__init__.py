"""Chatline: direct messaging backend with live websocket delivery."""

__version__ = "1.0.0"
