"""Namespaced Redis cache and fixed-window rate limiting for the chat backend."""

__version__ = "1.0.0"
