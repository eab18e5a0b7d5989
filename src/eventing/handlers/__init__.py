"""Handler modules for the eventing operator."""

from . import channel_handler

__all__ = ["channel_handler"]
