"""Model client interface."""

from .interface import ModelClient, collect_stream

__all__ = ["ModelClient", "collect_stream"]
