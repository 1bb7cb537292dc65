"""Conversation memory for a local language-model chat front-end."""

__version__ = "0.1.0"
