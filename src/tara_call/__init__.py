"""Tara voice-call backend and call-session client."""

__version__ = "0.1.0"
