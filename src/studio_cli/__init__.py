"""Core library and CLI for the collaborative visual app builder."""

__version__ = "0.3.0"
