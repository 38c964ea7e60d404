"""Indigo: garden memory and LLM-backed gardening advice."""

__version__ = "0.1.0"
