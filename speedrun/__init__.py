"""Ollama Speedrun: discover, benchmark, and rank local LLMs."""

__version__ = "0.1.0"
