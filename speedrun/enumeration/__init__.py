"""Enumeration package initialization."""
from .enumeration_engine import EnumerationEngine

__all__ = ['EnumerationEngine']
