"""Expand #import directives and split multi-operation GraphQL documents."""

from .core.loader import DocumentLoader, load, load_file

__all__ = ["DocumentLoader", "load", "load_file"]
