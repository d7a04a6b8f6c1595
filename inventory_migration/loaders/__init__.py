"""Destination loaders: import and cleanup."""

from .base import LoadResult
from .importer import Importer
from .cleaner import Cleaner

__all__ = [
    "LoadResult",
    "Importer",
    "Cleaner",
]
