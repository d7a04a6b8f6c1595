"""Extraction from the source system and destination seed preloading."""

from .seed_loader import DestinationSeedLoader
from .source_extractor import SourceExtractor

__all__ = [
    "DestinationSeedLoader",
    "SourceExtractor",
]
