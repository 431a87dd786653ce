"""Processing module for profile text normalization."""

from contextmatch.processing.normalizer import TextNormalizer

__all__ = ["TextNormalizer"]
