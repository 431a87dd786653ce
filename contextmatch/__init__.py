"""contextmatch: match scoring for community members."""

__version__ = "0.1.0"
