"""vhs: client core for the Video Highlight Studio analysis service."""

__version__ = "0.1.0"
