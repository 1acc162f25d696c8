"""Static HTML site generator for block-structured .sy notes."""

__version__ = "0.1.0"
