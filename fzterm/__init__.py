"""Building blocks for a terminal fuzzy finder: tokenizing, text buffers, shell commands and utilities."""

__version__ = "0.1.0"