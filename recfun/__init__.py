"""Parse, validate and evaluate mu-recursive function definitions."""

__version__ = "0.1.0"
