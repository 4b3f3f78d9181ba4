"""Read, validate and query Doxygen navigation tree data."""

__version__ = "0.1.0"
