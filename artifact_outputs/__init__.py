"""Publish fields of a JSON file stored in a GitHub Actions artifact as step outputs."""

__version__ = "0.1.0"
