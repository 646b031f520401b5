"""Static blog generator backed by a headless CMS."""

__version__ = "0.1.0"
