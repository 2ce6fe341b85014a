"""Social networking REST backend: users, profiles, posts."""

__version__ = "1.0.0"
