"""Qulome — persistent content-and-style model for a WeChat article studio.

Owns drafts, themes, icons and published articles inside a key-value
store, keeps the "current draft" and "active theme" pointers valid, and
repairs corrupted collections when they are loaded.
"""

__version__ = "1.0.0"
