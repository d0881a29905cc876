"""Verse lookup, Bible import and question answering for the Living Bible app."""

__version__ = "1.0.0"
