"""Bookstore-Sync: scheduled fuzzy-deduplicating book import."""

__version__ = "0.1.0"
