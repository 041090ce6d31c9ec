"""Infra layer utilities (storage)."""

from .storage import BaseBookStore, BookStore, SQLiteManager

__all__ = ["BaseBookStore", "BookStore", "SQLiteManager"]
