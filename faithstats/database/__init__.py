"""
Database Module
"""
from .connection import open_database, register_functions
from .models import AnkiBase, KOReaderBase, prayer_session_table

__all__ = [
    "open_database",
    "register_functions",
    "AnkiBase",
    "KOReaderBase",
    "prayer_session_table",
]
