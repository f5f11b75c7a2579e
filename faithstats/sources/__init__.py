"""
Activity Sources Module
"""
from .anki import AnkiSource
from .arc import ArcSource, PlaceCache, load_items, load_items_with_places, load_metadata
from .prayer import PrayerSource
from .reading import ReadingSource
from .references import BibleReferenceParser, ReferenceParser

__all__ = [
    "AnkiSource",
    "ArcSource",
    "PlaceCache",
    "load_items",
    "load_items_with_places",
    "load_metadata",
    "PrayerSource",
    "ReadingSource",
    "BibleReferenceParser",
    "ReferenceParser",
]
