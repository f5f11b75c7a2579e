"""
Reference Parsing

Predicates the classifier aggregation uses to group passages and weigh them:

- book_name("1 Cor 13:4-7")      -> "1 Corinthians"
- verse_count("John 3:16-18, 20") -> 4

Both functions are total: anything they cannot interpret yields None / 0.
"""

import re
from typing import Optional, Protocol, Tuple

from .bible import canonical_book

_REFERENCE = re.compile(
    r"^\s*(?P<book>(?:[1-3]\s*)?[^\W\d][^\d]*?)\s*(?P<location>\d.*)?$"
)
_VERSE_SPAN = re.compile(r"^\s*(\d+)[a-z]?\s*(?:[-–—]\s*(\d+)[a-z]?)?\s*$")


class ReferenceParser(Protocol):
    """Maps a passage reference to a grouping key and a weight"""

    def book_name(self, reference: str) -> Optional[str]:
        ...

    def verse_count(self, reference: str) -> int:
        ...


def split_reference(reference: str) -> Tuple[Optional[str], str]:
    """Split "1 John 4:7-8" into ("1 John", "4:7-8"); unknown books give None."""
    match = _REFERENCE.match(reference or "")
    if not match:
        return None, ""
    return canonical_book(match.group("book")), (match.group("location") or "").strip()


class BibleReferenceParser:
    """
    Parser for Bible references in "<Book> <chapter>:<verses>" form.

    Verse lists may combine single verses and ranges ("16-18, 20"). Whole
    chapters ("Psalm 23"), ranges crossing chapters ("3:16-4:2") and
    anything unparseable count as zero verses.
    """

    def book_name(self, reference: str) -> Optional[str]:
        book, _ = split_reference(reference)
        return book

    def verse_count(self, reference: str) -> int:
        book, location = split_reference(reference)
        if book is None or ":" not in location:
            return 0

        chapter, _, verses = location.partition(":")
        if not chapter.strip().isdigit() or ":" in verses:
            return 0

        total = 0
        for segment in verses.split(","):
            match = _VERSE_SPAN.match(segment)
            if not match:
                return 0
            first = int(match.group(1))
            last = int(match.group(2) or first)
            if last < first:
                return 0
            total += last - first + 1
        return total


DEFAULT_PARSER = BibleReferenceParser()
