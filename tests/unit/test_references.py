"""
Unit Tests - Reference Parsing
"""
import pytest

from faithstats.sources.bible import NEW_TESTAMENT, OLD_TESTAMENT, canonical_book
from faithstats.sources.references import BibleReferenceParser


@pytest.fixture
def parser():
    return BibleReferenceParser()


class TestBookName:
    """Tests for book extraction"""

    @pytest.mark.parametrize("reference,book", [
        ("John 3:16", "John"),
        ("1 John 4:7-8", "1 John"),
        ("1 Cor 13:4-7", "1 Corinthians"),
        ("1Cor 13:4", "1 Corinthians"),
        ("II Timothy 3:16", "2 Timothy"),
        ("Psalm 23", "Psalms"),
        ("Ps. 119:105", "Psalms"),
        ("Song of Solomon 2:4", "Song of Solomon"),
        ("song of songs 8:6", "Song of Solomon"),
        ("Revelation 21:4", "Revelation"),
        ("Genesis", "Genesis"),
    ])
    def test_known_books(self, parser, reference, book):
        assert parser.book_name(reference) == book

    @pytest.mark.parametrize("reference", ["Hezekiah 1:1", "", "3:16", "   "])
    def test_unknown_books(self, parser, reference):
        assert parser.book_name(reference) is None


class TestVerseCount:
    """Tests for verse counting"""

    @pytest.mark.parametrize("reference,count", [
        ("John 3:16", 1),
        ("John 3:16-18", 3),
        ("John 3:16-18, 20", 4),
        ("Romans 8:28,31-39", 10),
        ("Psalm 119:105a", 1),
        ("Philippians 4:6 - 7", 2),
    ])
    def test_counts(self, parser, reference, count):
        assert parser.verse_count(reference) == count

    @pytest.mark.parametrize("reference", [
        "Psalm 23",
        "John 3:16-4:2",
        "John 3:18-16",
        "John 3:abc",
        "Hezekiah 1:1",
        "",
    ])
    def test_zero_for_uncountable(self, parser, reference):
        assert parser.verse_count(reference) == 0


class TestCanon:
    def test_book_counts(self):
        assert len(OLD_TESTAMENT) == 39
        assert len(NEW_TESTAMENT) == 27

    def test_canonical_names_resolve_to_themselves(self):
        for book in OLD_TESTAMENT + NEW_TESTAMENT:
            assert canonical_book(book) == book
