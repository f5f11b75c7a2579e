"""
Bible canon: book order per testament and accepted book-name aliases.
"""

from typing import Dict, Optional, Tuple

OLD_TESTAMENT: Tuple[str, ...] = (
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles", "Ezra",
    "Nehemiah", "Esther", "Job", "Psalms", "Proverbs",
    "Ecclesiastes", "Song of Solomon", "Isaiah", "Jeremiah", "Lamentations",
    "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk",
    "Zephaniah", "Haggai", "Zechariah", "Malachi",
)

NEW_TESTAMENT: Tuple[str, ...] = (
    "Matthew", "Mark", "Luke", "John", "Acts",
    "Romans", "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians", "1 Timothy",
    "2 Timothy", "Titus", "Philemon", "Hebrews", "James",
    "1 Peter", "2 Peter", "1 John", "2 John", "3 John",
    "Jude", "Revelation",
)

# Abbreviations and alternate names, keyed by normalized form
_ALIASES: Dict[str, str] = {
    "gen": "Genesis", "ge": "Genesis", "gn": "Genesis",
    "exod": "Exodus", "exo": "Exodus", "ex": "Exodus",
    "lev": "Leviticus", "lv": "Leviticus",
    "num": "Numbers", "nm": "Numbers",
    "deut": "Deuteronomy", "dt": "Deuteronomy",
    "josh": "Joshua", "judg": "Judges", "jdg": "Judges",
    "1 sam": "1 Samuel", "2 sam": "2 Samuel",
    "1 kgs": "1 Kings", "2 kgs": "2 Kings",
    "1 chr": "1 Chronicles", "2 chr": "2 Chronicles",
    "1 chron": "1 Chronicles", "2 chron": "2 Chronicles",
    "neh": "Nehemiah", "esth": "Esther", "est": "Esther",
    "psalm": "Psalms", "ps": "Psalms", "psa": "Psalms", "pss": "Psalms",
    "prov": "Proverbs", "prv": "Proverbs",
    "eccl": "Ecclesiastes", "ecc": "Ecclesiastes", "qoheleth": "Ecclesiastes",
    "song": "Song of Solomon", "song of songs": "Song of Solomon", "sos": "Song of Solomon",
    "canticles": "Song of Solomon",
    "isa": "Isaiah", "jer": "Jeremiah", "lam": "Lamentations",
    "ezek": "Ezekiel", "dan": "Daniel", "hos": "Hosea",
    "obad": "Obadiah", "jon": "Jonah", "mic": "Micah", "nah": "Nahum",
    "hab": "Habakkuk", "zeph": "Zephaniah", "hag": "Haggai",
    "zech": "Zechariah", "mal": "Malachi",
    "matt": "Matthew", "mt": "Matthew", "mk": "Mark", "mrk": "Mark",
    "lk": "Luke", "luk": "Luke", "jn": "John", "jhn": "John",
    "rom": "Romans",
    "1 cor": "1 Corinthians", "2 cor": "2 Corinthians",
    "gal": "Galatians", "eph": "Ephesians",
    "phil": "Philippians", "php": "Philippians", "col": "Colossians",
    "1 thess": "1 Thessalonians", "2 thess": "2 Thessalonians",
    "1 tim": "1 Timothy", "2 tim": "2 Timothy",
    "tit": "Titus", "philem": "Philemon", "phlm": "Philemon",
    "heb": "Hebrews", "jas": "James", "jm": "James",
    "1 pet": "1 Peter", "2 pet": "2 Peter",
    "1 jn": "1 John", "2 jn": "2 John", "3 jn": "3 John",
    "rev": "Revelation", "revelations": "Revelation", "apocalypse": "Revelation",
}

_ORDINALS = {"i": "1", "ii": "2", "iii": "3", "first": "1", "second": "2", "third": "3"}


def normalize_book_name(name: str) -> str:
    """Lowercase, drop periods and collapse whitespace; "1Cor." -> "1 cor"."""
    words = name.replace(".", " ").lower().split()
    if words and words[0] in _ORDINALS:
        words[0] = _ORDINALS[words[0]]
    # "1cor" -> "1 cor"
    if words and len(words[0]) > 1 and words[0][0] in "123" and words[0][1:].isalpha():
        words[:1] = [words[0][0], words[0][1:]]
    return " ".join(words)


BOOK_LOOKUP: Dict[str, str] = {
    **{normalize_book_name(book): book for book in OLD_TESTAMENT + NEW_TESTAMENT},
    **_ALIASES,
}


def canonical_book(name: str) -> Optional[str]:
    """Canonical book name for ``name`` or an alias of it, else None."""
    return BOOK_LOOKUP.get(normalize_book_name(name))
