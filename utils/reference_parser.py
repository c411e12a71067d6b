# utils/reference_parser.py
import re
from dataclasses import dataclass, field
from typing import List, Optional

# [Book] [Chapter]:[Verse]-[Verse] [Version], book names may start with 1-3 ("1 John")
REFERENCE_PATTERN = re.compile(
    r'^([1-3]?\s*[A-Za-z\s]+)\s+(\d+)(?::(\d+)(?:-(\d+))?)?(?:\s+([A-Za-z0-9]+))?$'
)
VALID_CHARACTER = re.compile(r'^[A-Za-z0-9\s:.-]$')


@dataclass
class ParsedReference:
    book: Optional[object] = None
    chapter: Optional[int] = None
    verse_start: Optional[int] = None
    verse_end: Optional[int] = None
    version_code: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self):
        return self.book is not None and self.chapter is not None and not self.errors

    def to_json(self):
        return {
            "book": self.book.to_json() if self.book is not None else None,
            "chapter": self.chapter,
            "verse_start": self.verse_start,
            "verse_end": self.verse_end,
            "version_code": self.version_code,
            "errors": list(self.errors),
        }


def find_book(book_text, available_books):
    """Case-insensitive exact match on a book's name, id or abbreviation."""
    search = ' '.join(book_text.split()).lower()
    for book in available_books:
        if (book.name.lower() == search
                or book.book_id.lower() == search
                or (book.abbreviation and book.abbreviation.lower() == search)):
            return book
    return None


def parse_reference(text, available_books):
    """Parse free text such as "1 John 2:5-7 KJV" against the installed books.

    Runs on every keystroke, so it never raises: problems are collected in
    ``errors`` and every number that is syntactically present is still filled
    in so the caller can keep giving feedback while the user types.
    """
    result = ParsedReference()

    trimmed = (text or '').strip()
    if not trimmed:
        return result

    match = REFERENCE_PATTERN.match(trimmed)
    if not match:
        result.errors.append("Invalid format. Expected: Book Chapter:Verse")
        return result

    book_raw, chapter_raw, verse_start_raw, verse_end_raw, version_raw = match.groups()

    book = find_book(book_raw, available_books)
    if book is None:
        result.errors.append(f'Unknown book: "{book_raw.strip()}"')
    else:
        result.book = book

    result.chapter = int(chapter_raw)
    if book is not None and not 1 <= result.chapter <= book.chapter_count:
        result.errors.append(
            f"Invalid chapter: {result.chapter}. {book.name} has {book.chapter_count} chapters."
        )

    if verse_start_raw:
        result.verse_start = int(verse_start_raw)

    if verse_end_raw:
        result.verse_end = int(verse_end_raw)
        if result.verse_start is not None and result.verse_end <= result.verse_start:
            result.errors.append("End verse must be greater than start verse.")

    if version_raw:
        result.version_code = version_raw.upper()

    return result


def is_valid_character(char):
    return bool(VALID_CHARACTER.match(char or ''))
