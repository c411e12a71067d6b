# utils/autocomplete.py
"""Incremental suggestions for the scripture search box.

The input is scanned character by character through a small state machine
so "where am I in the reference" can be tested on its own:

    TYPING_BOOK -> BOOK_RESOLVED -> TYPING_CHAPTER_VERSE -> TYPING_VERSION

A lone "1", "2" or "3" followed by a space stays in TYPING_BOOK (numbered
books such as "1 John"), and a letter after the book's space continues a
multi-word name ("Song of Solomon"). The book token therefore ends exactly
where the reference parser's grammar ends it: before the first number.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from utils.reference_parser import is_valid_character

MAX_BOOK_SUGGESTIONS = 5
PLACEHOLDER_COUNT = 5
NUMBERED_PREFIX = re.compile(r'^[1-3]$')
# "Matthew 3 " -> "Matthew 3:"
SMART_COLON_PATTERN = re.compile(r'^([1-3]?\s*[A-Za-z\s]+)\s+(\d+)\s$')


class InputState(str, Enum):
    TYPING_BOOK = "typing_book"
    BOOK_RESOLVED = "book_resolved"
    TYPING_CHAPTER_VERSE = "typing_chapter_verse"
    TYPING_VERSION = "typing_version"


class SuggestionType(str, Enum):
    BOOK = "book"
    CHAPTER = "chapter"
    VERSE = "verse"
    VERSION = "version"


@dataclass
class Suggestion:
    text: str
    type: SuggestionType
    description: Optional[str] = None

    def to_json(self):
        return {"text": self.text, "type": self.type.value, "description": self.description}


@dataclass
class InputPosition:
    state: InputState
    book: str = ''
    reference: str = ''
    version: str = ''


@dataclass
class AutocompleteResult:
    value: str
    suggestions: List[Suggestion] = field(default_factory=list)


def scan_input(text):
    """Walk ``text`` and report which token the cursor is in."""
    state = InputState.TYPING_BOOK
    book, reference, version = '', '', ''

    for char in (text or '').lstrip():
        if state is InputState.TYPING_BOOK:
            if char.isspace():
                if NUMBERED_PREFIX.match(book):
                    book += ' '
                elif not book.endswith(' '):
                    state = InputState.BOOK_RESOLVED
            else:
                book += char

        elif state is InputState.BOOK_RESOLVED:
            if char.isalpha():
                # multi-word names such as "Song of Solomon"
                state = InputState.TYPING_BOOK
                book += ' ' + char
            elif not char.isspace():
                state = InputState.TYPING_CHAPTER_VERSE
                reference += char

        elif state is InputState.TYPING_CHAPTER_VERSE:
            if char.isspace():
                state = InputState.TYPING_VERSION
            else:
                reference += char

        elif not char.isspace():
            version += char

    return InputPosition(state, book.strip(), reference, version)


def _book_matches(book, search):
    return (book.name.lower().startswith(search)
            or book.book_id.lower().startswith(search)
            or bool(book.abbreviation and book.abbreviation.lower().startswith(search)))


def match_books(prefix, books):
    """Books matching ``prefix``, names starting with it first, then alphabetical."""
    search = prefix.lower()
    matches = [book for book in books if _book_matches(book, search)]
    return sorted(matches, key=lambda b: (not b.name.lower().startswith(search), b.name.lower()))


def unique_names(books):
    names = []
    for book in books:
        if book.name not in names:
            names.append(book.name)
    return names


def smart_transform(value):
    match = SMART_COLON_PATTERN.match(value)
    if match:
        return f"{match.group(1).strip()} {match.group(2)}:"
    return value


class AutocompleteEngine:
    """Suggestion and inline-completion logic over the installed books and versions.

    The engine never edits the box behind the parser's back: the value only
    changes on an explicit ``accept``, on a unique-book inline completion,
    when an invalid character is rejected, or (opt-in) on the smart colon.
    """

    def __init__(self, books, versions, smart_colon=False):
        self.books = list(books)
        self.versions = list(versions)
        self.smart_colon = smart_colon

    def suggest(self, value):
        if not (value or '').strip():
            return []

        position = scan_input(value)
        matches = match_books(position.book, self.books)

        if position.state is InputState.TYPING_BOOK:
            return [Suggestion(name, SuggestionType.BOOK)
                    for name in unique_names(matches)[:MAX_BOOK_SUGGESTIONS]]

        if not matches:
            return []
        book = matches[0]

        if position.state is InputState.BOOK_RESOLVED:
            return [Suggestion(f"{book.name} 1", SuggestionType.CHAPTER)]

        if position.state is InputState.TYPING_CHAPTER_VERSE:
            return self._chapter_verse_suggestions(book, position.reference)

        prefix = position.version.upper()
        return [
            Suggestion(f"{book.name} {position.reference} {version.code}", SuggestionType.VERSION, version.name)
            for version in self.versions
            if version.code.upper().startswith(prefix)
        ]

    def _chapter_verse_suggestions(self, book, reference):
        if ':' in reference:
            chapter_text = reference.split(':', 1)[0]
            if not chapter_text.isdigit():
                return []
            chapter = int(chapter_text)
            return [Suggestion(f"{book.name} {chapter}:{verse}", SuggestionType.VERSE)
                    for verse in range(1, PLACEHOLDER_COUNT + 1)]

        if not reference.isdigit():
            return []
        typed = int(reference)
        candidates = [typed] + [typed * 10 + digit for digit in range(10)]
        chapters = [c for c in candidates if 1 <= c <= book.chapter_count]
        return [Suggestion(f"{book.name} {chapter}", SuggestionType.CHAPTER)
                for chapter in chapters[:PLACEHOLDER_COUNT]]

    def inline_completion(self, value, previous=''):
        """Full book name plus a space when the typed prefix names exactly one book.

        Returns None when there is nothing to complete. A completion is only
        offered while typing forward and when it is strictly longer than the
        current value, so feeding the completed value back in is a no-op.
        """
        if not value.strip() or len(value) <= len(previous):
            return None
        position = scan_input(value)
        if position.state is not InputState.TYPING_BOOK:
            return None

        names = unique_names(match_books(position.book, self.books))
        if len(names) != 1:
            return None
        completed = f"{names[0]} "
        if len(completed) <= len(value):
            return None
        return completed

    def handle_change(self, value, previous=''):
        """Shape a new input value the way the search box applies it."""
        completed = self.inline_completion(value, previous)
        if completed is not None:
            return AutocompleteResult(completed, self.suggest(completed))

        if value.strip() and len(value) > len(previous):
            position = scan_input(value)
            if position.state is not InputState.TYPING_BOOK and not is_valid_character(value[-1]):
                return AutocompleteResult(previous, self.suggest(previous))

        if self.smart_colon:
            value = smart_transform(value)
        return AutocompleteResult(value, self.suggest(value))

    def accept(self, suggestion):
        return AutocompleteResult(suggestion.text, self.suggest(suggestion.text))
