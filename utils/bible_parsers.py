# utils/bible_parsers.py
"""JSON and XML Bible parsers.

Both parsers return a ``ParsedBible`` made of normalized version/book/verse
records, so the import pipeline never needs to know which format a file
came in.
"""
import json
import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

from pydantic import ValidationError

from schemas.scripture_schemas import (
    BookRecord,
    JsonBibleDocument,
    ParsedBible,
    VerseRecord,
    VersionRecord,
    book_pk,
)
from utils.errors import ParseError

logger = logging.getLogger(__name__)

VERSION_NAME_ATTRIBUTES = ('name', 'biblename', 'title', 'n')
VERSION_CODE_ATTRIBUTES = ('abbreviation', 'shortName', 'code')
BOOK_ABBREVIATION_ATTRIBUTES = ('abbreviation', 'shortName')


def slugify(name):
    """'King James Version' -> 'king-james-version'"""
    return re.sub(r'\s+', '-', name.strip().lower())


def file_stem(filename):
    if not filename:
        return 'bible'
    base = filename.replace('\\', '/').rsplit('/', 1)[-1]
    return base.split('.')[0] or 'bible'


def name_from_filename(filename):
    return re.sub(r'[_-]', ' ', file_stem(filename))


def derive_book_id(book_name):
    return re.sub(r'\s+', '', book_name.lower())[:8]


def derive_version_code(filename, version_name):
    stem = file_stem(filename) if filename else ''
    if 2 <= len(stem) <= 5:
        return stem.upper()
    return version_name.upper()[:3]


def _no_progress(percent):
    pass


def _content_size(content):
    return len(content.encode('utf-8'))


def dedupe_verses(verses):
    unique = {}
    for verse in verses:
        if verse.pk in unique:
            logger.warning(f"Duplicate verse {verse.pk}, keeping the first occurrence")
            continue
        unique[verse.pk] = verse
    return list(unique.values())


def finalize_books(version_id, books, verses):
    """Make sure every verse has a book row whose chapter count covers it.

    Books missing from the supplied list are derived from the verses, and a
    chapter count lower than the highest chapter seen is raised to it.
    """
    max_chapter = {}
    names = {}
    for verse in verses:
        if verse.chapter > max_chapter.get(verse.book_id, 0):
            max_chapter[verse.book_id] = verse.chapter
        names.setdefault(verse.book_id, verse.book_name)

    finalized = []
    seen = set()
    for book in books:
        if book.book_id in seen:
            logger.warning(f"Duplicate book '{book.book_id}' in {version_id}, keeping the first entry")
            continue
        seen.add(book.book_id)
        highest = max_chapter.get(book.book_id, 0)
        if book.chapter_count < highest:
            book = book.model_copy(update={'chapter_count': highest})
        finalized.append(book)

    for book_id, highest in max_chapter.items():
        if book_id not in seen:
            finalized.append(BookRecord(
                pk=book_pk(version_id, book_id),
                version=version_id,
                book_id=book_id,
                name=names[book_id],
                abbreviation=None,
                chapter_count=highest,
            ))
            seen.add(book_id)
    return finalized


# --- JSON ---

def parse_json_bible(content, filename=None, on_progress=_no_progress):
    """Parse ``{version, books?, verses}`` JSON into a ParsedBible."""
    try:
        document = JsonBibleDocument.model_validate(json.loads(content))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e
    except ValidationError as e:
        raise ParseError(f"JSON document does not look like a Bible: {e}") from e

    bible_name = document.version.name or name_from_filename(filename)
    version = VersionRecord(
        id=document.version.id or slugify(bible_name),
        name=bible_name,
        code=document.version.code or slugify(bible_name),
        last_updated=datetime.now(timezone.utc),
        size_bytes=_content_size(content),
    )

    books = []
    book_names = {}
    for book in document.books or []:
        book_names[book.id] = book.name
        books.append(BookRecord(
            pk=book_pk(version.id, book.id),
            version=version.id,
            book_id=book.id,
            name=book.name,
            abbreviation=book.abbreviation or None,
            chapter_count=book.chapters or 0,
        ))

    verses = [
        VerseRecord.build(
            version.id,
            v.book_id,
            v.book_name or book_names.get(v.book_id, v.book_id),
            v.chapter,
            v.verse,
            v.text,
        )
        for v in document.verses
    ]
    verses = dedupe_verses(verses)
    if not verses:
        raise ParseError("No verses found in JSON document")
    on_progress(100)

    return ParsedBible(version=version, books=finalize_books(version.id, books, verses), verses=verses)


# --- XML dialects ---

class XmlDialect:
    """Tag and attribute names for one family of XML Bible exports."""

    label = 'base'
    book_tag = None
    chapter_tag = None
    verse_tag = None
    name_attributes = ('name', 'title', 'n')
    number_attributes = ('number', 'n')

    def book_nodes_of(self, root):
        return list(root.iter(self.book_tag))

    def chapter_nodes_of(self, book_node):
        return list(book_node.iter(self.chapter_tag))

    def verse_nodes_of(self, chapter_node):
        return list(chapter_node.iter(self.verse_tag))

    def name_attribute(self, node):
        return _first_attribute(node, self.name_attributes) or ''

    def number_attribute(self, node):
        raw = _first_attribute(node, self.number_attributes)
        try:
            return int(raw.strip()) if raw else 0
        except ValueError:
            return 0


class UpperCaseDialect(XmlDialect):
    label = 'BOOK/CHAPTER/VERSE'
    book_tag = 'BOOK'
    chapter_tag = 'CHAPTER'
    verse_tag = 'VERSE'


class ShortTagDialect(XmlDialect):
    label = 'b/c/v'
    book_tag = 'b'
    chapter_tag = 'c'
    verse_tag = 'v'


class ZefaniaDialect(XmlDialect):
    label = 'BIBLEBOOK/CHAPTER/VERS'
    book_tag = 'BIBLEBOOK'
    chapter_tag = 'CHAPTER'
    verse_tag = 'VERS'
    name_attributes = ('bname', 'name', 'title', 'n')
    number_attributes = ('bnumber', 'cnumber', 'vnumber', 'number', 'n')


DIALECTS = (UpperCaseDialect(), ShortTagDialect(), ZefaniaDialect())


def _first_attribute(node, names):
    for attribute in names:
        value = node.get(attribute)
        if value:
            return value
    return None


def detect_dialect(root):
    """Pick the first dialect whose book tag actually occurs in the document."""
    for dialect in DIALECTS:
        if dialect.book_nodes_of(root):
            return dialect
    return None


def _parse_xml_book(dialect, book_node, version_id, verses):
    """Append the book's verses to ``verses`` and return its BookRecord, or None when unnamed."""
    book_name = dialect.name_attribute(book_node).strip()
    if not book_name:
        logger.warning("Skipping XML book without a name")
        return None
    book_id = derive_book_id(book_name)
    max_chapter = 0

    for chapter_node in dialect.chapter_nodes_of(book_node):
        chapter = dialect.number_attribute(chapter_node)
        if chapter < 1:
            logger.warning(f"Skipping chapter without a number in {book_name}")
            continue
        max_chapter = max(max_chapter, chapter)

        for verse_node in dialect.verse_nodes_of(chapter_node):
            number = dialect.number_attribute(verse_node)
            if number < 1:
                logger.warning(f"Skipping verse without a number in {book_name} {chapter}")
                continue
            text = ''.join(verse_node.itertext()).strip()
            verses.append(VerseRecord.build(version_id, book_id, book_name, chapter, number, text))

    return BookRecord(
        pk=book_pk(version_id, book_id),
        version=version_id,
        book_id=book_id,
        name=book_name,
        abbreviation=_first_attribute(book_node, BOOK_ABBREVIATION_ATTRIBUTES),
        chapter_count=max_chapter,
    )


def parse_xml_bible(content, filename=None, on_progress=_no_progress):
    """Parse any supported XML dialect, reporting percent after each book."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ParseError(f"Invalid XML: {e}") from e

    dialect = detect_dialect(root)
    if dialect is None:
        raise ParseError("No book nodes found in XML document")
    logger.info(f"Parsing XML Bible using the {dialect.label} dialect")

    bible_name = _first_attribute(root, VERSION_NAME_ATTRIBUTES) or name_from_filename(filename)
    bible_code = _first_attribute(root, VERSION_CODE_ATTRIBUTES) or derive_version_code(filename, bible_name)
    version = VersionRecord(
        id=slugify(bible_name),
        name=bible_name,
        code=bible_code.upper(),
        last_updated=datetime.now(timezone.utc),
        size_bytes=_content_size(content),
    )

    book_nodes = list(dialect.book_nodes_of(root))
    books = []
    verses = []
    for index, book_node in enumerate(book_nodes, 1):
        book = _parse_xml_book(dialect, book_node, version.id, verses)
        if book is not None:
            books.append(book)
        on_progress(round(index / len(book_nodes) * 100))

    verses = dedupe_verses(verses)
    if not verses:
        raise ParseError("No verses found in XML document")

    return ParsedBible(version=version, books=finalize_books(version.id, books, verses), verses=verses)


def parse_bible(content, filename, on_progress=_no_progress):
    """Dispatch on the filename extension (``.json`` or anything else as XML)."""
    if filename and filename.lower().endswith('.json'):
        return parse_json_bible(content, filename, on_progress)
    return parse_xml_bible(content, filename, on_progress)
