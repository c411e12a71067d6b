# tests/conftest.py
# Shared fixtures: an isolated in-memory store per test and small Bible documents.

import io
import json
import os
import sys
import zipfile

import pytest

# Add the project root to the Python path to allow package imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database import ScriptureStore
from models.bible import BibleBook, BibleVersion


def make_json_bible(name="New King James Version", code="NKJV", version_id="nkjv", chapters=None):
    """JSON Bible with John 3:1-5, John 21:1 and Jonah 1:1-2."""
    chapters = chapters or {('john', 'John', 3): 5, ('john', 'John', 21): 1, ('jonah', 'Jonah', 1): 2}
    verses = []
    for (book_id, book_name, chapter), count in chapters.items():
        for number in range(1, count + 1):
            verses.append({
                "bookId": book_id,
                "bookName": book_name,
                "chapter": chapter,
                "verse": number,
                "text": f"{book_name} {chapter}:{number} text ({code})",
            })
    version = {"name": name, "code": code}
    if version_id:
        version["id"] = version_id
    return {
        "version": version,
        "books": [
            {"id": "john", "name": "John", "abbreviation": "Jn", "chapters": 21},
            {"id": "jonah", "name": "Jonah", "chapters": 4},
        ],
        "verses": verses,
    }


UPPER_DIALECT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<BIBLE name="Sample Bible" abbreviation="smp">
  <BOOK name="Genesis">
    <CHAPTER number="1">
      <VERSE number="1">In the beginning God created the heaven and the earth.</VERSE>
      <VERSE number="2">And the earth was without form, and void.</VERSE>
    </CHAPTER>
    <CHAPTER number="2">
      <VERSE number="1">Thus the heavens and the earth were finished.</VERSE>
    </CHAPTER>
  </BOOK>
  <BOOK name="1 John">
    <CHAPTER number="1">
      <VERSE number="1">That which was from the beginning.</VERSE>
    </CHAPTER>
  </BOOK>
</BIBLE>
"""

SHORT_DIALECT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<bible n="Sample Bible" abbreviation="smp">
  <b n="Genesis">
    <c n="1">
      <v n="1">In the beginning God created the heaven and the earth.</v>
      <v n="2">And the earth was without form, and void.</v>
    </c>
    <c n="2">
      <v n="1">Thus the heavens and the earth were finished.</v>
    </c>
  </b>
  <b n="1 John">
    <c n="1">
      <v n="1">That which was from the beginning.</v>
    </c>
  </b>
</bible>
"""


def zip_bytes(members, compression=zipfile.ZIP_STORED):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression) as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def store():
    return ScriptureStore.in_memory()


@pytest.fixture
def json_bible():
    return make_json_bible()


@pytest.fixture
def json_bytes(json_bible):
    return json.dumps(json_bible).encode('utf-8')


@pytest.fixture
def books():
    """Detached book rows as the reference parser and autocomplete see them."""
    return [
        BibleBook(pk="nkjv|john", version="nkjv", book_id="john", name="John", abbreviation="Jn", chapter_count=21),
        BibleBook(pk="nkjv|jonah", version="nkjv", book_id="jonah", name="Jonah", abbreviation=None, chapter_count=4),
        BibleBook(pk="nkjv|1john", version="nkjv", book_id="1john", name="1 John", abbreviation="1Jn", chapter_count=5),
        BibleBook(pk="nkjv|songofso", version="nkjv", book_id="songofso", name="Song of Solomon", abbreviation=None, chapter_count=8),
        BibleBook(pk="kjv|john", version="kjv", book_id="john", name="John", abbreviation=None, chapter_count=21),
    ]


@pytest.fixture
def versions():
    return [
        BibleVersion(id="kjv", name="King James Version", code="KJV"),
        BibleVersion(id="nkjv", name="New King James Version", code="NKJV"),
    ]
