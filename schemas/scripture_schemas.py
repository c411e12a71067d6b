from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import List, Optional
from datetime import datetime


def verse_pk(version_id: str, book_id: str, chapter: int, verse: int) -> str:
    return f"{version_id}|{book_id}|{chapter}|{verse}"


def book_pk(version_id: str, book_id: str) -> str:
    return f"{version_id}|{book_id}"


# --- JSON import documents ---

class JsonVersionIn(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None


class JsonBookIn(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str = Field(..., validation_alias=AliasChoices('id', 'bookId'))
    name: str
    abbreviation: Optional[str] = None
    chapters: Optional[int] = Field(None, validation_alias=AliasChoices('chapters', 'chapterCount'))

    @field_validator('id', mode='before')
    @classmethod
    def _stringify_id(cls, value):
        return str(value) if isinstance(value, int) else value


class JsonVerseIn(BaseModel):
    model_config = ConfigDict(extra='ignore')

    book_id: str = Field(..., validation_alias=AliasChoices('bookId', 'book_id'))
    chapter: int = Field(..., ge=1)
    verse: int = Field(..., ge=1)
    text: str
    book_name: Optional[str] = Field(None, validation_alias=AliasChoices('bookName', 'book_name'))

    @field_validator('book_id', mode='before')
    @classmethod
    def _stringify_book_id(cls, value):
        return str(value) if isinstance(value, int) else value


class JsonBibleDocument(BaseModel):
    model_config = ConfigDict(extra='ignore')

    version: JsonVersionIn = Field(default_factory=JsonVersionIn)
    books: Optional[List[JsonBookIn]] = None
    verses: List[JsonVerseIn]


# --- Normalized records (the shape written to the store) ---

class VersionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    last_updated: datetime
    size_bytes: int = 0


class BookRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pk: str
    version: str
    book_id: str
    name: str
    abbreviation: Optional[str] = None
    chapter_count: int


class VerseRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pk: str
    version: str
    book_id: str
    book_name: str
    chapter: int
    verse: int
    text: str

    @classmethod
    def build(cls, version_id, book_id, book_name, chapter, verse, text):
        return cls(
            pk=verse_pk(version_id, book_id, chapter, verse),
            version=version_id,
            book_id=book_id,
            book_name=book_name,
            chapter=chapter,
            verse=verse,
            text=text,
        )


class ParsedBible(BaseModel):
    version: VersionRecord
    books: List[BookRecord]
    verses: List[VerseRecord]
