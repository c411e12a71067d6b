# models/bible.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class BibleVersion(Base):
    __tablename__ = 'versions'

    id = Column(String(100), primary_key=True)       # e.g. "kjv"
    name = Column(String(255), nullable=False)       # e.g. "King James Version"
    code = Column(String(20), nullable=False, index=True)  # e.g. "KJV"
    last_updated = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    size_bytes = Column(Integer, nullable=False, default=0)

    def to_json(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "size_bytes": self.size_bytes,
        }

    def __repr__(self):
        return f'<BibleVersion {self.id} ({self.code})>'


class BibleBook(Base):
    __tablename__ = 'books'

    pk = Column(String(150), primary_key=True)       # "<version>|<book_id>"
    version = Column(String(100), ForeignKey('versions.id', ondelete='CASCADE'), nullable=False, index=True)
    book_id = Column(String(50), nullable=False, index=True)   # e.g. "genesis"
    name = Column(String(100), nullable=False, index=True)
    abbreviation = Column(String(20), nullable=True)
    chapter_count = Column(Integer, nullable=False)

    def to_json(self):
        return {
            "version": self.version,
            "id": self.book_id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "chapters": self.chapter_count,
        }

    def __repr__(self):
        return f'<BibleBook {self.pk} {self.name} ({self.chapter_count} chapters)>'


class BibleVerse(Base):
    __tablename__ = 'verses'

    pk = Column(String(200), primary_key=True)       # "<version>|<book_id>|<chapter>|<verse>"
    version = Column(String(100), ForeignKey('versions.id', ondelete='CASCADE'), nullable=False, index=True)
    book_id = Column(String(50), nullable=False)
    book_name = Column(String(100), nullable=False)
    chapter = Column(Integer, nullable=False)
    verse = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)

    __table_args__ = (
        Index('ix_verses_version_book_chapter', 'version', 'book_id', 'chapter'),
    )

    def to_json(self):
        return {
            "id": self.pk,
            "version": self.version,
            "book_id": self.book_id,
            "book": self.book_name,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
        }

    def __repr__(self):
        return f'<BibleVerse {self.pk}>'
