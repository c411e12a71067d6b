# utils/import_pipeline.py
"""Download → unzip → parse → batched commit of a Bible module."""
import io
import logging
import math
import zipfile
import zlib
from dataclasses import dataclass
from enum import Enum
from functools import partial
from urllib.parse import urlparse

import requests
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from models.bible import BibleVersion, BibleBook, BibleVerse
from utils.bible_parsers import parse_bible
from utils.errors import (
    BibleImportError,
    DownloadError,
    ImportInProgressError,
    ScriptureError,
    UnzipError,
)

logger = logging.getLogger(__name__)

BIBLE_FILE_EXTENSIONS = ('.json', '.xml')
DOWNLOAD_CHUNK_SIZE = 64 * 1024


class ImportPhase(str, Enum):
    IDLE = "idle"
    DOWNLOADING = "downloading"
    UNZIPPING = "unzipping"
    PARSING = "parsing"
    IMPORTING = "importing"


@dataclass
class ImportProgress:
    phase: ImportPhase
    percent: int


def _noop_progress(phase, percent):
    pass


def _content_length(headers):
    try:
        return max(0, int(headers.get('content-length') or 0))
    except (TypeError, ValueError):
        return 0


def download_source(url, on_progress=_noop_progress, timeout=None):
    """Stream ``url`` into memory, reporting percent when Content-Length is known."""
    on_progress(ImportPhase.DOWNLOADING, 0)
    try:
        response = requests.get(url, stream=True, timeout=timeout or Config.DOWNLOAD_TIMEOUT)
    except requests.RequestException as e:
        raise DownloadError(f"Failed to download: {e}") from e

    try:
        if not response.ok:
            raise DownloadError(f"Failed to download: {response.status_code} {response.reason}")

        total = _content_length(response.headers)
        loaded = 0
        chunks = []
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            if not chunk:
                continue
            chunks.append(chunk)
            loaded += len(chunk)
            if total:
                on_progress(ImportPhase.DOWNLOADING, min(100, round(loaded / total * 100)))
    except requests.RequestException as e:
        raise DownloadError(f"Failed to download: {e}") from e
    finally:
        response.close()

    if not total:
        on_progress(ImportPhase.DOWNLOADING, 100)
    logger.info(f"Downloaded {loaded} bytes from {url}")
    return b''.join(chunks)


def unzip_bible_file(buffer):
    """Return ``(member_name, member_bytes)`` for the first .json/.xml member."""
    try:
        with zipfile.ZipFile(io.BytesIO(buffer)) as archive:
            member = next(
                (name for name in archive.namelist() if name.lower().endswith(BIBLE_FILE_EXTENSIONS)),
                None,
            )
            if member is None:
                raise UnzipError("No valid Bible file (JSON/XML) found in ZIP")
            return member, archive.read(member)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError,
            zlib.error, RuntimeError, NotImplementedError) as e:
        # corrupt, encrypted or unsupported members all mean "not an archive we can use"
        raise UnzipError(f"Not a readable ZIP archive: {e}") from e


def detect_filename(content, filename=None):
    """Keep a .json/.xml hint, otherwise sniff the content."""
    if filename and filename.lower().endswith(BIBLE_FILE_EXTENSIONS):
        return filename
    return 'bible.json' if content.lstrip().startswith('{') else 'bible.xml'


def extract_bible_content(buffer, filename=None, on_progress=_noop_progress):
    """Decompress if possible and decode. Archives are optional."""
    on_progress(ImportPhase.UNZIPPING, 0)
    try:
        filename, raw = unzip_bible_file(buffer)
    except UnzipError as e:
        logger.info(f"Treating buffer as a raw Bible file: {e}")
        raw = buffer
    content = raw.decode('utf-8-sig', errors='replace')
    on_progress(ImportPhase.UNZIPPING, 100)
    return content, detect_filename(content, filename)


def commit_bible(store, parsed, on_progress=_noop_progress, batch_size=None):
    """Replace the version's books and verses inside one transaction."""
    batch_size = batch_size or Config.IMPORT_BATCH_SIZE
    version_id = parsed.version.id
    verse_rows = [verse.model_dump() for verse in parsed.verses]
    total_batches = math.ceil(len(verse_rows) / batch_size)

    on_progress(ImportPhase.IMPORTING, 0)
    try:
        with store.session() as db:
            db.query(BibleVerse).filter(BibleVerse.version == version_id).delete(synchronize_session=False)
            db.query(BibleBook).filter(BibleBook.version == version_id).delete(synchronize_session=False)
            db.query(BibleVersion).filter(BibleVersion.id == version_id).delete(synchronize_session=False)
            db.add(BibleVersion(**parsed.version.model_dump()))
            db.flush()

            if parsed.books:
                db.bulk_insert_mappings(BibleBook, [book.model_dump() for book in parsed.books])

            for index in range(total_batches):
                batch = verse_rows[index * batch_size:(index + 1) * batch_size]
                db.bulk_insert_mappings(BibleVerse, batch)
                db.flush()
                on_progress(ImportPhase.IMPORTING, round((index + 1) / total_batches * 100))
    except SQLAlchemyError as e:
        raise BibleImportError(f"Failed to import {version_id}: {e}") from e

    logger.info(f"Imported {parsed.version.name} ({parsed.version.code}): "
                f"{len(parsed.books)} books, {len(verse_rows)} verses in {total_batches} batches")


def _filename_from_url(url):
    path = urlparse(url).path
    return path.rsplit('/', 1)[-1] or None


class BibleImporter:
    """Runs one import at a time against a store and tracks its phase.

    ``state`` walks IDLE → DOWNLOADING → UNZIPPING → PARSING → IMPORTING and
    returns to IDLE on success or failure; ``last_error`` holds the error of
    a failed run. A retry is simply another call to ``import_source``.
    """

    def __init__(self, store, on_progress=None, batch_size=None, timeout=None):
        self.store = store
        self.on_progress = on_progress or _noop_progress
        self.batch_size = batch_size or Config.IMPORT_BATCH_SIZE
        self.timeout = timeout
        self.state = ImportPhase.IDLE
        self.progress = None
        self.last_error = None

    @property
    def is_active(self):
        return self.state is not ImportPhase.IDLE

    def _report(self, phase, percent):
        self.state = phase
        self.progress = ImportProgress(phase, percent)
        self.on_progress(phase, percent)

    def import_source(self, source, filename=None):
        """Import from a URL string or an in-memory bytes buffer."""
        if self.is_active:
            raise ImportInProgressError(f"An import is already {self.state.value}")
        self.last_error = None
        try:
            if isinstance(source, str):
                filename = filename or _filename_from_url(source)
                buffer = download_source(source, self._report, self.timeout)
            else:
                buffer = bytes(source)

            content, filename = extract_bible_content(buffer, filename, self._report)

            self._report(ImportPhase.PARSING, 0)
            parsed = parse_bible(content, filename, partial(self._report, ImportPhase.PARSING))

            commit_bible(self.store, parsed, self._report, self.batch_size)
            return parsed
        except ScriptureError as e:
            self.last_error = e
            logger.error(f"Import failed during {self.state.value}: {e}")
            raise
        finally:
            self.state = ImportPhase.IDLE
            self.progress = None


def import_bible(store, source, on_progress=None, filename=None, batch_size=None):
    """Import a Bible module from ``source`` (URL or bytes) into ``store``."""
    return BibleImporter(store, on_progress, batch_size).import_source(source, filename)
