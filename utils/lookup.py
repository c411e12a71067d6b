# utils/lookup.py
import logging

from config import Config

logger = logging.getLogger(__name__)


def resolve_version(versions, version_code=None, default_code=None):
    """Pick the installed version a reference should be read from.

    An explicit code must match a version's code or id (case-insensitive);
    when it does not, nothing is returned rather than silently showing
    another translation. Without a code the default code wins, else the
    first installed version.
    """
    versions = list(versions)
    if version_code:
        wanted = version_code.lower()
        return next((v for v in versions if v.code.lower() == wanted or v.id.lower() == wanted), None)

    if not versions:
        return None
    default_code = (default_code or Config.DEFAULT_VERSION_CODE).upper()
    return next((v for v in versions if v.code.upper() == default_code), versions[0])


def lookup_ref(store, ref, default_code=None, versions=None):
    """Resolve a parsed reference to its verses, in ascending verse order."""
    if ref.book is None or not ref.chapter or ref.errors:
        return []

    if versions is None:
        versions = store.list_versions()
    version = resolve_version(versions, ref.version_code, default_code)
    if version is None:
        logger.info(f"No installed version matches {ref.version_code or 'the default'}")
        return []

    verses = store.chapter_verses(version.id, ref.book.book_id, ref.chapter)

    if ref.verse_start:
        if ref.verse_end:
            verses = [v for v in verses if ref.verse_start <= v.verse <= ref.verse_end]
        else:
            verses = [v for v in verses if v.verse == ref.verse_start]

    return sorted(verses, key=lambda v: v.verse)
