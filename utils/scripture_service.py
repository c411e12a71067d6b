# utils/scripture_service.py
"""Caller-side facade over the store: imports, uninstalls, lookups, output."""
import logging
import threading

from config import Config
from utils.autocomplete import AutocompleteEngine
from utils.errors import ScriptureError
from utils.import_pipeline import BibleImporter, ImportPhase
from utils.lookup import lookup_ref
from utils.reference_parser import parse_reference
from utils.slides import SlideMode, combine_text, format_reference, generate_bible_slides

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Default toast sink: writes notifications to the log."""

    def success(self, message):
        logger.info(message)

    def error(self, message):
        logger.error(message)


class ScriptureService:
    def __init__(self, store, notifier=None, slide_mode=None, default_code=None):
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.slide_mode = SlideMode(slide_mode or Config.SLIDE_MODE)
        self.default_code = default_code or Config.DEFAULT_VERSION_CODE
        self.active_import = None
        self._import_lock = threading.Lock()

    # --- Metadata ---

    def versions(self):
        return self.store.list_versions()

    def books(self, version_id=None):
        return self.store.list_books(version_id)

    def autocomplete(self):
        return AutocompleteEngine(self.books(), self.versions(), smart_colon=Config.SMART_COLON)

    # --- Imports ---

    def _set_progress(self, phase, percent):
        self.active_import = (phase, percent)

    def _run_import(self, source, filename, success_message):
        if not self._import_lock.acquire(blocking=False):
            self.notifier.error("Another import is still running")
            return None
        try:
            first_phase = ImportPhase.DOWNLOADING if isinstance(source, str) else ImportPhase.UNZIPPING
            self._set_progress(first_phase, 0)
            importer = BibleImporter(self.store, self._set_progress)
            parsed = importer.import_source(source, filename)
            self.notifier.success(success_message or f"{parsed.version.name} imported successfully")
            return parsed
        except ScriptureError as e:
            logger.error(f"Import failed: {e}", exc_info=True)
            self.notifier.error(str(e) or "Import failed")
            return None
        finally:
            self.active_import = None
            self._import_lock.release()

    def download_version(self, url):
        return self._run_import(url, None, "Bible version imported successfully")

    def import_file(self, data, filename=None):
        message = f'"{filename}" imported successfully' if filename else None
        return self._run_import(data, filename, message)

    def uninstall_version(self, version_id):
        try:
            removed = self.store.uninstall_version(version_id)
        except Exception as e:
            logger.error(f"Error uninstalling {version_id}: {str(e)}", exc_info=True)
            self.notifier.error("Failed to uninstall version")
            return False
        if removed:
            self.notifier.success("Bible version uninstalled")
        else:
            self.notifier.error(f"Version {version_id} is not installed")
        return removed

    # --- Lookup and output ---

    def parse(self, text):
        return parse_reference(text, self.books())

    def lookup(self, ref):
        return lookup_ref(self.store, ref, self.default_code)

    def slides_for(self, verses, mode=None):
        return generate_bible_slides(verses, mode or self.slide_mode)

    def send_to_output(self, ref, send_slides):
        """Look up ``ref`` and hand its slides to the output callback.

        Nothing is sent while the reference has errors or matches no verses.
        """
        verses = self.lookup(ref)
        if not verses:
            return []
        slides = self.slides_for(verses)
        send_slides(slides)
        return slides

    def add_to_service(self, verses, add_scripture):
        if not verses:
            return None
        reference = format_reference(verses)
        add_scripture(reference, combine_text(verses))
        return reference
