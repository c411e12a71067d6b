# tests/test_scripture_service.py
import json
import zipfile

import pytest

from conftest import UPPER_DIALECT_XML, make_json_bible, zip_bytes
from utils import scripture_service
from utils.errors import ParseError
from utils.import_pipeline import ImportPhase
from utils.scripture_service import ScriptureService
from utils.slides import SlideMode


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def success(self, message):
        self.messages.append(('success', message))

    def error(self, message):
        self.messages.append(('error', message))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(store, notifier):
    return ScriptureService(store, notifier, slide_mode='annotated')


def test_import_file_toasts_success(service, notifier, json_bytes):
    parsed = service.import_file(json_bytes, 'nkjv.json')
    assert parsed.version.id == 'nkjv'
    assert notifier.messages == [('success', '"nkjv.json" imported successfully')]
    assert service.active_import is None


def test_failed_import_toasts_error(service, notifier):
    assert service.import_file(b'{"verses": []}', 'broken.json') is None
    kind, message = notifier.messages[-1]
    assert kind == 'error'
    assert 'No verses' in message


def test_active_import_is_tracked_while_running(service, json_bytes, monkeypatch):
    seen = []
    original = service._set_progress

    def spy(phase, percent):
        original(phase, percent)
        seen.append(service.active_import)

    monkeypatch.setattr(service, '_set_progress', spy)
    service.import_file(json_bytes, 'nkjv.json')
    assert seen and all(progress is not None for progress in seen)
    assert service.active_import is None


def test_active_import_is_set_before_the_importer_starts(service, notifier, monkeypatch):
    seen = []

    class StallingImporter:
        def __init__(self, store, on_progress):
            pass

        def import_source(self, source, filename):
            seen.append(service.active_import)
            raise ParseError("stopped")

    monkeypatch.setattr(scripture_service, 'BibleImporter', StallingImporter)
    assert service.import_file(b'<bible/>', 'kjv.xml') is None
    assert service.download_version('https://example.org/kjv.zip') is None

    assert seen == [(ImportPhase.UNZIPPING, 0), (ImportPhase.DOWNLOADING, 0)]
    assert service.active_import is None
    assert notifier.messages == [('error', 'stopped'), ('error', 'stopped')]


def test_corrupt_archive_toasts_error(service, notifier):
    archive = bytearray(zip_bytes({'kjv.xml': UPPER_DIALECT_XML}, zipfile.ZIP_DEFLATED))
    data_start = 30 + len('kjv.xml')
    archive[data_start:data_start + 16] = b'\xff' * 16

    assert service.import_file(bytes(archive), 'kjv.zip') is None
    assert notifier.messages[-1][0] == 'error'
    assert service.active_import is None
    assert service.versions() == []


def test_second_import_is_refused_while_one_runs(service, notifier, json_bytes):
    service._import_lock.acquire()
    try:
        assert service.import_file(json_bytes, 'nkjv.json') is None
    finally:
        service._import_lock.release()
    assert notifier.messages == [('error', 'Another import is still running')]


def test_uninstall(service, notifier, json_bytes):
    service.import_file(json_bytes, 'nkjv.json')
    assert service.uninstall_version('nkjv') is True
    assert service.versions() == []
    assert service.uninstall_version('nkjv') is False
    assert notifier.messages[-2:] == [('success', 'Bible version uninstalled'),
                                      ('error', 'Version nkjv is not installed')]


def test_send_to_output_passes_slides_to_callback(service, json_bytes):
    service.import_file(json_bytes, 'nkjv.json')
    sent = []

    slides = service.send_to_output(service.parse("John 3:1-2"), sent.append)

    assert sent == [slides]
    assert slides[0].startswith("1. John 3:1 text (NKJV)")
    assert slides[0].endswith("[John 3:1 (NKJV)]")


def test_send_to_output_skips_invalid_references(service, json_bytes):
    service.import_file(json_bytes, 'nkjv.json')
    sent = []
    assert service.send_to_output(service.parse("John 99:1"), sent.append) == []
    assert sent == []


def test_plain_mode(store, json_bytes):
    service = ScriptureService(store, slide_mode=SlideMode.PLAIN)
    service.import_file(json_bytes, 'nkjv.json')
    verses = service.lookup(service.parse("Jonah 1:2"))
    assert service.slides_for(verses) == ["Jonah 1:2 text (NKJV)"]


def test_add_to_service(service, json_bytes):
    service.import_file(json_bytes, 'nkjv.json')
    added = []
    verses = service.lookup(service.parse("John 3:1-3"))

    reference = service.add_to_service(verses, lambda ref, text: added.append((ref, text)))

    assert reference == "John 3:1-3"
    assert added == [("John 3:1-3", "John 3:1 text (NKJV) John 3:2 text (NKJV) John 3:3 text (NKJV)")]
    assert service.add_to_service([], lambda ref, text: added.append(ref)) is None


def test_autocomplete_uses_installed_metadata(service, json_bytes):
    service.import_file(json_bytes, 'nkjv.json')
    other = json.dumps(make_json_bible(name="King James Version", code="KJV", version_id="kjv")).encode()
    service.import_file(other, 'kjv.json')

    engine = service.autocomplete()
    assert engine.inline_completion("Joh") == "John "
    assert [s.text for s in engine.suggest("John 3:1 ")] == ["John 3:1 KJV", "John 3:1 NKJV"]
