# scripts/import_bible.py
import logging
import sys
from pathlib import Path

# Add the parent directory to the Python path properly
current_dir = Path(__file__).resolve().parent
project_dir = current_dir.parent
sys.path.insert(0, str(project_dir))

from database import ScriptureStore
from utils.errors import ScriptureError
from utils.import_pipeline import import_bible

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


def print_progress(phase, percent):
    print(f"\r{phase.value.capitalize()}... {percent}%", end='', flush=True)
    if percent >= 100:
        print()


def import_bible_source(source, database_url=None):
    """Import a .zip/.json/.xml Bible from a local path or URL into the store"""
    store = ScriptureStore(database_url)
    store.init_db()

    if source.startswith(('http://', 'https://')):
        print(f"Downloading Bible from: {source}")
        parsed = import_bible(store, source, print_progress)
    else:
        path = Path(source)
        print(f"Reading Bible file from: {path}")
        parsed = import_bible(store, path.read_bytes(), print_progress, filename=path.name)

    print(f"\nImport complete!")
    print(f"Imported {parsed.version.name} ({parsed.version.code})")
    print(f"Processed {len(parsed.books)} books and {len(parsed.verses)} verses")

    stored = store.count_verses(parsed.version.id)
    if stored != len(parsed.verses):
        print(f"\nWarning: Expected {len(parsed.verses)} verses but the store holds {stored}")
    return parsed


if __name__ == '__main__':
    if len(sys.argv) not in (2, 3):
        print("Usage: python import_bible.py <path_or_url> [database_url]")
        sys.exit(1)

    try:
        import_bible_source(sys.argv[1], sys.argv[2] if len(sys.argv) == 3 else None)
    except (ScriptureError, OSError) as e:
        print(f"\nImport failed: {e}")
        sys.exit(1)
