# config.py
import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

load_dotenv()


def _env_flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SQLITE_DB_PATH = os.path.join(BASE_DIR, 'scripture.db')
    DATABASE_URL = os.getenv('SCRIPTURE_DATABASE_URL', f"sqlite:///{SQLITE_DB_PATH}")

    IMPORT_BATCH_SIZE = int(os.getenv('SCRIPTURE_IMPORT_BATCH_SIZE', 500))
    DOWNLOAD_TIMEOUT = int(os.getenv('SCRIPTURE_DOWNLOAD_TIMEOUT', 120))

    DEFAULT_VERSION_CODE = os.getenv('SCRIPTURE_DEFAULT_VERSION', 'NKJV')
    SLIDE_MODE = os.getenv('SCRIPTURE_SLIDE_MODE', 'annotated')
    SMART_COLON = _env_flag('SCRIPTURE_SMART_COLON')

    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 50 * 1024 * 1024))
