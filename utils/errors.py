# utils/errors.py
"""Error taxonomy for the scripture import pipeline."""


class ScriptureError(Exception):
    """Base class for every error raised by the scripture engine."""


class DownloadError(ScriptureError):
    """The source URL could not be fetched (network failure or non-2xx status)."""


class UnzipError(ScriptureError):
    """The buffer is not a usable archive. The pipeline falls back to the raw buffer."""


class ParseError(ScriptureError):
    """The file content could not be turned into at least one verse."""


class BibleImportError(ScriptureError):
    """The store rejected the commit. The transaction was rolled back."""


class ImportInProgressError(ScriptureError):
    """An import is already running against this store."""
