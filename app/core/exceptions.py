class PricelistImportError(Exception):
    """Base class for errors that abort a whole import run."""


class ConfigurationError(PricelistImportError):
    """Required settings are missing."""


class WorkbookDecodeError(PricelistImportError):
    """The uploaded bytes are not a readable workbook."""


class DuplicateKeyError(Exception):
    """An insert hit a unique key that another writer created first."""
