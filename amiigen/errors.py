"""Error types raised by the tag generation pipeline."""


class AmiigenError(Exception):
    """Base class for all amiigen errors."""


class InvalidIdentifier(AmiigenError, ValueError):
    """Malformed hex, wrong length, or wrong sentinel byte."""


class UnknownSeries(AmiigenError, LookupError):
    """A record's series code has no entry in the series-name map."""

    def __init__(self, code: str, record_key: str | None = None):
        self.code = code
        self.record_key = record_key
        where = f" (record {record_key})" if record_key else ""
        super().__init__(f"Unknown amiibo series '{code}'{where}")


class EncryptionFailure(AmiigenError, RuntimeError):
    """Missing/invalid key material or an error reported by the crypto backend."""


class FilesystemError(AmiigenError, OSError):
    """A tag dump could not be written to disk."""
