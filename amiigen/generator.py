"""Single and batch tag dump generation."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from amiigen.database import AmiiboDatabase
from amiigen.encryption import BaseEncryptor
from amiigen.errors import FilesystemError
from amiigen.identifier import IdentificationBlock, parse_identifier
from amiigen.paths import ensure_directory, resolve_batch_path, resolve_single_path
from amiigen.tag_image import build_tag_image


@dataclass
class BatchReport:
    """Outcome of a :func:`generate_all` run."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    written: list[Path] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)  # (record key, message)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def _write_dump(path: Path, data: bytes) -> None:
    print(f"Writing: {path.resolve()}")
    with open(path, "wb") as fp:
        fp.write(data)


def generate_all(
    database: AmiiboDatabase,
    output_root: str | os.PathLike,
    encryptor: BaseEncryptor,
) -> BatchReport:
    """Generate one encrypted dump per database entry, in database order.

    Files land in ``output_root/<series>/<name> (<key>).bin``. A filesystem
    error on one entry is recorded in the report and the run moves on; any
    other error ends the run.

    Args:
        database: Parsed amiibo database.
        output_root: Root directory for the per-series folders.
        encryptor: Backend that encrypts each plaintext image.

    Returns:
        A :class:`BatchReport` with per-entry counts.

    Raises:
        InvalidIdentifier: If a database key is not a valid identifier.
        UnknownSeries: If a key's series code is missing from the database.
        EncryptionFailure: If the encryptor fails.
    """
    report = BatchReport()

    for key, record in database.amiibos.items():
        report.attempted += 1

        block = IdentificationBlock.from_hex(key)
        series = database.series_name(record)

        image = build_tag_image(block)
        encrypted = encryptor.encrypt(image)

        directory, filename = resolve_batch_path(output_root, series, record.name, key)
        dest = directory / filename
        try:
            ensure_directory(directory)
            _write_dump(dest, encrypted)
        except OSError as e:
            report.failed += 1
            report.failures.append((key, str(e)))
            print(f"  ⚠️  Could not write {dest}: {e}", file=sys.stderr)
            continue

        report.succeeded += 1
        report.written.append(dest)

    return report


def generate_one(
    identifier,
    output_override: str | os.PathLike | None,
    encryptor: BaseEncryptor,
) -> Path:
    """Generate the encrypted dump for a single identifier.

    Args:
        identifier: Hex string, raw bytes, or an :class:`IdentificationBlock`.
        output_override: Destination file, or None for ``<identifier>.bin``
            in the current directory.
        encryptor: Backend that encrypts the plaintext image.

    Returns:
        Path of the written file.

    Raises:
        InvalidIdentifier: If ``identifier`` is malformed.
        EncryptionFailure: If the encryptor fails.
        FilesystemError: If the file cannot be written.
    """
    block = parse_identifier(identifier)
    encrypted = encryptor.encrypt(build_tag_image(block))

    dest = resolve_single_path(output_override, str(block))
    try:
        if dest.parent != Path("."):
            ensure_directory(dest.parent)
        _write_dump(dest, encrypted)
    except OSError as e:
        raise FilesystemError(f"Could not write {dest}: {e}") from e

    return dest
