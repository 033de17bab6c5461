"""Output path derivation for generated tag dumps."""

import os
from pathlib import Path

# Invalid filename and path characters on every host we write to (Windows
# being the strictest), so a dump tree can be copied between platforms.
INVALID_CHARACTERS = frozenset('/\\:*?"<>|' + "".join(chr(c) for c in range(32)))

PLACEHOLDER = "_"
DUMP_EXTENSION = ".bin"


def sanitize_filename(text: str, replacement: str = PLACEHOLDER) -> str:
    """Replace every invalid filename/path character in ``text``."""
    return "".join(replacement if c in INVALID_CHARACTERS else c for c in text)


def resolve_batch_path(
    output_root: str | os.PathLike,
    series_name: str,
    display_name: str,
    identifier: str,
) -> tuple[Path, str]:
    """Return ``(directory, filename)`` for one database entry.

    The series name becomes a directory under ``output_root``; the filename
    embeds the identifier verbatim so two entries never share a path, e.g.
    ``dumps/Super Mario Bros./Mario (0x0000000000000002).bin``.
    """
    directory = Path(output_root) / sanitize_filename(series_name)
    filename = sanitize_filename(f"{display_name} ({identifier}){DUMP_EXTENSION}")
    return directory, filename


def resolve_single_path(output_override: str | os.PathLike | None, identifier: str) -> Path:
    """Return the explicit output path, or ``<identifier>.bin`` in the current directory."""
    if output_override is not None and str(output_override).strip():
        return Path(output_override)
    return Path(f"{identifier}{DUMP_EXTENSION}")


def ensure_directory(path: str | os.PathLike) -> Path:
    """Create ``path`` and its parents; an existing directory is fine."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory
