"""Validation of the 8-byte Amiibo identification block."""

import string
from dataclasses import dataclass

from amiigen.errors import InvalidIdentifier

IDENTIFICATION_SIZE = 8
SENTINEL = 0x02  # last byte of every figure identifier

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class IdentificationBlock:
    """An immutable 8-byte character identifier ending in ``0x02``.

    Build instances with :meth:`from_hex` or :meth:`from_bytes`; the
    constructor itself runs the same byte checks.

    ``bytes(block)`` returns the raw 8 bytes and ``str(block)`` the canonical
    ``0x``-prefixed uppercase hex form, e.g. ``0x0000000000000002``.
    """

    data: bytes

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) != IDENTIFICATION_SIZE:
            raise InvalidIdentifier(
                f"Identification block must be exactly {IDENTIFICATION_SIZE} bytes long "
                f"(got {len(self.data)})."
            )
        if self.data[-1] != SENTINEL:
            raise InvalidIdentifier(
                f"The last byte of the identification block must be 0x{SENTINEL:02X} "
                f"(got 0x{self.data[-1]:02X})."
            )

    @classmethod
    def from_hex(cls, text: str) -> "IdentificationBlock":
        """Parse a 16-hex-character identifier.

        Whitespace anywhere in ``text`` is ignored and one leading ``0x``/``0X``
        prefix is accepted.

        Raises:
            InvalidIdentifier: On a wrong length, a non-hex character, or a
                last byte other than ``0x02``.
        """
        if text is None:
            raise InvalidIdentifier("Identifier must not be None.")

        cleaned = "".join(text.split())
        if cleaned[:2].lower() == "0x":
            cleaned = cleaned[2:]

        if len(cleaned) != IDENTIFICATION_SIZE * 2:
            raise InvalidIdentifier(
                f"Identifier must be exactly {IDENTIFICATION_SIZE} bytes "
                f"({IDENTIFICATION_SIZE * 2} hex characters) long: {text!r}"
            )
        if not all(c in _HEX_DIGITS for c in cleaned):
            raise InvalidIdentifier(f"Identifier contains invalid hex characters: {text!r}")

        return cls(bytes.fromhex(cleaned))

    @classmethod
    def from_bytes(cls, data) -> "IdentificationBlock":
        """Wrap raw bytes (``bytes``, ``bytearray``, ``memoryview`` or ints)."""
        if data is None:
            raise InvalidIdentifier("Identifier must not be None.")
        try:
            raw = bytes(data)
        except (TypeError, ValueError) as e:
            raise InvalidIdentifier(f"Identifier is not a byte sequence: {e}") from e
        return cls(raw)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return "0x" + self.data.hex().upper()


def parse_identifier(value) -> IdentificationBlock:
    """Accept an :class:`IdentificationBlock`, hex text, or raw bytes."""
    if isinstance(value, IdentificationBlock):
        return value
    if isinstance(value, str):
        return IdentificationBlock.from_hex(value)
    return IdentificationBlock.from_bytes(value)
