"""Assemble the plaintext NTAG215 image for a single figure."""

import os

from amiigen import TAG_SIZE
from amiigen.errors import InvalidIdentifier
from amiigen.identifier import IDENTIFICATION_SIZE, IdentificationBlock

# Pages 0-4: UID0-2 + BCC0, UID3-6, BCC1 + internal byte + static lock bytes,
# capability container, then the Amiibo magic byte that opens page 4.
TAG_HEADER = bytes([
    0x04, 0xC0, 0x0A, 0x46,
    0x61, 0x6B, 0x65, 0x0A,
    0x65, 0x48, 0x0F, 0xE0,
    0xF1, 0x10, 0xFF, 0xEE,
    0xA5, 0x00, 0x00, 0x00,
])

# Pages 130-132: dynamic lock bytes + RFUI, CFG0, CFG1.
TAG_FOOTER = bytes([
    0x01, 0x00, 0x0F, 0xBD,
    0x00, 0x00, 0x00, 0x04,
    0x5F, 0x00, 0x00, 0x00,
])

HEADER_OFFSET = 0
IDENTIFICATION_OFFSET = 0x54  # 84
SEED_OFFSET = 0x60            # 96, keygen salt
SEED_SIZE = 32
FOOTER_OFFSET = 0x208         # 520


def build_tag_image(block: IdentificationBlock, seed: bytes | None = None) -> bytes:
    """Build the 540-byte plaintext tag image for ``block``.

    Only the seed region (bytes 96-127) differs between two calls with the
    same identifier; everything else is fixed by the layout.

    Args:
        block: Identification block to place at offset 84. Raw 8-byte
            sequences are accepted as well.
        seed: Optional 32 bytes for the keygen salt region. Random when
            omitted.

    Returns:
        The plaintext image, always ``TAG_SIZE`` bytes.

    Raises:
        InvalidIdentifier: If the identification block is not 8 bytes.
        ValueError: If ``seed`` is given and is not 32 bytes.
    """
    id_bytes = bytes(block)
    if len(id_bytes) != IDENTIFICATION_SIZE:
        raise InvalidIdentifier(
            f"Identification block must be exactly {IDENTIFICATION_SIZE} bytes long "
            f"(got {len(id_bytes)})."
        )

    if seed is None:
        seed = os.urandom(SEED_SIZE)
    elif len(seed) != SEED_SIZE:
        raise ValueError(f"Seed must be exactly {SEED_SIZE} bytes (got {len(seed)}).")

    image = bytearray(TAG_SIZE)
    image[HEADER_OFFSET:HEADER_OFFSET + len(TAG_HEADER)] = TAG_HEADER
    image[IDENTIFICATION_OFFSET:IDENTIFICATION_OFFSET + IDENTIFICATION_SIZE] = id_bytes
    image[SEED_OFFSET:SEED_OFFSET + SEED_SIZE] = seed
    image[FOOTER_OFFSET:FOOTER_OFFSET + len(TAG_FOOTER)] = TAG_FOOTER
    return bytes(image)
