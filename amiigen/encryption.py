"""Tag encryption backends."""

import os
from abc import ABC, abstractmethod

from amiigen import TAG_SIZE
from amiigen.errors import EncryptionFailure

# Retail key file: unfixed-info and locked-secret master keys, 80 bytes each.
KEY_MATERIAL_SIZE = 160


def load_key_material(path: str | os.PathLike) -> bytes:
    """Read the combined key file once.

    Raises:
        EncryptionFailure: If the file is missing, unreadable, or not
            ``KEY_MATERIAL_SIZE`` bytes long.
    """
    if not path or not os.path.isfile(path):
        raise EncryptionFailure(
            f"Key file '{path}' does not exist. Please provide a valid key file."
        )
    try:
        with open(path, "rb") as fp:
            data = fp.read()
    except OSError as e:
        raise EncryptionFailure(f"Could not read key file '{path}': {e}") from e

    if len(data) != KEY_MATERIAL_SIZE:
        raise EncryptionFailure(
            f"Key file '{path}' must be {KEY_MATERIAL_SIZE} bytes (got {len(data)})."
        )
    return data


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class BaseEncryptor(ABC):
    """Turns a plaintext tag image into the encrypted image written to disk."""

    @abstractmethod
    def encrypt(self, image: bytes) -> bytes:
        """Encrypt one tag image.

        Args:
            image: The ``TAG_SIZE``-byte plaintext image.

        Returns:
            The encrypted image, ``TAG_SIZE`` bytes.

        Raises:
            EncryptionFailure: If the backend rejects the image or keys.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...


# ---------------------------------------------------------------------------
# pyamiibo backend
# ---------------------------------------------------------------------------

class AmiiboKeyEncryptor(BaseEncryptor):
    """Encrypts tag images with the retail master keys via ``pyamiibo``.

    The key file is read once here and the derived master keys are never
    modified afterwards, so one instance can serve every entry of a run.
    """

    def __init__(self, key_file: str | os.PathLike):
        self.key_file = key_file
        key_material = load_key_material(key_file)
        try:
            from amiibo import AmiiboMasterKey
            self._master_keys = AmiiboMasterKey.from_combined_bin(key_material)
        except ImportError as e:
            raise EncryptionFailure(
                "pyamiibo package not installed. Run: pip install pyamiibo"
            ) from e
        except Exception as e:
            raise EncryptionFailure(f"Invalid key file '{key_file}': {e}") from e

    def name(self) -> str:
        return f"pyamiibo ({os.path.basename(self.key_file)})"

    def encrypt(self, image: bytes) -> bytes:
        from amiibo import AmiiboDump

        if len(image) != TAG_SIZE:
            raise EncryptionFailure(f"Tag image must be {TAG_SIZE} bytes (got {len(image)}).")

        try:
            dump = AmiiboDump(self._master_keys, bytes(image), is_locked=False)
            dump.lock()
            encrypted = bytes(dump.data)
        except Exception as e:
            raise EncryptionFailure(f"Encryption failed: {e}") from e

        if len(encrypted) != TAG_SIZE:
            raise EncryptionFailure(
                f"Encryption backend returned {len(encrypted)} bytes, expected {TAG_SIZE}."
            )
        return encrypted


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def get_encryptor(key_file: str | os.PathLike) -> BaseEncryptor:
    """Build the encryptor for ``key_file``.

    Raises:
        EncryptionFailure: If the key material cannot be loaded.
    """
    return AmiiboKeyEncryptor(key_file)
