"""AmiiGen — batch generation of encrypted Amiibo tag dumps."""

__version__ = "1.0.0"

# Shared constants
TAG_SIZE = 540  # NTAG215 dump: 135 pages of 4 bytes
DEFAULT_DATABASE_URL = "https://raw.githubusercontent.com/N3evin/AmiiboAPI/master/database/amiibo.json"
DEFAULT_KEY_FILE = "key_retail.bin"
DEFAULT_OUTPUT_ROOT = "dumps"
