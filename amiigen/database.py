"""AmiiboAPI database model and download."""

import http.client
import json
import sys
import threading
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path

from amiigen import DEFAULT_DATABASE_URL
from amiigen.errors import UnknownSeries

DEFAULT_TIMEOUT_SECONDS = 60

# Series code position inside a raw key such as "0x0102000000010002":
# characters 14-15, i.e. byte 6 of the identification block.
SERIES_CODE_OFFSET = 14
SERIES_CODE_LENGTH = 2


# ---------------------------------------------------------------------------
# Spinner for visual feedback during the download
# ---------------------------------------------------------------------------

class Spinner:
    """Terminal spinner shown while a blocking call runs.

    Use as a context manager so the line is cleared and the thread joined
    however the block exits.
    """

    FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(self, message: str = "Downloading..."):
        self._message = message
        self._running = False
        self._thread: threading.Thread | None = None

    def start(self) -> "Spinner":
        self._running = True
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()
        return self

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def stop(self, final_message: str = "") -> None:
        self._running = False
        if self._thread:
            self._thread.join()
        # Clear spinner line
        sys.stderr.write("\r\033[K")
        if final_message:
            sys.stderr.write(f"  {final_message}\n")
        sys.stderr.flush()

    def _spin(self) -> None:
        idx = 0
        while self._running:
            frame = self.FRAMES[idx % len(self.FRAMES)]
            start = time.time()
            while self._running and time.time() - start < 0.1:
                time.sleep(0.05)
            sys.stderr.write(f"\r  {frame} {self._message}")
            sys.stderr.flush()
            idx += 1


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AmiiboRecord:
    """One entry of the ``amiibos`` map."""

    key: str
    name: str
    release: dict[str, str | None] = field(default_factory=dict)

    @property
    def series_code(self) -> str:
        """The ``0x``-prefixed series code embedded in the key (e.g. ``0x00``)."""
        segment = self.key[SERIES_CODE_OFFSET:SERIES_CODE_OFFSET + SERIES_CODE_LENGTH]
        return f"0x{segment}".lower()


@dataclass(frozen=True)
class AmiiboDatabase:
    """Parsed ``amiibo.json``. Only ``amiibos`` and ``amiibo_series`` are used."""

    amiibos: dict[str, AmiiboRecord]
    amiibo_series: dict[str, str]
    characters: dict[str, str] = field(default_factory=dict)
    game_series: dict[str, str] = field(default_factory=dict)
    types: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "AmiiboDatabase":
        """Build a database from the decoded JSON document.

        Raises:
            ValueError: If the ``amiibos`` or ``amiibo_series`` map is missing
                or an entry has no name.
        """
        if not isinstance(data, dict):
            raise ValueError("Amiibo database must be a JSON object.")
        for required in ("amiibos", "amiibo_series"):
            if not isinstance(data.get(required), dict):
                raise ValueError(f"Amiibo database has no '{required}' map.")

        amiibos = {}
        for key, entry in data["amiibos"].items():
            if not isinstance(entry, dict) or "name" not in entry:
                raise ValueError(f"Amiibo database entry {key} has no name.")
            amiibos[key] = AmiiboRecord(
                key=key,
                name=entry["name"],
                release=dict(entry.get("release") or {}),
            )

        return cls(
            amiibos=amiibos,
            amiibo_series={code.lower(): name for code, name in data["amiibo_series"].items()},
            characters=dict(data.get("characters") or {}),
            game_series=dict(data.get("game_series") or {}),
            types=dict(data.get("types") or {}),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> "AmiiboDatabase":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Amiibo database is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def __len__(self) -> int:
        return len(self.amiibos)

    def series_name(self, record: AmiiboRecord) -> str:
        """Look up the human-readable series of ``record``.

        Raises:
            UnknownSeries: If the series code is not in ``amiibo_series``.
        """
        code = record.series_code
        try:
            return self.amiibo_series[code]
        except KeyError:
            raise UnknownSeries(code, record.key) from None


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------

def fetch_database(
    url: str = DEFAULT_DATABASE_URL,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> AmiiboDatabase:
    """Download and parse the database from ``url``.

    Raises:
        ConnectionError: If the download fails.
        ValueError: If the response is not a valid database.
    """
    try:
        with Spinner(f"Downloading {url}"):
            with urllib.request.urlopen(url, timeout=timeout) as response:
                payload = response.read()
    except (urllib.error.URLError, http.client.HTTPException, TimeoutError) as e:
        raise ConnectionError(f"Failed to download amiibo database from '{url}': {e}") from e

    return AmiiboDatabase.from_json(payload.decode("utf-8"))


def load_database(
    source: str = DEFAULT_DATABASE_URL,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> AmiiboDatabase:
    """Load the database from an ``http(s)://`` URL or a local JSON file.

    Raises:
        FileNotFoundError: If a local source does not exist.
    """
    if source.lower().startswith(("http://", "https://")):
        return fetch_database(source, timeout=timeout)

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Amiibo database not found: {source}")
    return AmiiboDatabase.from_json(path.read_text(encoding="utf-8"))
