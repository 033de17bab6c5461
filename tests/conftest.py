import copy
import json

import pytest

from amiigen import TAG_SIZE
from amiigen.database import AmiiboDatabase
from amiigen.encryption import BaseEncryptor


class FakeEncryptor(BaseEncryptor):
    """Flips every bit so tests can tell encrypted output from the plaintext."""

    def __init__(self):
        self.calls = []

    def name(self) -> str:
        return "fake"

    def encrypt(self, image: bytes) -> bytes:
        assert len(image) == TAG_SIZE
        self.calls.append(image)
        return bytes(b ^ 0xFF for b in image)


SAMPLE_DATABASE = {
    "amiibo_series": {
        "0x00": "Super Smash Bros.",
        "0x01": "Super Mario Bros.",
        "0x05": "The Legend of Zelda",
    },
    "amiibos": {
        "0x0000000000000002": {"name": "Mario", "release": {"na": "2014-11-21"}},
        "0x0102000000010102": {"name": "Mario", "release": {}},
        "0x0100000000040002": {"name": "Link", "release": {"eu": "2014-11-28"}},
        "0x0105000003580502": {"name": "Toon Link: Wind Waker", "release": {}},
    },
    "characters": {"0x0000": "Mario"},
    "game_series": {"0x000": "Super Mario"},
    "types": {"0x00": "Figure"},
}


@pytest.fixture
def raw_database():
    return copy.deepcopy(SAMPLE_DATABASE)


@pytest.fixture
def fake_encryptor():
    return FakeEncryptor()


@pytest.fixture
def sample_database():
    return AmiiboDatabase.from_dict(SAMPLE_DATABASE)


@pytest.fixture
def database_file(tmp_path):
    path = tmp_path / "amiibo.json"
    path.write_text(json.dumps(SAMPLE_DATABASE), encoding="utf-8")
    return path
