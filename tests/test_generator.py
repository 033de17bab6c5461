"""Tests for single and batch dump generation."""

from pathlib import Path

import pytest

from amiigen import TAG_SIZE
from amiigen.database import AmiiboDatabase
from amiigen.encryption import BaseEncryptor
from amiigen.errors import EncryptionFailure, FilesystemError, InvalidIdentifier, UnknownSeries
from amiigen.generator import generate_all, generate_one
from amiigen.tag_image import TAG_FOOTER, TAG_HEADER


def _decrypt(data: bytes) -> bytes:
    return bytes(b ^ 0xFF for b in data)


def test_generate_all_writes_one_file_per_record(tmp_path, sample_database, fake_encryptor):
    report = generate_all(sample_database, tmp_path / "dumps", fake_encryptor)

    assert (report.attempted, report.succeeded, report.failed) == (4, 4, 0)
    assert report.ok
    assert len(fake_encryptor.calls) == 4

    expected = {
        tmp_path / "dumps" / "Super Smash Bros." / "Mario (0x0000000000000002).bin",
        tmp_path / "dumps" / "Super Mario Bros." / "Mario (0x0102000000010102).bin",
        tmp_path / "dumps" / "Super Smash Bros." / "Link (0x0100000000040002).bin",
        tmp_path / "dumps" / "The Legend of Zelda" / "Toon Link_ Wind Waker (0x0105000003580502).bin",
    }
    assert set(report.written) == expected
    for path in expected:
        assert path.stat().st_size == TAG_SIZE


def test_generate_all_processes_in_database_order(tmp_path, sample_database, fake_encryptor):
    generate_all(sample_database, tmp_path, fake_encryptor)
    ids = [image[84:92].hex() for image in fake_encryptor.calls]
    assert ids == [key[2:] for key in sample_database.amiibos]


def test_generate_all_writes_encrypted_image(tmp_path, sample_database, fake_encryptor):
    report = generate_all(sample_database, tmp_path, fake_encryptor)
    plain = _decrypt(report.written[0].read_bytes())
    assert plain[0:20] == TAG_HEADER
    assert plain[84:92] == bytes.fromhex("0000000000000002")
    assert plain[520:532] == TAG_FOOTER


def test_generate_all_resolves_series_directory(tmp_path, fake_encryptor, monkeypatch):
    db = AmiiboDatabase.from_dict({
        "amiibo_series": {"0x00": "Super Mario Bros."},
        "amiibos": {"0x0102000000010002": {"name": "Mario"}},
    })
    monkeypatch.chdir(tmp_path)
    report = generate_all(db, "dumps", fake_encryptor)
    assert report.written == [Path("dumps/Super Mario Bros./Mario (0x0102000000010002).bin")]
    assert (tmp_path / "dumps" / "Super Mario Bros." / "Mario (0x0102000000010002).bin").is_file()


def test_generate_all_overwrites_existing_files(tmp_path, sample_database, fake_encryptor):
    first = generate_all(sample_database, tmp_path, fake_encryptor)
    second = generate_all(sample_database, tmp_path, fake_encryptor)
    assert second.ok
    assert first.written == second.written


def test_generate_all_continues_after_write_failure(tmp_path, fake_encryptor, capsys):
    amiibos = {f"0x00000000{i:04x}0002": {"name": f"Figure {i}"} for i in range(20)}
    db = AmiiboDatabase.from_dict({"amiibo_series": {"0x00": "Series"}, "amiibos": amiibos})

    # a directory where the 8th dump should go makes that single write fail
    blocked = tmp_path / "Series" / "Figure 7 (0x0000000000070002).bin"
    blocked.mkdir(parents=True)

    report = generate_all(db, tmp_path, fake_encryptor)

    assert (report.attempted, report.succeeded, report.failed) == (20, 19, 1)
    assert not report.ok
    assert [key for key, _ in report.failures] == ["0x0000000000070002"]
    assert blocked not in report.written
    assert (tmp_path / "Series" / "Figure 19 (0x0000000000130002).bin").is_file()
    assert "Could not write" in capsys.readouterr().err


def test_generate_all_unknown_series_is_fatal(tmp_path, fake_encryptor):
    db = AmiiboDatabase.from_dict({
        "amiibo_series": {"0x00": "Known"},
        "amiibos": {
            "0x0000000000000002": {"name": "A"},
            "0x0000000000004202": {"name": "B"},
            "0x0000000000010002": {"name": "C"},
        },
    })
    with pytest.raises(UnknownSeries):
        generate_all(db, tmp_path, fake_encryptor)
    assert len(fake_encryptor.calls) == 1


def test_generate_all_invalid_key_is_fatal(tmp_path, fake_encryptor):
    db = AmiiboDatabase.from_dict({
        "amiibo_series": {"0x00": "Known"},
        "amiibos": {"0x0000000000000001": {"name": "Bad"}},
    })
    with pytest.raises(InvalidIdentifier):
        generate_all(db, tmp_path, fake_encryptor)


def test_generate_all_encryption_failure_is_fatal(tmp_path, sample_database):
    class FailingEncryptor(BaseEncryptor):
        def __init__(self):
            self.count = 0

        def name(self):
            return "failing"

        def encrypt(self, image):
            self.count += 1
            if self.count == 2:
                raise EncryptionFailure("keys rejected")
            return image

    with pytest.raises(EncryptionFailure):
        generate_all(sample_database, tmp_path, FailingEncryptor())
    assert len(list(tmp_path.rglob("*.bin"))) == 1


def test_generate_one_default_path(tmp_path, fake_encryptor, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = generate_one("0x0000000000000002", None, fake_encryptor)

    assert path == Path("0x0000000000000002.bin")
    data = (tmp_path / "0x0000000000000002.bin").read_bytes()
    assert len(data) == TAG_SIZE
    assert _decrypt(data)[84:92] == bytes.fromhex("0000000000000002")


def test_generate_one_canonical_name_from_lowercase_input(tmp_path, fake_encryptor, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = generate_one("01abcdef00ff0102", None, fake_encryptor)
    assert path == Path("0x01ABCDEF00FF0102.bin")


def test_generate_one_output_override(tmp_path, fake_encryptor):
    target = tmp_path / "nested" / "mario.bin"
    path = generate_one(b"\x00" * 7 + b"\x02", target, fake_encryptor)
    assert path == target
    assert target.stat().st_size == TAG_SIZE


def test_generate_one_invalid_identifier(tmp_path, fake_encryptor):
    with pytest.raises(InvalidIdentifier):
        generate_one("0x0000000000000003", tmp_path / "x.bin", fake_encryptor)
    assert fake_encryptor.calls == []


def test_generate_one_write_failure(tmp_path, fake_encryptor):
    with pytest.raises(FilesystemError):
        generate_one("0x0000000000000002", tmp_path, fake_encryptor)
