import json

import pytest

from igs036 import Igs036Decryptor, KeyTableError
from igs036_keys import KEYS, KeyStatus, get_key, load_key_file


def test_bundled_keys_have_256_entries():
    assert len(KEYS) == 8
    for entry in KEYS.values():
        assert len(entry.key) == 0x100
        assert all(0 <= value <= 0xFFFF for value in entry.key)


def test_bundled_key_statuses():
    assert get_key("ddpdoj").status is KeyStatus.SUSPECT
    assert get_key("kof98umh").status is KeyStatus.WRONG
    assert not get_key("kof98umh").trusted
    for name in ("orleg2", "m312cn", "cjddzsp", "cjdh2", "kov3", "kov2"):
        assert get_key(name).trusted


def test_bundled_key_values():
    orleg2 = get_key("orleg2").key
    assert orleg2[0x00] == 0x8100
    assert orleg2[0x07] == 0xAB05
    assert orleg2[0xFF] == 0x4264


def test_get_key_is_case_insensitive():
    assert get_key("KOV3") is KEYS["kov3"]


def test_get_key_unknown():
    with pytest.raises(KeyTableError, match="kov2"):
        get_key("nosuchgame")


def test_wrong_key_still_applied():
    # a known-bad table is used as given, never replaced
    decryptor = Igs036Decryptor(get_key("kof98umh").key)
    assert decryptor.key == get_key("kof98umh").key


def test_load_key_file(tmp_path):
    path = tmp_path / "mygame.json"
    path.write_text(json.dumps({
        "status": "suspect",
        "key": ["0x%04x" % i for i in range(0x100)],
    }))

    entry = load_key_file(path)
    assert entry.name == "mygame"
    assert entry.status is KeyStatus.SUSPECT
    assert entry.key[0xAB] == 0xAB


def test_load_key_file_int_values(tmp_path):
    path = tmp_path / "k.json"
    path.write_text(json.dumps({"name": "custom", "key": [0xFFFF] * 0x100}))

    entry = load_key_file(path)
    assert entry.name == "custom"
    assert entry.status is KeyStatus.GOOD
    assert entry.key == (0xFFFF,) * 0x100


@pytest.mark.parametrize("content", [
    "not json",
    json.dumps([1, 2, 3]),
    json.dumps({"key": [0] * 10}),
    json.dumps({"key": "0000"}),
    json.dumps({"key": ["zz"] * 0x100}),
    json.dumps({"status": "maybe", "key": [0] * 0x100}),
])
def test_load_key_file_rejects_bad_files(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(KeyTableError):
        load_key_file(path)


def test_load_key_file_missing(tmp_path):
    with pytest.raises(KeyTableError):
        load_key_file(tmp_path / "missing.json")
