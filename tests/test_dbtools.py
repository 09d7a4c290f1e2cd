from pathlib import Path

import pytest

from keybot.dbtools import delete_author, main, print_keys
from keybot.store import GameKey, load_db, save_db


def _key(author: str, game: str, serial: str) -> GameKey:
    return GameKey(author=author, game_name=game, serial=serial, service_type="Steam")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "keys.db"
    save_db(
        path,
        {
            "portal": [_key("alice", "Portal", "AAAAA-BBBBB-CCCCC")],
            "doom": [
                _key("alice", "Doom", "DDDDD-EEEEE-FFFFF"),
                _key("bob", "Doom", "GGGGG-HHHHH-IIIII"),
            ],
            "quake": [_key("bob", "Quake", "JJJJJ-KKKKK-LLLLL")],
        },
    )
    return path


def test_print_keys_returns_author_keys(db_path, capsys):
    found = print_keys(db_path, "alice")
    assert sorted(k.serial for k in found) == ["AAAAA-BBBBB-CCCCC", "DDDDD-EEEEE-FFFFF"]
    out = capsys.readouterr().out
    assert "Game: Portal\nKey: AAAAA-BBBBB-CCCCC\n" in out
    assert "GGGGG-HHHHH-IIIII" not in out


def test_print_keys_does_not_modify_db(db_path):
    before = load_db(db_path)
    print_keys(db_path, "alice")
    assert load_db(db_path) == before


def test_print_keys_unknown_author(db_path, capsys):
    assert print_keys(db_path, "carol") == []
    assert capsys.readouterr().out == ""


def test_delete_author_removes_keys_and_empty_games(db_path):
    removed = delete_author(db_path, "alice")
    assert removed == 2
    db = load_db(db_path)
    assert set(db) == {"doom", "quake"}
    assert [k.author for k in db["doom"]] == ["bob"]
    assert all(k.author != "alice" for keys in db.values() for k in keys)


def test_delete_author_unknown_leaves_db(db_path):
    before = load_db(db_path)
    assert delete_author(db_path, "carol") == 0
    assert load_db(db_path) == before


def test_delete_author_empty_db(tmp_path):
    path = tmp_path / "keys.db"
    path.write_text("")
    assert delete_author(path, "alice") == 0
    assert path.read_text() == ""


def test_missing_db_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        print_keys(tmp_path / "missing.db", "alice")


def test_main_print_and_delete(db_path, capsys):
    code = main(["-p", "-d", "-author=bob", "-db", str(db_path)])
    assert code == 0
    out = capsys.readouterr().out
    assert "Key: JJJJJ-KKKKK-LLLLL" in out
    db = load_db(db_path)
    assert "quake" not in db
    assert all(k.author == "alice" for keys in db.values() for k in keys)


def test_main_without_author_does_nothing(db_path):
    before = load_db(db_path)
    assert main(["-d", "-db", str(db_path)]) == 0
    assert load_db(db_path) == before


def test_main_missing_file_reports_error(tmp_path, capsys):
    code = main(["-p", "-author", "alice", "-db", str(tmp_path / "nope.db")])
    assert code == 1
    assert "error" in capsys.readouterr().err