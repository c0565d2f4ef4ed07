from __future__ import annotations

from pathlib import Path

import pytest

import tackle_import.cli.__main__ as cli
from tackle_import.cli.__main__ import main as cli_main
from tackle_import.db.record_store import RecordStoreError

"""Exit code contract: 0 all batches ok, 2 any batch rejected or failed, 1 fatal."""


@pytest.fixture()
def paste(temp_workdir: Path):
    def _paste(name: str, text: str) -> str:
        p = temp_workdir / "data" / name
        p.write_text(text, encoding="utf-8")
        return str(p)
    return _paste


def test_exit_code_all_success(paste, no_db_env, monkeypatch, reel_line, fake_store):
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: fake_store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    assert cli_main(["reels", paste("a.txt", reel_line), paste("b.txt", "Daiwa | Tatula"), "--commit"]) == 0
    assert len(fake_store.inserts) == 2


def test_exit_code_partial_rejected(paste, no_db_env, monkeypatch, reel_line, fake_store):
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: fake_store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    code = cli_main(["reels", paste("a.txt", reel_line), paste("b.txt", "Shimano"), "--commit"])
    assert code == 2
    assert len(fake_store.inserts) == 1


def test_exit_code_commit_failed(paste, no_db_env, monkeypatch, reel_line, make_store):
    store = make_store(insert_error=RecordStoreError("permission denied"))
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    assert cli_main(["reels", paste("a.txt", reel_line), "--commit"]) == 2


def test_exit_code_not_signed_in(paste, no_db_env, monkeypatch, reel_line, fake_store, capsys):
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: fake_store)
    assert cli_main(["reels", paste("a.txt", reel_line), "--commit"]) == 2
    assert "commit failed: Not signed in." in capsys.readouterr().out
    assert fake_store.inserts == []


def test_exit_code_fatal_combos_without_store(paste, no_db_env, monkeypatch):
    def refuse(cfg):
        raise RecordStoreError("could not connect to server")

    monkeypatch.setattr(cli, "_connect_store", refuse)
    assert cli_main(["combos", paste("c.txt", "Jig | Curado")]) == 1


def test_exit_code_fatal_reference_load(paste, no_db_env, monkeypatch, make_store, capsys):
    store = make_store(query_error=RecordStoreError("relation \"gear_items\" does not exist"))
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    assert cli_main(["combos", paste("c.txt", "Jig | Curado")]) == 1
    assert "ERROR processing: failed to load references" in capsys.readouterr().out
    assert store.closed is True


def test_exit_code_fatal_invalid_config(paste, no_db_env, temp_workdir: Path, capsys):
    (temp_workdir / "config" / "tackle.yml").write_text("nope: 1\n", encoding="utf-8")
    assert cli_main(["reels", paste("a.txt", "A | B")]) == 1
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_exit_code_combos_offline_rejected(paste, no_db_env, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    assert cli_main(["combos", paste("c.txt", "Jig | Curado")]) == 2
    assert "WARN no record store: combos references not loaded" in capsys.readouterr().out
