from __future__ import annotations

import json
from pathlib import Path

import tackle_import.cli.__main__ as cli
from tackle_import.cli.__main__ import main as cli_main

"""End-to-end combo pairing against existing rods and reels."""


def _run(temp_workdir, monkeypatch, store, text, *extra):
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    paste = temp_workdir / "data" / "combos.txt"
    paste.write_text(text, encoding="utf-8")
    return cli_main(["combos", str(paste), *extra])


def test_combo_missing_reel_is_not_committed(temp_workdir: Path, no_db_env, monkeypatch, combo_store, capsys):
    code = _run(temp_workdir, monkeypatch, combo_store, "St Croix Jig Rod | Shimano Curado DC 100HG\n", "--commit")
    out = capsys.readouterr().out
    assert code == 2
    assert "Preview: 1 combo(s) • Missing matches: 1" in out
    assert "Some lines did not match a rod/reel by name. Fix those first." in out
    assert "missing=1" in out
    assert combo_store.inserts == []

    log = next((temp_workdir / "logs").glob("errors-*.log"))
    records = [json.loads(l) for l in log.read_text(encoding="utf-8").splitlines()]
    assert [(r["error_type"], r["message"]) for r in records] == [("RESOLUTION_MISS", "no match for reel_id")]


def test_combo_pairing_case_insensitive_commit(temp_workdir: Path, no_db_env, monkeypatch, combo_store, capsys):
    code = _run(temp_workdir, monkeypatch, combo_store, "st croix  JIG rod | SHIMANO curado dc 150hg\n", "--commit")
    assert code == 0
    assert combo_store.inserts == [
        ("combos", [{"owner_id": "owner-1", "rod_id": "rod-1", "reel_id": "reel-1"}])
    ]
    assert "Inserted 1 combo(s)." in capsys.readouterr().out
    queried = {q["filters"]["gear_type"] for q in combo_store.queries}
    assert queried == {"rod", "reel"}
    assert all(q["filters"]["owner_id"] == "owner-1" for q in combo_store.queries)
