from __future__ import annotations

from pathlib import Path

import tackle_import.cli.__main__ as cli
from tackle_import.cli.__main__ import main as cli_main

"""End-to-end reel bulk add: paste file -> preview -> single batch insert."""


def test_reel_bulk_add_end_to_end(temp_workdir: Path, no_db_env, monkeypatch, reel_line, fake_store, capsys):
    monkeypatch.setattr(cli, "_connect_store", lambda cfg: fake_store)
    monkeypatch.setenv("TACKLE_OWNER_ID", "owner-1")
    paste = temp_workdir / "data" / "reels.txt"
    paste.write_text(
        "# Brand | Model | Status | Type | Hand | Ratio | IPT | WeightOz | DragLb\n"
        f"{reel_line}\r\n"
        "\r\n"
        "Daiwa\tTatula SV TW 103\twish list\tBFS\tLEFT\t8.1:1\t33.5\t6.9oz\t10\n",
        encoding="utf-8",
    )

    code = cli_main(["reels", str(paste), "--commit"])
    out = capsys.readouterr().out

    assert code == 0
    assert "Preview: 2 reel(s)" in out
    assert "INFO source=reels.txt Inserted 2 reel(s)." in out
    collection, rows = fake_store.inserts[0]
    assert collection == "gear_items"
    assert len(fake_store.inserts) == 1
    first, second = rows
    assert first == {
        "owner_id": "owner-1",
        "gear_type": "reel",
        "name": "Shimano Curado DC 150HG",
        "status": "owned",
        "brand": "Shimano",
        "model": "Curado DC 150HG",
        "reel_type": "baitcaster",
        "reel_hand": "right",
        "reel_gear_ratio": "7.4:1",
        "reel_ipt_in": 30.0,
        "reel_weight_oz": 7.8,
        "reel_max_drag_lb": 11.0,
        "reel_bearings": "6+1",
        "reel_line_capacity": "12/120",
        "reel_brake_system": "DC",
        "notes": "JDM spool",
        "storage_note": "In black case",
    }
    assert second["name"] == "Daiwa Tatula SV TW 103"
    assert second["status"] == "wishlist"
    assert second["reel_type"] == "bfs"
    assert second["reel_hand"] == "left"
    assert second["reel_weight_oz"] is None
    assert second["reel_ipt_in"] == 33.5


def test_rod_bulk_add_preview_only(temp_workdir: Path, no_db_env, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    paste = temp_workdir / "data" / "rods.txt"
    paste.write_text("St Croix, Mojo Bass Jig, owned, MH, Fast, 84, 1\n", encoding="utf-8")
    assert cli_main(["rods", str(paste)]) == 0
    out = capsys.readouterr().out
    assert "Preview: 1 rod(s)" in out
    assert "St Croix Mojo Bass Jig" in out
