from __future__ import annotations

from tackle_import.ingest.surfaces import COMBOS, REELS
from tackle_import.models.preview import (
    REASON_NO_ROWS,
    REASON_PARSE_ERRORS,
    REASON_UNRESOLVED,
    ParseError,
)
from tackle_import.models.records import ReferenceRecord
from tackle_import.services.pipeline import (
    bounded_messages,
    compute_preview,
    preview_frame,
    render_preview_table,
)
from tackle_import.services.resolver import ReferenceData


def _combo_refs():
    return ReferenceData.from_records(
        {
            "rod": [ReferenceRecord(id="rod-1", name="St Croix Jig Rod")],
            "reel": [
                ReferenceRecord(id="reel-1", name="Shimano Curado DC 150HG"),
                ReferenceRecord(id="reel-2", brand="Daiwa", model="Tatula SV"),
            ],
        }
    )


def test_scenario_reel_preview_is_eligible(reel_line):
    preview = compute_preview(reel_line, REELS)
    assert len(preview.rows) == 1
    assert preview.errors == []
    assert preview.insert_eligible is True
    assert preview.missing == 0


def test_scenario_combo_missing_reel_blocks_commit():
    preview = compute_preview("St Croix Jig Rod | Shimano Curado DC 100HG", COMBOS, _combo_refs())
    assert len(preview.rows) == 1
    assert preview.rows[0].resolved["rod_id"] == "rod-1"
    assert preview.rows[0].resolved["reel_id"] is None
    assert preview.missing == 1
    assert preview.insert_eligible is False
    assert preview.eligibility.reason == REASON_UNRESOLVED


def test_one_unresolved_row_of_three_blocks_batch():
    raw = "\n".join(
        [
            "St Croix Jig Rod | Shimano Curado DC 150HG",
            "st croix jig rod | daiwa tatula sv",
            "St Croix Jig Rod | Abu Revo",
        ]
    )
    preview = compute_preview(raw, COMBOS, _combo_refs())
    assert len(preview.rows) == 3
    assert preview.missing == 1
    assert preview.insert_eligible is False


def test_all_resolved_combos_are_eligible():
    preview = compute_preview("St Croix Jig Rod | Daiwa Tatula SV", COMBOS, _combo_refs())
    assert preview.insert_eligible is True
    assert preview.rows[0].to_row() == {"rod_id": "rod-1", "reel_id": "reel-2"}


def test_combos_without_loaded_references_are_all_missing():
    preview = compute_preview("St Croix Jig Rod | Daiwa Tatula SV", COMBOS)
    assert preview.missing == 1
    assert preview.insert_eligible is False


def test_parse_errors_block_even_with_valid_rows(reel_line):
    preview = compute_preview(reel_line + "\nShimano", REELS)
    assert len(preview.rows) == 1
    assert len(preview.errors) == 1
    assert preview.insert_eligible is False
    assert preview.eligibility.reason == REASON_PARSE_ERRORS


def test_empty_input_not_eligible():
    preview = compute_preview("\n# nothing\n", REELS)
    assert preview.rows == []
    assert preview.errors == []
    assert preview.eligibility.reason == REASON_NO_ROWS


def test_compute_preview_is_idempotent(reel_line):
    raw = f"{reel_line}\nShimano\n\nDaiwa | Tatula | planned | spinning | left | 6.3:1 | x"
    first = compute_preview(raw, REELS)
    second = compute_preview(raw, REELS)
    assert first == second
    assert [r.record for r in first.rows] == [r.record for r in second.rows]


def test_bounded_messages_truncates_at_limit():
    errors = [ParseError(i, "needs at least two fields (Brand | Model)") for i in range(1, 26)]
    messages = bounded_messages(errors, limit=20)
    assert len(messages) == 21
    assert messages[0] == "Line 1: needs at least two fields (Brand | Model)"
    assert messages[-1] == "(+ 5 more)"


def test_bounded_messages_under_limit():
    errors = [ParseError(1, "missing rod")]
    assert bounded_messages(errors) == ["Line 1: missing rod"]
    assert bounded_messages([]) == []


def test_preview_frame_columns_and_display_values(reel_line):
    preview = compute_preview(reel_line + "\nDaiwa | Tatula", REELS)
    frame = preview_frame(preview, REELS)
    assert list(frame.columns[:3]) == ["line", "name", "Status"]
    assert "Brand" not in frame.columns
    assert frame.loc[0, "name"] == "Shimano Curado DC 150HG"
    assert frame.loc[0, "IPT"] == 30
    assert frame.loc[0, "WeightOz"] == 7.8
    assert frame.loc[1, "IPT"] == "—"


def test_preview_frame_combo_match_column():
    preview = compute_preview("St Croix Jig Rod | Daiwa Tatula SV\nSt Croix Jig Rod | Abu Revo", COMBOS, _combo_refs())
    frame = preview_frame(preview, COMBOS)
    assert list(frame.columns) == ["line", "Rod", "Reel", "match"]
    assert list(frame["match"]) == ["OK", "Missing"]


def test_render_preview_table_limits_rows():
    raw = "\n".join(f"Brand{i} | Model{i}" for i in range(5))
    preview = compute_preview(raw, REELS)
    text = render_preview_table(preview, REELS, limit=3)
    assert "Brand0 Model0" in text
    assert "Brand3 Model3" not in text
    assert text.endswith("Showing first 3…")


def test_render_preview_table_empty():
    assert render_preview_table(compute_preview("", REELS), REELS) == ""


def test_preview_row_valid_tracks_resolution():
    preview = compute_preview("St Croix Jig Rod | Daiwa Tatula SV\nSt Croix Jig Rod | Abu Revo", COMBOS, _combo_refs())
    assert [r.valid for r in preview.rows] == [True, False]
    assert [r.missing for r in preview.rows] == [False, True]
