from __future__ import annotations

from ..models.records import ComboPair, ReelRecord, RodRecord
from .normalize import FieldKind, FieldSpec, ReferenceSpec, SurfaceSchema

"""Ingestion surface definitions (reels, rods, combos).

Column order is positional and fixed per surface; trailing columns may be
omitted.
"""

__all__ = [
    "REEL_TYPE_VALUES",
    "REEL_HAND_VALUES",
    "ROD_POWER_VALUES",
    "ROD_ACTION_VALUES",
    "REELS",
    "RODS",
    "COMBOS",
    "SURFACES",
    "get_surface",
]

GEAR_ITEMS = "gear_items"
COMBOS_COLLECTION = "combos"

REEL_TYPE_VALUES = ("baitcaster", "spinning", "bfs", "round", "other")
REEL_HAND_VALUES = ("right", "left")
ROD_POWER_VALUES = ("UL", "L", "ML", "M", "MH", "H", "XH")
ROD_ACTION_VALUES = ("Slow", "Mod", "Mod-Fast", "Fast", "X-Fast")

_S = FieldKind.OPTIONAL_STRING
_N = FieldKind.OPTIONAL_NUMBER


REELS = SurfaceSchema(
    name="reels",
    noun="reel",
    collection=GEAR_ITEMS,
    record_type=ReelRecord,
    fields=(
        FieldSpec("brand", _S, "Brand"),
        FieldSpec("model", _S, "Model"),
        FieldSpec("status", FieldKind.STATUS, "Status"),
        FieldSpec("reel_type", FieldKind.ENUM_STRING, "Type", REEL_TYPE_VALUES, "baitcaster"),
        FieldSpec("reel_hand", FieldKind.ENUM_STRING, "Hand", REEL_HAND_VALUES, "right"),
        FieldSpec("gear_ratio", _S, "Ratio"),
        FieldSpec("ipt", _N, "IPT"),
        FieldSpec("weight", _N, "WeightOz"),
        FieldSpec("max_drag", _N, "DragLb"),
        FieldSpec("bearings", _S, "Bearings"),
        FieldSpec("line_capacity", _S, "LineCap"),
        FieldSpec("brake_system", _S, "Brake"),
        FieldSpec("notes", _S, "Notes"),
        FieldSpec("storage_note", _S, "Storage"),
    ),
    name_parts=("brand", "model"),
    discriminator={"gear_type": "reel"},
)

RODS = SurfaceSchema(
    name="rods",
    noun="rod",
    collection=GEAR_ITEMS,
    record_type=RodRecord,
    fields=(
        FieldSpec("brand", _S, "Brand"),
        FieldSpec("model", _S, "Model"),
        FieldSpec("status", FieldKind.STATUS, "Status"),
        FieldSpec("power", FieldKind.ENUM_STRING, "Power", ROD_POWER_VALUES, None),
        FieldSpec("action", FieldKind.ENUM_STRING, "Action", ROD_ACTION_VALUES, None),
        FieldSpec("length_in", _N, "LengthIn"),
        FieldSpec("pieces", _N, "Pieces"),
        FieldSpec("line_min_lb", _N, "LineMinLb"),
        FieldSpec("line_max_lb", _N, "LineMaxLb"),
        FieldSpec("lure_min_oz", _N, "LureMinOz"),
        FieldSpec("lure_max_oz", _N, "LureMaxOz"),
        FieldSpec("handle", _S, "Handle"),
        FieldSpec("blank", _S, "Blank"),
        FieldSpec("guides", _S, "Guides"),
        FieldSpec("notes", _S, "Notes"),
        FieldSpec("storage_note", _S, "Storage"),
    ),
    name_parts=("brand", "model"),
    discriminator={"gear_type": "rod"},
)

COMBOS = SurfaceSchema(
    name="combos",
    noun="combo",
    collection=COMBOS_COLLECTION,
    record_type=ComboPair,
    fields=(
        FieldSpec("rod", FieldKind.REQUIRED_STRING, "Rod"),
        FieldSpec("reel", FieldKind.REQUIRED_STRING, "Reel"),
    ),
    references=(
        ReferenceSpec(field="rod", fk_column="rod_id", gear_type="rod"),
        ReferenceSpec(field="reel", fk_column="reel_id", gear_type="reel"),
    ),
)

SURFACES: dict[str, SurfaceSchema] = {s.name: s for s in (REELS, RODS, COMBOS)}


def get_surface(name: str) -> SurfaceSchema:
    try:
        return SURFACES[name.strip().lower()]
    except KeyError:
        raise KeyError(
            f"unknown surface '{name}' (expected one of: {', '.join(SURFACES)})"
        ) from None
