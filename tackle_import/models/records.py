from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Typed gear records produced by the bulk-paste normalizer.

One record type per ingestion surface. Records hold cleaned values only;
``to_row()`` maps them onto the record store's column names (empty string -> None).
Owner tagging and the gear_type discriminator are added by the committer.
"""

__all__ = [
    "ReelRecord",
    "RodRecord",
    "ComboPair",
    "ReferenceRecord",
    "User",
]


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value == "":
        return None
    return value


@dataclass(frozen=True)
class ReelRecord:
    """One reel line after normalization.

    Column order in paste text:
    Brand | Model | Status | Type | Hand | Ratio | IPT | WeightOz | DragLb |
    Bearings | LineCap | Brake | Notes | Storage
    """
    name: str  # composed from brand + model
    status: str  # owned / wishlist
    brand: str = ""
    model: str = ""
    reel_type: str = "baitcaster"
    reel_hand: str = "right"
    gear_ratio: str = ""  # human string, e.g. "7.4:1"
    ipt: float | None = None  # inches per turn
    weight: float | None = None  # oz
    max_drag: float | None = None  # lb
    bearings: str = ""
    line_capacity: str = ""
    brake_system: str = ""
    notes: str = ""
    storage_note: str = ""

    def to_row(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "brand": _blank_to_none(self.brand),
            "model": _blank_to_none(self.model),
            "reel_type": _blank_to_none(self.reel_type),
            "reel_hand": _blank_to_none(self.reel_hand),
            "reel_gear_ratio": _blank_to_none(self.gear_ratio),
            "reel_ipt_in": self.ipt,
            "reel_weight_oz": self.weight,
            "reel_max_drag_lb": self.max_drag,
            "reel_bearings": _blank_to_none(self.bearings),
            "reel_line_capacity": _blank_to_none(self.line_capacity),
            "reel_brake_system": _blank_to_none(self.brake_system),
            "notes": _blank_to_none(self.notes),
            "storage_note": _blank_to_none(self.storage_note),
        }


@dataclass(frozen=True)
class RodRecord:
    """One rod line after normalization.

    Column order in paste text:
    Brand | Model | Status | Power | Action | LengthIn | Pieces | LineMinLb |
    LineMaxLb | LureMinOz | LureMaxOz | Handle | Blank | Guides | Notes | Storage
    """
    name: str
    status: str
    brand: str = ""
    model: str = ""
    power: str | None = None  # UL..XH
    action: str | None = None  # Slow..X-Fast
    length_in: float | None = None
    pieces: float | None = None
    line_min_lb: float | None = None
    line_max_lb: float | None = None
    lure_min_oz: float | None = None
    lure_max_oz: float | None = None
    handle: str = ""
    blank: str = ""
    guides: str = ""
    notes: str = ""
    storage_note: str = ""

    def to_row(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "brand": _blank_to_none(self.brand),
            "model": _blank_to_none(self.model),
            "rod_power": self.power,
            "rod_action": self.action,
            "rod_length_in": self.length_in,
            "rod_pieces": self.pieces,
            "rod_line_min_lb": self.line_min_lb,
            "rod_line_max_lb": self.line_max_lb,
            "rod_lure_min_oz": self.lure_min_oz,
            "rod_lure_max_oz": self.lure_max_oz,
            "rod_handle_text": _blank_to_none(self.handle),
            "rod_blank_text": _blank_to_none(self.blank),
            "rod_guides_text": _blank_to_none(self.guides),
            "notes": _blank_to_none(self.notes),
            "storage_note": _blank_to_none(self.storage_note),
        }


@dataclass(frozen=True)
class ComboPair:
    """Rod | Reel pair. Names only; ids come from the resolver."""
    rod: str
    reel: str

    def to_row(self) -> dict[str, Any]:
        # combos table stores ids only (rod_id / reel_id filled from resolution)
        return {}


@dataclass(frozen=True)
class ReferenceRecord:
    """Existing gear item loaded read-only for name matching.

    Columns the resolver does not know about are kept in ``extras`` and never
    take part in key building.
    """
    id: str
    name: str = ""
    brand: str = ""
    model: str = ""
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ReferenceRecord:
        known = {"id", "name", "brand", "model"}
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            brand=str(row.get("brand") or ""),
            model=str(row.get("model") or ""),
            extras={k: v for k, v in row.items() if k not in known},
        )


@dataclass(frozen=True)
class User:
    """Signed-in owner as reported by the identity provider."""
    id: str
    email: str | None = None
