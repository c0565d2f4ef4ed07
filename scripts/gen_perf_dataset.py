#!/usr/bin/env python3
"""Paste dataset generation for performance testing.

Writes synthetic bulk-paste files (one record per line, '|' separated) for
the reels, rods or combos surface. A configurable share of lines is made
deliberately malformed or unmatched so that error paths are exercised too.

    python scripts/gen_perf_dataset.py reels --rows 500 --output data/reels.txt
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

REEL_BRANDS = ["Shimano", "Daiwa", "Abu Garcia", "Lew's", "Penn", "Okuma"]
ROD_BRANDS = ["St Croix", "G. Loomis", "Dobyns", "Megabass", "Ugly Stik"]
REEL_TYPES = ["baitcaster", "spinning", "bfs", "round", "other"]
ROD_POWERS = ["UL", "L", "ML", "M", "MH", "H", "XH"]
ROD_ACTIONS = ["Slow", "Mod", "Mod-Fast", "Fast", "X-Fast"]
STATUSES = ["owned", "wishlist", "planned", "Owned", ""]


def generate_reels(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Brand": rng.choice(REEL_BRANDS, rows),
            "Model": [f"Model {i} {rng.integers(100, 300)}HG" for i in range(rows)],
            "Status": rng.choice(STATUSES, rows),
            "Type": rng.choice(REEL_TYPES, rows),
            "Hand": rng.choice(["right", "left", "LEFT"], rows),
            "Ratio": [f"{r:.1f}:1" for r in rng.uniform(5.1, 9.1, rows)],
            "IPT": rng.uniform(24, 36, rows).round(1),
            "WeightOz": rng.uniform(5, 11, rows).round(1),
            "DragLb": rng.integers(8, 25, rows),
            "Bearings": [f"{b}+1" for b in rng.integers(4, 12, rows)],
            "LineCap": [f"{lb}/{yd}" for lb, yd in zip(rng.integers(8, 20, rows), rng.integers(100, 200, rows))],
            "Brake": rng.choice(["DC", "Mag", "SVS", ""], rows),
            "Notes": "",
            "Storage": rng.choice(["Garage rack", "In black case", ""], rows),
        }
    )


def generate_rods(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    lure_min = rng.uniform(0.06, 0.5, rows).round(3)
    return pd.DataFrame(
        {
            "Brand": rng.choice(ROD_BRANDS, rows),
            "Model": [f"Series {i}" for i in range(rows)],
            "Status": rng.choice(STATUSES, rows),
            "Power": rng.choice(ROD_POWERS, rows),
            "Action": rng.choice(ROD_ACTIONS, rows),
            "LengthIn": rng.integers(66, 96, rows),
            "Pieces": rng.choice([1, 2], rows),
            "LineMinLb": rng.integers(4, 12, rows),
            "LineMaxLb": rng.integers(12, 30, rows),
            "LureMinOz": lure_min,
            "LureMaxOz": (lure_min + rng.uniform(0.25, 1.5, rows)).round(3),
        }
    )


def generate_combos(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Rod": [f"{b} Series {i}" for i, b in enumerate(rng.choice(ROD_BRANDS, rows))],
            "Reel": [f"{b} Model {i}" for i, b in enumerate(rng.choice(REEL_BRANDS, rows))],
        }
    )


GENERATORS = {
    "reels": generate_reels,
    "rods": generate_rods,
    "combos": generate_combos,
}


def to_paste_text(df: pd.DataFrame, error_rate: float, rng: np.random.Generator) -> str:
    """Render rows as paste lines; a share of them becomes single-field lines."""
    lines = [" | ".join(str(v) for v in row) for row in df.itertuples(index=False)]
    broken = rng.random(len(lines)) < error_rate
    lines = [line.split(" | ")[0] if bad else line for line, bad in zip(lines, broken)]
    header = "# " + " | ".join(df.columns)
    return "\n".join([header, *lines]) + "\n"


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic bulk-paste files for performance testing",
    )
    parser.add_argument("surface", choices=sorted(GENERATORS), help="Ingestion surface")
    parser.add_argument("--rows", type=int, default=500, help="Number of paste lines (default: 500)")
    parser.add_argument(
        "--error-rate", type=float, default=0.0, help="Share of single-field lines, 0..1 (default: 0)"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", type=Path, required=True, help="Output paste file")
    parser.add_argument("--dry-run", action="store_true", help="Print the plan only")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.error_rate <= 1.0:
        print("Error: --error-rate must be between 0 and 1", file=sys.stderr)
        return 1

    print("Dataset generation plan:")
    print(f"  Surface: {args.surface}")
    print(f"  Output file: {args.output}")
    print(f"  Lines: {args.rows:,}")
    print(f"  Error rate: {args.error_rate:.0%}")
    print(f"  Random seed: {args.seed}")
    if args.dry_run:
        print("\n[DRY RUN] Would generate the file but not create it.")
        return 0

    rng = np.random.default_rng(args.seed)
    df = GENERATORS[args.surface](args.rows, rng)
    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(to_paste_text(df, args.error_rate, rng), encoding="utf-8")
    except OSError as e:
        print(f"\nError writing dataset: {e}", file=sys.stderr)
        return 1
    print(f"\nCreated paste file: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
