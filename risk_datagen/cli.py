"""
Command-line entry point for generating synthetic risk profiles.

Usage (from project root):

    python -m risk_datagen.cli --n 2000 --seed 42 --as-of 2025-01-01

This script:
1) Generates a deterministic synthetic risk profile dataset
2) Checks every table invariant before touching the disk
3) Writes CSV snapshots and a dataset manifest with file hashes
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .config import ConfigError, GeneratorConfig
from .generators import generate_dataset
from .schemas import validate_dataset
from .storage import write_dataset


# -------------------------------------------------------------------
# Output location
# -------------------------------------------------------------------

DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "raw"


# -------------------------------------------------------------------
# Arguments
# -------------------------------------------------------------------

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate synthetic risk profiles, claims history and a risk summary."
    )
    parser.add_argument("--n", type=int, default=config.N_INDIVIDUALS, help="Number of individuals.")
    parser.add_argument("--seed", type=int, default=config.SEED, help="Random seed.")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Generation date (YYYY-MM-DD) anchoring the claim window; defaults to today.",
    )
    parser.add_argument("--output-dir", type=Path, default=DATA_DIR, help="Directory for CSV files.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


# -------------------------------------------------------------------
# Main entrypoint
# -------------------------------------------------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    cfg = GeneratorConfig(n_individuals=args.n, seed=args.seed, as_of=args.as_of or date.today())
    try:
        cfg.validate()
    except ConfigError as exc:
        raise SystemExit(f"error: {exc}") from exc

    print("▶ Generating synthetic risk profiles...")
    dataset = generate_dataset(cfg)

    validate_dataset(dataset.profiles, dataset.claims)
    print("✔ Dataset passed validation")

    manifest_path = write_dataset(dataset, args.output_dir)
    print(f"✔ Data written to {args.output_dir}")
    print(f"✔ Manifest path: {manifest_path}")

    # ---------------- Quick portfolio sanity ---------------- #

    print(f"  - Generated {len(dataset.profiles)} individual risk profiles")
    print(f"  - Generated {len(dataset.claims)} claims records")
    print("  - Risk category distribution:")
    summary = dataset.summary
    for category, count in zip(summary["risk_category"], summary["count"]):
        print(f"      {category:<15} {count:>6}")

    print("✅ Dataset generation complete")
    return 0


# -------------------------------------------------------------------
# CLI hook
# -------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
