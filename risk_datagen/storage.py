"""
Persistence for generated datasets.

Tables are written to a staging directory next to the target and moved
into place with ``os.replace``, so a reader never sees a half-written CSV.
The manifest is written last; its hashes identify the set of tables that
belong together.
"""

from __future__ import annotations

import datetime
import hashlib
import json
import logging
import os
import platform
import shutil
import tempfile
from pathlib import Path

import pandas as pd

from . import config
from .generators import RiskDataset

logger = logging.getLogger(__name__)


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file (streaming-safe)."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _write_csv(df: pd.DataFrame, path: Path) -> None:
    # Fixed line terminator keeps bytes identical across platforms
    df.to_csv(path, index=False, lineterminator="\n")


def write_tables(tables: dict[str, pd.DataFrame], output_dir: Path) -> dict[str, Path]:
    """Write each table to ``output_dir / name`` atomically.

    Returns the final paths keyed by file name. On error the staging
    directory is removed and the exception propagates.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    staging = Path(tempfile.mkdtemp(prefix=".staging-", dir=output_dir))
    try:
        for name, df in tables.items():
            _write_csv(df, staging / name)

        paths = {}
        for name in tables:
            target = output_dir / name
            os.replace(staging / name, target)
            paths[name] = target
            logger.debug("Wrote %s", target)
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    return paths


def build_manifest(dataset: RiskDataset, paths: dict[str, Path]) -> dict:
    cfg = dataset.settings
    return {
        "dataset_version": config.DATASET_VERSION,
        "generated_at_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "generator_entrypoint": "risk_datagen.cli",
        "generator_function": "generate_dataset",
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "seed": cfg.seed,
        "n_individuals": cfg.n_individuals,
        "as_of": cfg.as_of.isoformat(),
        "row_counts": {
            "profiles": len(dataset.profiles),
            "claims": len(dataset.claims),
            "summary": len(dataset.summary),
        },
        "file_hashes_sha256": {name: file_hash(path) for name, path in paths.items()},
    }


def write_dataset(dataset: RiskDataset, output_dir: Path) -> Path:
    """Write profiles, claims and summary CSVs plus the manifest.

    The claims file is always written, header-only when no claims were
    generated, so a stale claims table never outlives a regeneration.
    Returns the manifest path.
    """
    output_dir = Path(output_dir)
    paths = write_tables(
        {
            config.PROFILES_FILE: dataset.profiles,
            config.CLAIMS_FILE: dataset.claims,
            config.SUMMARY_FILE: dataset.summary,
        },
        output_dir,
    )

    manifest = build_manifest(dataset, paths)
    manifest_path = output_dir / config.MANIFEST_FILE

    tmp = manifest_path.with_name(manifest_path.name + ".tmp")
    with open(tmp, "w") as f:
        json.dump(manifest, f, indent=2)
    os.replace(tmp, manifest_path)

    logger.info("Dataset written to %s", output_dir)
    return manifest_path
