import json

import pandas as pd
import pytest

from risk_datagen import config, storage
from risk_datagen.cli import main
from risk_datagen.generators import RiskDataset, generate_dataset
from risk_datagen.schemas import CLAIM_COLUMNS, claims_frame
from risk_datagen.storage import file_hash, write_dataset, write_tables


@pytest.fixture(scope="module")
def small_dataset(small_config):
    return generate_dataset(small_config)


def test_write_dataset_outputs_and_manifest(small_dataset, tmp_path):
    manifest_path = write_dataset(small_dataset, tmp_path)
    assert manifest_path == tmp_path / config.MANIFEST_FILE

    manifest = json.loads(manifest_path.read_text())
    assert manifest["seed"] == 7
    assert manifest["n_individuals"] == 150
    assert manifest["as_of"] == "2025-01-01"
    assert manifest["row_counts"]["profiles"] == 150
    assert manifest["row_counts"]["summary"] == 5

    for name in (config.PROFILES_FILE, config.CLAIMS_FILE, config.SUMMARY_FILE):
        assert manifest["file_hashes_sha256"][name] == file_hash(tmp_path / name)

    # Only the outputs remain; the staging directory is gone
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted(
        [config.PROFILES_FILE, config.CLAIMS_FILE, config.SUMMARY_FILE, config.MANIFEST_FILE]
    )


def test_profiles_csv_reads_back(small_dataset, tmp_path):
    write_dataset(small_dataset, tmp_path)
    df = pd.read_csv(tmp_path / config.PROFILES_FILE)
    assert list(df.columns) == list(small_dataset.profiles.columns)
    assert len(df) == 150
    no_home = df["home_value"] == 0
    assert df.loc[no_home, "construction_type"].isna().all()
    assert df["risk_category"].isin(config.RISK_CATEGORIES).all()


def test_empty_claims_written_header_only(small_dataset, tmp_path):
    stale = tmp_path / config.CLAIMS_FILE
    stale.write_text("claim_id\nOLD_C01\n")

    no_claims = RiskDataset(
        settings=small_dataset.settings,
        profiles=small_dataset.profiles,
        claims=claims_frame([]),
        summary=small_dataset.summary,
    )
    write_dataset(no_claims, tmp_path)
    assert stale.read_text() == ",".join(CLAIM_COLUMNS) + "\n"


def test_failed_write_leaves_previous_files(tmp_path, monkeypatch):
    target = tmp_path / "a.csv"
    target.write_text("old\n")

    def boom(df, path):
        raise OSError("disk full")

    monkeypatch.setattr(storage, "_write_csv", boom)
    with pytest.raises(OSError, match="disk full"):
        write_tables({"a.csv": pd.DataFrame({"x": [1]})}, tmp_path)

    assert target.read_text() == "old\n"
    assert [p.name for p in tmp_path.iterdir()] == ["a.csv"]


def test_file_hash_is_sha256(tmp_path):
    p = tmp_path / "x.txt"
    p.write_bytes(b"abc")
    assert file_hash(p) == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_cli_end_to_end(tmp_path, capsys):
    out = tmp_path / "out"
    rc = main(["--n", "60", "--seed", "3", "--as-of", "2025-01-01", "--output-dir", str(out)])
    assert rc == 0
    assert (out / config.PROFILES_FILE).exists()
    assert (out / config.MANIFEST_FILE).exists()

    printed = capsys.readouterr().out
    assert "Risk category distribution" in printed
    assert "Generated 60 individual risk profiles" in printed


def test_cli_rejects_bad_population_before_writing(tmp_path):
    out = tmp_path / "out"
    with pytest.raises(SystemExit):
        main(["--n", "0", "--output-dir", str(out)])
    assert not out.exists()
