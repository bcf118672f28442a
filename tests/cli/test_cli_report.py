# tests/cli/test_cli_report.py
import csv
import json
from pathlib import Path

from typer.testing import CliRunner

from dupindex.cli.app import app

runner = CliRunner()


def _scan(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    (root / "nested").mkdir(parents=True)
    (root / "a.txt").write_text("hello world\n")
    (root / "nested" / "b.txt").write_text("hello world\n")
    (root / "c.txt").write_text("something else\n")
    cache = tmp_path / "index.json.gz"
    r = runner.invoke(app, ["scan", "--path", str(root), "--out", str(cache)])
    assert r.exit_code == 0, r.output
    return cache


def test_cli_scan_and_report_roundtrip(tmp_path: Path):
    cache = _scan(tmp_path)
    out = tmp_path / "duplicates.json"

    r = runner.invoke(app, ["report", "--cache", str(cache), "--output", str(out)])

    assert r.exit_code == 0, r.output
    clusters = json.loads(out.read_text())
    assert len(clusters) == 1
    paths = {rec["path"] for rec in clusters[0]}
    assert paths == {str(tmp_path / "data" / "a.txt"), str(tmp_path / "data" / "nested" / "b.txt")}


def test_report_writes_into_output_directory(tmp_path: Path):
    cache = _scan(tmp_path)
    out_dir = tmp_path / "reports"
    out_dir.mkdir()

    r = runner.invoke(
        app, ["report", "--cache", str(cache), "--fmt", "csv", "--out", str(out_dir)]
    )

    assert r.exit_code == 0, r.output
    target = out_dir / "duplicates.csv"
    with open(target, newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == 2


def test_report_default_target(tmp_path: Path, monkeypatch):
    cache = _scan(tmp_path)
    monkeypatch.chdir(tmp_path)
    r = runner.invoke(app, ["report", "--cache", str(cache), "--fmt", "ndjson"])
    assert r.exit_code == 0, r.output
    assert (tmp_path / "duplicates.ndjson").exists()


def test_report_unknown_format_fails_cleanly(tmp_path: Path):
    cache = _scan(tmp_path)
    r = runner.invoke(
        app, ["report", "--cache", str(cache), "--fmt", "xml", "--out", str(tmp_path / "x.xml")]
    )
    assert r.exit_code == 2
    assert "Unsupported format" in r.output


def test_report_on_corrupt_cache_exits_with_error(tmp_path: Path):
    cache = tmp_path / "broken.json.gz"
    cache.write_bytes(b"definitely not gzip")
    r = runner.invoke(app, ["report", "--cache", str(cache), "--out", str(tmp_path / "r.json")])
    assert r.exit_code == 1
    assert "Error:" in r.output
