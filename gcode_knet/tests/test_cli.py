"""Tests for the gcode-knet command-line entrypoint."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gcode_knet.scripts.knet import build_parser, main


@pytest.fixture()
def source(tmp_path: Path) -> Path:
    src = tmp_path / "job.nc"
    src.write_text(
        "(Core: A; X-Axis: X; Park: 5)\n"
        "(Core: B; X-Axis: U; Park: 600)\n"
        "(Tool Change [B])\n"
        "G1 X12\n",
        encoding="utf-8",
    )
    return src


class TestParser:
    def test_source_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_flags(self) -> None:
        args = build_parser().parse_args(["-v", "-c", "k.yaml", "part.nc"])
        assert args.verbose is True
        assert args.config == "k.yaml"
        assert args.source == "part.nc"

    def test_args_file(self, tmp_path: Path) -> None:
        args_file = tmp_path / "knet.args"
        args_file.write_text("--verbose\n--log-file\nrun.log\n", encoding="utf-8")
        args = build_parser().parse_args([f"@{args_file}", "part.nc"])
        assert args.verbose is True
        assert args.log_file == "run.log"


class TestMain:
    def test_success(self, source: Path, tmp_path: Path) -> None:
        assert main([str(source)]) == 0
        out = (tmp_path / "job_knet.nc").read_text(encoding="utf-8").splitlines()
        assert out[-3:] == ["G00 X5.000", "(Tool Change [B])", "G1 U12"]

    def test_missing_source(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing.nc")]) == 1
        assert list(tmp_path.iterdir()) == []

    def test_bad_config(self, source: Path, tmp_path: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("park: {}\n", encoding="utf-8")
        assert main(["--config", str(cfg), str(source)]) == 1
        assert not (tmp_path / "job_knet.nc").exists()

    def test_missing_config(self, source: Path, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "none.yaml"), str(source)]) == 1

    def test_custom_suffix(self, source: Path, tmp_path: Path) -> None:
        cfg = tmp_path / "knet.yaml"
        cfg.write_text("output:\n  suffix: _idex\n", encoding="utf-8")
        assert main(["-c", str(cfg), str(source)]) == 0
        assert (tmp_path / "job_idex.nc").exists()

    def test_json_log_file(self, source: Path, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "knet.log"
        assert main(["-v", "--log-file", str(log_file), "--json-logs", str(source)]) == 0
        records = [json.loads(l) for l in log_file.read_text(encoding="utf-8").splitlines()]
        assert any("Parking core A" in r["msg"] for r in records)
        assert all(r.get("source") == "job.nc" for r in records[1:])

    def test_unwritable_output(
        self, source: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fail(*args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr("gcode_knet.gcode.segmenter.open", fail, raising=False)
        assert main([str(source)]) == 1
