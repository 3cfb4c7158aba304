"""Tests for railpath/cli.py — subcommands and exit codes."""

from __future__ import annotations

import logging

import pytest

from railpath.cli import build_parser, main
from railpath.level import load_level_file


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.getLogger("railpath").handlers.clear()


@pytest.fixture
def level_file(tmp_path, quirky_text):
    p = tmp_path / "level.adofai"
    p.write_text(quirky_text, encoding="utf-8")
    return p


def run(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_simulate_defaults(self):
        args = build_parser().parse_args(["simulate", "x.adofai"])
        assert args.duration == 5000.0
        assert args.dt == pytest.approx(1000 / 60)


class TestInfo:
    def test_summary(self, level_file, capsys):
        assert run(["info", str(level_file)]) == 0
        out = capsys.readouterr().out
        assert "tiles:     6" in out
        assert "midspins:  1" in out
        assert "bpm:       150.0" in out
        assert "pathData" not in out

    def test_path_code(self, level_file, capsys):
        assert run(["info", str(level_file), "--path-code"]) == 0
        assert "pathData:  RUR!LL" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert run(["info", str(tmp_path / "nope.adofai")]) == 1
        assert capsys.readouterr().err.startswith("error:")

    def test_unparseable(self, tmp_path, capsys):
        p = tmp_path / "bad.adofai"
        p.write_text('{"settings": {}}')
        assert run(["info", str(p)]) == 1
        assert "pathData" in capsys.readouterr().err


class TestExport:
    def test_to_stdout(self, level_file, capsys):
        assert run(["export", str(level_file)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("{\n")
        assert '"angleData": [0,90,0,999,180,180]' in out

    def test_preset_to_file(self, level_file, tmp_path, capsys):
        out_path = tmp_path / "fixed.adofai"
        code = run([
            "export", str(level_file), "-o", str(out_path),
            "--preset", "noeffect", "--no-decorations",
        ])
        assert code == 0
        assert "dropped 1 actions" in capsys.readouterr().out
        level = load_level_file(out_path)
        assert level.action_count("Flash") == 0
        assert level.action_count("Twirl") == 1
        assert all(t.decorations == () for t in level.tiles)

    def test_unknown_preset(self, level_file):
        assert run(["export", str(level_file), "--preset", "bogus"]) == 2


class TestSimulate:
    def test_reports_crossings(self, level_file, tmp_path, capsys):
        config = tmp_path / "viewer.yaml"
        config.write_text("orbit_radius: 1.0\n")
        code = run([
            "--config", str(config), "simulate", str(level_file),
            "--duration", "2000", "--dt", "1",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "tile     1  marker 1" in out
        assert "crossings" in out

    def test_single_tile(self, tmp_path, capsys):
        p = tmp_path / "one.adofai"
        p.write_text('{"angleData": [0], "settings": {}}')
        assert run(["simulate", str(p)]) == 1
        assert "two tiles" in capsys.readouterr().err

    def test_bad_config(self, level_file, tmp_path, capsys):
        config = tmp_path / "viewer.yaml"
        config.write_text("marker_count: 1\n")
        assert run(["--config", str(config), "simulate", str(level_file)]) == 1
        assert "marker_count" in capsys.readouterr().err


class TestMesh:
    def test_counts(self, level_file, capsys):
        assert run(["mesh", str(level_file), "2"]) == 0
        out = capsys.readouterr().out
        assert "[midspin]" in out
        assert "vertices:  14" in out
        assert "triangles: 6" in out

    def test_out_of_range(self, level_file, capsys):
        assert run(["mesh", str(level_file), "6"]) == 1
        assert "error:" in capsys.readouterr().err
