import logging
from pathlib import Path

import pytest
import yaml

import cvt_calc


def test_main_prints_modeline(capsys: pytest.CaptureFixture) -> None:
    assert cvt_calc.main(["1920", "1080", "60"]) == 0

    out = capsys.readouterr().out
    assert out == (
        'Modeline "1920x1080_59.96" 173.000 1920 2048 2248 2576 1080 1083 1088 1120 -HSync +VSync\n'
    )


def test_main_reduced_defaults_to_60hz(capsys: pytest.CaptureFixture) -> None:
    assert cvt_calc.main(["1920", "1080", "-r"]) == 0

    assert " 138.500 " in capsys.readouterr().out


def test_main_yaml_output(capsys: pytest.CaptureFixture) -> None:
    assert cvt_calc.main(["--format", "yaml", "--rb2", "4096", "2160", "60"]) == 0

    data = yaml.safe_load(capsys.readouterr().out)
    assert data["modes"][0]["pixel_clock_hz"] == 556_744_000
    assert data["modes"][0]["variant"] == "reduced_v2"


def test_main_rejects_interlaced_rb2(capsys: pytest.CaptureFixture, caplog: pytest.LogCaptureFixture) -> None:
    assert cvt_calc.main(["640", "480", "--rb2", "-i"]) == 2

    assert capsys.readouterr().out == ""
    assert "Interlaced output is not defined" in caplog.text


def test_main_reports_offending_field(caplog: pytest.LogCaptureFixture) -> None:
    assert cvt_calc.main(["0", "480"]) == 2

    assert "field: horizontal_pixels" in caplog.text


def test_main_requires_size_without_config(caplog: pytest.LogCaptureFixture) -> None:
    assert cvt_calc.main([]) == 2

    assert "width and height are required" in caplog.text


def test_main_warns_about_rounded_width(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    assert cvt_calc.main(["1366", "768", "-r"]) == 0

    assert "not a multiple of 8" in caplog.text


def test_main_reads_yaml_config(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    config = tmp_path / "modes.yaml"
    config.write_text(
        yaml.safe_dump(
            {
                "modes": [
                    {"resolution": "1920x1080", "refresh": 60},
                    {"resolution": "1920x1080", "refresh": 60, "variant": "rb"},
                    {"name": "bad", "resolution": "640x480", "variant": "rb2", "interlaced": True},
                ]
            }
        ),
        encoding="utf-8",
    )

    assert cvt_calc.main(["--config", str(config)]) == 2

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert " 173.000 " in lines[0]
    assert " 138.500 " in lines[1]


def test_main_rejects_config_without_modes(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config = tmp_path / "modes.yaml"
    config.write_text("display: 1\n", encoding="utf-8")

    assert cvt_calc.main(["--config", str(config)]) == 2

    assert "expected a top-level 'modes' list" in caplog.text


def test_main_reports_missing_config(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    assert cvt_calc.main(["--config", str(tmp_path / "missing.yaml")]) == 2

    assert "Could not load" in caplog.text


def test_load_requests_parses_entries(tmp_path: Path) -> None:
    config = tmp_path / "modes.yaml"
    config.write_text("modes:\n  - {width: 800, height: 600, refresh: 75}\n", encoding="utf-8")

    requests = cvt_calc.load_requests(str(config))

    assert len(requests) == 1
    assert requests[0].resolution.horizontal_pixels == 800
    assert requests[0].refresh_rate == 75
