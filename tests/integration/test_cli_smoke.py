from __future__ import annotations

from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from morphodist.cli.main import app

from conftest import BATCH_ID, PLATE_ID


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "morphodist" in result.stdout


def _run_args(workspace: Path, outdir: Path) -> list:
    return [
        "run",
        "--workspace",
        str(workspace),
        "--batch",
        BATCH_ID,
        "--plate",
        PLATE_ID,
        "--outdir",
        str(outdir),
    ]


def test_cli_run_smoke(workspace: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    outdir = tmp_path / "out"

    result = runner.invoke(app, _run_args(workspace, outdir))

    assert result.exit_code == 0, result.stdout
    assert "Analysis complete" in result.stdout
    assert "multimodal" in result.stdout
    assert "Cytoplasm_AreaShape_Zernike_0_0" in result.stdout  # reported as degenerate

    stats = pd.read_csv(outdir / "feature_statistics.csv")
    assert list(stats.columns) == ["feature", "p_value", "p_adj", "skewness", "is_multimodal", "is_skewed"]
    assert len(list((outdir / "feature_histograms").glob("*.png"))) == len(stats)


def test_cli_run_insufficient_images_exits_nonzero(workspace: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app, _run_args(workspace, tmp_path / "out") + ["--images-per-well", "20", "--no-histograms"]
    )

    assert result.exit_code == 1
    assert not (tmp_path / "out" / "feature_statistics.csv").exists()


def test_cli_run_invalid_fraction(workspace: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, _run_args(workspace, tmp_path / "out") + ["--frac-cells", "1.5"])

    assert result.exit_code == 1


def test_cli_run_from_yaml_with_override(workspace: Path, tmp_path: Path) -> None:
    from morphodist.config import AnalysisConfig

    config_path = tmp_path / "analysis.yaml"
    AnalysisConfig(
        workspace=workspace, batch_id=BATCH_ID, plate_id=PLATE_ID, outdir=tmp_path / "yaml_out"
    ).save(config_path)

    runner = CliRunner()
    result = runner.invoke(app, ["run", "--config", str(config_path), "--no-histograms", "--seed", "7"])

    assert result.exit_code == 0, result.stdout
    assert (tmp_path / "yaml_out" / "feature_statistics.csv").exists()
    assert not (tmp_path / "yaml_out" / "feature_histograms").exists()


def test_cli_summarize(workspace: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    outdir = tmp_path / "out"
    assert runner.invoke(app, _run_args(workspace, outdir) + ["--no-histograms"]).exit_code == 0

    result = runner.invoke(app, ["summarize", str(outdir / "feature_statistics.csv")])

    assert result.exit_code == 0, result.stdout
    assert "Features by classification" in result.stdout
    assert "degenerate: 1" in result.stdout


def test_cli_config_show() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "images_per_well: 6" in result.stdout
    assert "frac_cells_per_image: 0.8" in result.stdout


def test_cli_config_validate(tmp_path: Path) -> None:
    from morphodist.config import AnalysisConfig

    good = tmp_path / "good.yaml"
    AnalysisConfig(workspace=tmp_path, batch_id="b", plate_id="p").save(good)
    bad = tmp_path / "bad.yaml"
    bad.write_text("sampling:\n  images_per_well: 0\n")

    runner = CliRunner()
    ok = runner.invoke(app, ["config", "validate", str(good)])
    assert ok.exit_code == 0
    assert "validation passed" in ok.stdout

    failed = runner.invoke(app, ["config", "validate", str(bad)])
    assert failed.exit_code == 1


def test_cli_run_without_plate_reports_config_error(workspace: Path, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app, ["run", "--workspace", str(workspace), "--batch", BATCH_ID, "--outdir", str(tmp_path / "out")]
    )

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert not (tmp_path / "out").exists()
