"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import typer

from morphodist import __version__
from morphodist.cli.config import config_app
from morphodist.config import AnalysisConfig
from morphodist.errors import ExportError, MorphodistError
from morphodist.stats import reports
from morphodist.stats.config import StatsConfig

app = typer.Typer(
    name="morphodist",
    help="Distribution profiling of single-cell morphological features.",
    add_completion=False,
)

app.add_typer(config_app, name="config")

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"morphodist {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """morphodist: distribution profiling of single-cell morphological features."""
    pass


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _frame_text(df: pd.DataFrame, max_rows: int = 20) -> str:
    if df.empty:
        return "    (none)"
    text = df.head(max_rows).to_string(index=False, float_format=lambda v: f"{v:.4g}")
    lines = ["    " + line for line in text.splitlines()]
    if len(df) > max_rows:
        lines.append(f"    ... {len(df) - max_rows} more")
    return "\n".join(lines)


def echo_report(table: pd.DataFrame, stats_config: StatsConfig, max_rows: int = 20) -> None:
    """Print class counts, ranked feature tables and degenerate features."""
    counts = reports.summarize_classes(table)
    typer.echo("\n  Features by classification:")
    for _, row in counts.iterrows():
        typer.echo(f"    • {row['classification']}: {row['n_features']}")

    typer.echo(f"\n  Multimodal candidates (adjusted p < {stats_config.report_alpha:g}):")
    typer.echo(_frame_text(reports.top_multimodal(table, stats_config.report_alpha), max_rows))

    typer.echo(f"\n  Skewed features (|skewness| > {stats_config.skew_threshold:g}):")
    typer.echo(_frame_text(reports.top_skewed(table, stats_config.skew_threshold), max_rows))

    degenerate = reports.degenerate_features(table)
    if degenerate:
        typer.secho(
            f"\n  ⚠ {len(degenerate)} degenerate feature(s) not tested: {', '.join(degenerate)}",
            fg=typer.colors.YELLOW,
        )


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration; flags below override its values"
    ),
    workspace: Optional[Path] = typer.Option(None, "--workspace", help="Workspace root directory"),
    batch_id: Optional[str] = typer.Option(None, "--batch", help="Batch identifier"),
    plate_id: Optional[str] = typer.Option(None, "--plate", help="Plate identifier of the backend"),
    backend: Optional[Path] = typer.Option(
        None, "--backend", help="SQLite backend path (overrides workspace/batch/plate)"
    ),
    outdir: Optional[Path] = typer.Option(None, "--outdir", help="Output directory"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed (default 42)"),
    images_per_well: Optional[int] = typer.Option(
        None, "--images-per-well", help="Images sampled per control well (default 6)"
    ),
    frac_cells: Optional[float] = typer.Option(
        None, "--frac-cells", help="Fraction of cells sampled per image (default 0.8)"
    ),
    control_sample: Optional[str] = typer.Option(
        None, "--control-sample", help="Sample identifier of control wells (default DMSO)"
    ),
    alpha: Optional[float] = typer.Option(
        None, "--alpha", help="Adjusted p threshold for multimodality (default 0.05)"
    ),
    skew_threshold: Optional[float] = typer.Option(
        None, "--skew-threshold", help="Skewness threshold (default 2)"
    ),
    report_alpha: Optional[float] = typer.Option(
        None, "--report-alpha", help="Adjusted p threshold for the multimodal table (default 0.25)"
    ),
    bins: Optional[int] = typer.Option(None, "--bins", help="Histogram bins (default 50)"),
    no_histograms: bool = typer.Option(False, "--no-histograms", help="Skip histogram PNGs"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """
    Run the full analysis.

    Loads plate metadata, samples control images and cells, joins the
    measurement tables, tests every feature for multimodality and skewness,
    and writes feature_statistics.csv plus one histogram per feature.

    Examples:
        morphodist run --workspace workspace --batch 2016_04_01 --plate SQ00015116

        morphodist run --config analysis.yaml --seed 7 --no-histograms
    """
    from morphodist.stats.api import run_analysis

    if verbose:
        logging.getLogger("morphodist").setLevel(logging.DEBUG)

    overrides = dict(
        workspace=workspace,
        batch_id=batch_id,
        plate_id=plate_id,
        backend_path=backend,
        outdir=outdir,
        sampling=_drop_none(
            dict(
                seed=seed,
                images_per_well=images_per_well,
                frac_cells_per_image=frac_cells,
                control_sample=control_sample,
            )
        ),
        stats=_drop_none(dict(alpha=alpha, skew_threshold=skew_threshold, report_alpha=report_alpha)),
        viz=_drop_none(dict(bins=bins, enabled=False if no_histograms else None)),
    )

    try:
        if config_path is not None:
            config = AnalysisConfig.from_yaml(config_path, **overrides)
        else:
            config = AnalysisConfig(**_drop_none(overrides))
        backend_path = config.resolved_backend_path
    except (ValueError, TypeError, OSError) as e:
        typer.secho(f"Error: invalid configuration: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Backend: {backend_path}")

    try:
        result = run_analysis(config)
    except ExportError as e:
        typer.secho(f"\n✗ Export failed: {e}", fg=typer.colors.RED, err=True)
        typer.secho(
            "  Statistics were computed; fix the output location and rerun.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1)
    except MorphodistError as e:
        typer.secho(f"\n✗ Analysis failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho("\n✓ Analysis complete!", fg=typer.colors.GREEN)
    typer.echo(f"  Images sampled: {result.sample.n_images}")
    typer.echo(f"  Cells analysed: {len(result.features)}")
    typer.echo(f"  Features: {result.statistics.n_features}")
    echo_report(result.statistics.table, config.stats)
    typer.echo(f"\n  Statistics: {result.outputs['stats_csv']}")
    typer.echo(f"  Run manifest: {result.outputs['manifest_csv']}")
    if result.outputs.get("histogram_dir"):
        typer.echo(
            f"  Histograms: {result.outputs['histogram_dir']} "
            f"({len(result.outputs['histograms'])} files)"
        )


@app.command()
def summarize(
    stats_csv: Path = typer.Argument(..., help="feature_statistics.csv from a previous run"),
    report_alpha: float = typer.Option(0.25, "--report-alpha", help="Adjusted p threshold for the multimodal table"),
    skew_threshold: float = typer.Option(2.0, "--skew-threshold", help="Skewness threshold for the skewed table"),
    max_rows: int = typer.Option(20, "--max-rows", help="Rows shown per table"),
):
    """Print the summary tables of an existing statistics CSV."""
    from morphodist.stats.export import read_feature_statistics

    try:
        stats_config = StatsConfig(report_alpha=report_alpha, skew_threshold=skew_threshold)
        table = read_feature_statistics(stats_csv)
    except (MorphodistError, ValueError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{stats_csv}: {len(table)} feature(s)")
    echo_report(table, stats_config, max_rows=max_rows)


if __name__ == "__main__":
    app()
