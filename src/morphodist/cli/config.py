"""Configuration helper commands."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from morphodist.config import AnalysisConfig, load_yaml

config_app = typer.Typer(
    name="config",
    help="Inspect and validate analysis configuration files.",
    add_completion=False,
)


@config_app.command("show")
def config_show():
    """Print the default configuration as YAML."""
    config = AnalysisConfig(workspace="workspace", batch_id="BATCH_ID", plate_id="PLATE_ID")
    typer.echo(yaml.safe_dump(config.to_dict(), sort_keys=False))


@config_app.command("validate")
def config_validate(config_path: Path = typer.Argument(..., help="Path to analysis YAML")):
    """Validate a configuration file and report where its inputs resolve."""
    try:
        payload = load_yaml(config_path)
        config = AnalysisConfig(**payload)
    except (ValueError, TypeError, OSError, yaml.YAMLError) as e:
        typer.secho(f"validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"barcode platemap: {config.barcode_platemap_path}")
    try:
        typer.echo(f"backend: {config.resolved_backend_path}")
    except ValueError as e:
        typer.secho(f"warning: {e}", fg=typer.colors.YELLOW)
    typer.secho("validation passed", fg=typer.colors.GREEN)
