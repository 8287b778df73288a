"""Configuration dataclasses for the analysis pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

import yaml

from morphodist.stats.config import StatsConfig, VizConfig

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_PREFIXES: Tuple[str, ...] = ("Cells_", "Cytoplasm_", "Nuclei_")


def load_yaml(path: Path) -> Any:
    """Load YAML from disk."""
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def dump_yaml(data: Any, path: Path) -> None:
    """Write YAML to disk with stable formatting."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(
            data,
            handle,
            sort_keys=False,
            default_flow_style=False,
            width=120,
        )


@dataclass
class SamplingConfig:
    """Configuration for the stratified image/cell sampler.

    Attributes:
        seed: Seed for the single random generator shared by every draw (default: 42)
        images_per_well: Images drawn from each control (plate, well) group (default: 6)
        frac_cells_per_image: Fraction of cells drawn from each image (default: 0.8)
        control_sample: Sample identifier marking control-vehicle wells (default: DMSO)
    """

    seed: int = 42
    images_per_well: int = 6
    frac_cells_per_image: float = 0.8
    control_sample: str = "DMSO"

    def __post_init__(self):
        """Validate configuration."""
        if int(self.images_per_well) != self.images_per_well or self.images_per_well < 1:
            raise ValueError(f"images_per_well must be an integer >= 1, got {self.images_per_well}")
        self.images_per_well = int(self.images_per_well)

        if self.frac_cells_per_image <= 0 or self.frac_cells_per_image > 1:
            raise ValueError(
                f"frac_cells_per_image must be in (0, 1], got {self.frac_cells_per_image}"
            )


@dataclass
class AnalysisConfig:
    """Configuration for a complete feature-distribution analysis run."""

    # Inputs
    workspace: Path = Path(".")
    batch_id: str = ""
    plate_id: str = ""
    backend_path: Optional[Path] = None  # Overrides the path derived from workspace/batch/plate

    # Output
    outdir: Path = Path(".")
    stats_filename: str = "feature_statistics.csv"
    manifest_filename: str = "run_manifest.csv"

    # Feature namespaces
    feature_prefixes: Tuple[str, ...] = DEFAULT_FEATURE_PREFIXES

    # Stages
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    viz: VizConfig = field(default_factory=VizConfig)

    def __post_init__(self):
        """Convert string paths and nested dicts."""
        self.workspace = Path(self.workspace)
        self.outdir = Path(self.outdir)
        if self.backend_path is not None:
            self.backend_path = Path(self.backend_path)

        if isinstance(self.sampling, dict):
            self.sampling = SamplingConfig(**self.sampling)
        if isinstance(self.stats, dict):
            self.stats = StatsConfig(**self.stats)
        if isinstance(self.viz, dict):
            self.viz = VizConfig(**self.viz)

        self.feature_prefixes = tuple(self.feature_prefixes)
        if not self.feature_prefixes:
            raise ValueError("At least one feature prefix is required")

    @property
    def metadata_dir(self) -> Path:
        return self.workspace / "metadata" / self.batch_id

    @property
    def barcode_platemap_path(self) -> Path:
        """Barcode-to-platemap CSV for the batch."""
        return self.metadata_dir / "barcode_platemap.csv"

    def platemap_path(self, platemap: str) -> Path:
        """Tab-separated well annotation file for one platemap."""
        return self.metadata_dir / "platemap" / f"{platemap}.txt"

    @property
    def resolved_backend_path(self) -> Path:
        """Backing store file (prefers an explicit backend_path)."""
        if self.backend_path is not None:
            return self.backend_path
        if not self.batch_id or not self.plate_id:
            raise ValueError("batch_id and plate_id are required to locate the backend")
        return (
            self.workspace / "backend" / self.batch_id / self.plate_id / f"{self.plate_id}.sqlite"
        )

    @property
    def stats_csv_path(self) -> Path:
        return self.outdir / self.stats_filename

    @property
    def manifest_csv_path(self) -> Path:
        return self.outdir / self.manifest_filename

    @property
    def histogram_dir(self) -> Path:
        return self.outdir / self.viz.histogram_dirname

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dict with Path objects as strings."""
        d = asdict(self)
        for key, value in d.items():
            if isinstance(value, Path):
                d[key] = str(value)
        d["feature_prefixes"] = list(self.feature_prefixes)
        d["viz"]["figsize"] = list(self.viz.figsize)
        return d

    def save(self, path: Path) -> None:
        """Save config to YAML."""
        dump_yaml(self.to_dict(), Path(path))
        logger.debug(f"Saved configuration to {path}")

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> "AnalysisConfig":
        """Load config from YAML; non-None keyword overrides win over file values."""
        payload = load_yaml(Path(path))
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(payload).__name__}")

        for key, value in overrides.items():
            if value is None:
                continue
            if key in ("sampling", "stats", "viz") and isinstance(value, dict):
                section = dict(payload.get(key) or {})
                section.update({k: v for k, v in value.items() if v is not None})
                payload[key] = section
            else:
                payload[key] = value

        return cls(**payload)
