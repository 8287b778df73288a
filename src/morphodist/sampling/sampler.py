"""Stratified sampling of control-vehicle images and cells.

Draw order is fixed: groups are visited in sorted key order, rows inside a
group are sorted by key before drawing, and every draw comes from the one
generator owned by the sampler. Same seed and same input tables therefore give
the same sample regardless of how the store returns rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from morphodist.config import SamplingConfig
from morphodist.data import columns as C
from morphodist.errors import InsufficientDataError, JoinMismatchError
from morphodist.store import (
    IMAGE_TABLE,
    METADATA_TABLE,
    SAMPLED_IMAGES_TABLE,
    SAMPLED_OBJECTS_TABLE,
    TableRepository,
)

logger = logging.getLogger(__name__)

# Cells defines the object population; every object is one segmented cell
OBJECT_SOURCE_TABLE = "Cells"


@dataclass
class SampleResult:
    """Sampled images and objects of one run."""

    images: pd.DataFrame
    objects: pd.DataFrame

    @property
    def n_images(self) -> int:
        return len(self.images)

    @property
    def n_objects(self) -> int:
        return len(self.objects)

    def object_keys(self) -> List[Tuple]:
        """(TableNumber, ImageNumber, ObjectNumber) keys in sampled order."""
        return list(self.objects[list(C.OBJECT_KEY)].itertuples(index=False, name=None))


def sample_images(
    metadata: pd.DataFrame,
    images: pd.DataFrame,
    images_per_well: int,
    rng: np.random.Generator,
    control_sample: str = "DMSO",
) -> pd.DataFrame:
    """Draw a fixed number of images from every control well.

    Args:
        metadata: Metadata table (Metadata_-prefixed columns)
        images: Image table with TableNumber, ImageNumber and plate/well columns
        images_per_well: Images drawn per (plate, well), without replacement
        rng: Shared random generator
        control_sample: Sample identifier of control-vehicle wells

    Returns:
        DataFrame with the image key and all metadata columns of the sampled images

    Raises:
        JoinMismatchError: If no control well has any image
        InsufficientDataError: If a control well holds fewer images than requested
    """
    control = metadata.loc[metadata[C.METADATA_SAMPLE] == control_sample]
    if control.empty:
        raise JoinMismatchError(
            f"No metadata rows with sample '{control_sample}'", stage="control_metadata"
        )

    control = control.assign(
        **{C.METADATA_PLATE: control[C.METADATA_PLATE].astype(str),
           C.METADATA_WELL: control[C.METADATA_WELL].astype(str)}
    )
    image_keys = images[list(C.IMAGE_KEY) + [C.IMAGE_PLATE, C.IMAGE_WELL]].assign(
        **{C.IMAGE_PLATE: images[C.IMAGE_PLATE].astype(str),
           C.IMAGE_WELL: images[C.IMAGE_WELL].astype(str)}
    )

    joined = control.merge(
        image_keys,
        left_on=list(C.WELL_KEY),
        right_on=[C.IMAGE_PLATE, C.IMAGE_WELL],
        how="inner",
    ).drop(columns=[C.IMAGE_PLATE, C.IMAGE_WELL])

    if joined.empty:
        raise JoinMismatchError(
            "No images found for any control well (metadata x Image join is empty)",
            stage="control_images",
        )

    n_wells = control[list(C.WELL_KEY)].drop_duplicates().shape[0]
    n_wells_with_images = joined[list(C.WELL_KEY)].drop_duplicates().shape[0]
    if n_wells_with_images < n_wells:
        logger.warning(
            f"{n_wells - n_wells_with_images} of {n_wells} control well(s) have no images"
        )

    joined = joined.sort_values(list(C.WELL_KEY) + list(C.IMAGE_KEY), kind="mergesort")

    picks = []
    for group, rows in joined.groupby(list(C.WELL_KEY), sort=True):
        if len(rows) < images_per_well:
            raise InsufficientDataError(group, len(rows), images_per_well)
        idx = rng.choice(len(rows), size=images_per_well, replace=False)
        picks.append(rows.iloc[np.sort(idx)])

    sampled = pd.concat(picks, ignore_index=True)
    lead = list(C.IMAGE_KEY)
    sampled = sampled[lead + [c for c in sampled.columns if c not in lead]]

    logger.info(
        f"Sampled {len(sampled)} image(s) from {len(picks)} control well(s) "
        f"({images_per_well} per well)"
    )
    return sampled


def sample_objects(
    objects: pd.DataFrame, frac: float, rng: np.random.Generator
) -> pd.DataFrame:
    """Draw a fraction of the objects of every image.

    Each (TableNumber, ImageNumber) group contributes round(frac * n) objects,
    using Python's round-half-even.

    Args:
        objects: Object keys, optionally with extra per-object columns
        frac: Fraction in (0, 1]
        rng: Shared random generator

    Returns:
        DataFrame of sampled objects, same columns as the input
    """
    if objects.empty:
        return objects.copy()

    objects = objects.sort_values(list(C.OBJECT_KEY), kind="mergesort")

    picks = []
    for _, rows in objects.groupby(list(C.IMAGE_KEY), sort=True):
        size = int(round(frac * len(rows)))
        if size == 0:
            continue
        idx = rng.choice(len(rows), size=size, replace=False)
        picks.append(rows.iloc[np.sort(idx)])

    if not picks:
        return objects.iloc[0:0].reset_index(drop=True)

    sampled = pd.concat(picks, ignore_index=True)
    logger.info(f"Sampled {len(sampled)} of {len(objects)} object(s) (fraction {frac})")
    return sampled


class StratifiedSampler:
    """Two-stage sampler over the backing store.

    Stage one draws images per control well and writes ``sampled_images``;
    stage two draws cells per sampled image and writes ``sampled_objects``.
    """

    def __init__(
        self,
        repo: TableRepository,
        config: Optional[SamplingConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.repo = repo
        self.config = config or SamplingConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

    def sample_images(self) -> pd.DataFrame:
        """Sample images from the metadata and Image tables."""
        self.repo.require_tables([METADATA_TABLE, IMAGE_TABLE])
        metadata = self.repo.read_table(METADATA_TABLE)
        images = self.repo.read_table(
            IMAGE_TABLE, columns=list(C.IMAGE_KEY) + [C.IMAGE_PLATE, C.IMAGE_WELL]
        )
        sampled = sample_images(
            metadata,
            images,
            self.config.images_per_well,
            self.rng,
            self.config.control_sample,
        )
        self.repo.replace_table(SAMPLED_IMAGES_TABLE, sampled)
        return sampled

    def sample_objects(self) -> pd.DataFrame:
        """Sample objects of the images in the sampled_images table."""
        self.repo.require_tables([SAMPLED_IMAGES_TABLE, OBJECT_SOURCE_TABLE])
        objects = self.repo.query(
            f"""
            SELECT o.TableNumber, o.ImageNumber, o.ObjectNumber,
                   s.{C.METADATA_PLATE}, s.{C.METADATA_WELL}
            FROM {OBJECT_SOURCE_TABLE} AS o
            INNER JOIN {SAMPLED_IMAGES_TABLE} AS s
                ON o.TableNumber = s.TableNumber AND o.ImageNumber = s.ImageNumber
            """
        )
        if objects.empty:
            raise JoinMismatchError(
                "Sampled images have no objects in the Cells table", stage="sampled_objects"
            )

        sampled = sample_objects(objects, self.config.frac_cells_per_image, self.rng)
        if sampled.empty:
            raise JoinMismatchError(
                "Object sampling produced no objects; increase frac_cells_per_image",
                stage="sampled_objects",
            )

        self.repo.replace_table(SAMPLED_OBJECTS_TABLE, sampled)
        return sampled

    def run(self) -> SampleResult:
        """Run both stages in order."""
        images = self.sample_images()
        objects = self.sample_objects()
        return SampleResult(images=images, objects=objects)
