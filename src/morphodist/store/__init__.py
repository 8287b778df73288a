"""Backing-store repositories for the analysis pipeline."""

from morphodist.store.interfaces import TableRepository
from morphodist.store.sqlite import SQLiteTableRepository

# Tables written by the pipeline, replaced on every run
METADATA_TABLE = "metadata"
SAMPLED_IMAGES_TABLE = "sampled_images"
SAMPLED_OBJECTS_TABLE = "sampled_objects"

# Tables the backing store must already hold
IMAGE_TABLE = "Image"
MEASUREMENT_TABLES = ("Cells", "Cytoplasm", "Nuclei")

__all__ = [
    "TableRepository",
    "SQLiteTableRepository",
    "METADATA_TABLE",
    "SAMPLED_IMAGES_TABLE",
    "SAMPLED_OBJECTS_TABLE",
    "IMAGE_TABLE",
    "MEASUREMENT_TABLES",
]
