"""Plate metadata loading."""

from morphodist.data.metadata import (
    read_barcode_platemap,
    read_platemaps,
    build_metadata,
    load_metadata,
)

__all__ = [
    "read_barcode_platemap",
    "read_platemaps",
    "build_metadata",
    "load_metadata",
]
