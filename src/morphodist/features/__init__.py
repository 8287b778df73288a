"""Feature table assembly."""

from morphodist.features.schema import FeatureSchema
from morphodist.features.table import build_feature_table

__all__ = ["FeatureSchema", "build_feature_table"]
