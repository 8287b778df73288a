"""Column roles of the assembled feature table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from morphodist.data import columns as C


@dataclass(frozen=True)
class FeatureSchema:
    """Which columns of a feature table are identifiers, metadata or features.

    Resolved once when the feature table is built; later stages read
    ``feature_columns`` instead of matching column names again.
    """

    id_columns: Tuple[str, ...]
    metadata_columns: Tuple[str, ...]
    prefixes: Tuple[str, ...]
    feature_columns: Tuple[str, ...]

    @classmethod
    def resolve(cls, columns: Iterable[str], prefixes: Sequence[str]) -> "FeatureSchema":
        """Classify columns by role.

        Args:
            columns: Column names of the feature table, in order
            prefixes: Namespaces that mark feature columns

        Returns:
            FeatureSchema with columns kept in their input order
        """
        prefixes = tuple(prefixes)
        columns = list(columns)
        id_columns = tuple(c for c in columns if c in C.OBJECT_KEY)
        metadata_columns = tuple(c for c in columns if c.startswith(C.METADATA_PREFIX))
        feature_columns = tuple(
            c for c in columns
            if c not in id_columns and c not in metadata_columns and c.startswith(prefixes)
        )
        return cls(
            id_columns=id_columns,
            metadata_columns=metadata_columns,
            prefixes=prefixes,
            feature_columns=feature_columns,
        )

    @property
    def n_features(self) -> int:
        return len(self.feature_columns)
