"""Assemble the per-object feature table from the measurement tables."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import pandas as pd

from morphodist.config import DEFAULT_FEATURE_PREFIXES
from morphodist.data import columns as C
from morphodist.errors import JoinMismatchError
from morphodist.features.schema import FeatureSchema
from morphodist.store import MEASUREMENT_TABLES, SAMPLED_OBJECTS_TABLE, TableRepository

logger = logging.getLogger(__name__)


def _namespaced_columns(repo: TableRepository, table: str, prefixes: Sequence[str]) -> List[str]:
    """Columns of a measurement table that belong to a feature namespace."""
    return [c for c in repo.list_columns(table) if c.startswith(tuple(prefixes))]


def build_feature_query(
    sample_columns: Sequence[str], table_columns: Sequence[Tuple[str, Sequence[str]]]
) -> str:
    """Build the SELECT joining sampled objects with each measurement table.

    Args:
        sample_columns: Columns taken from sampled_objects
        table_columns: (table, feature columns) pairs, joined in order

    Returns:
        SQL string with one INNER JOIN per measurement table on the full object key
    """
    select = [f's."{c}"' for c in sample_columns]
    joins = []
    for i, (table, cols) in enumerate(table_columns):
        alias = f"m{i}"
        select.extend(f'{alias}."{c}"' for c in cols)
        on = " AND ".join(f"{alias}.{k} = s.{k}" for k in C.OBJECT_KEY)
        joins.append(f'INNER JOIN "{table}" AS {alias} ON {on}')

    return (
        "SELECT " + ", ".join(select)
        + f' FROM "{SAMPLED_OBJECTS_TABLE}" AS s '
        + " ".join(joins)
    )


def build_feature_table(
    repo: TableRepository,
    prefixes: Sequence[str] = DEFAULT_FEATURE_PREFIXES,
    tables: Sequence[str] = MEASUREMENT_TABLES,
) -> Tuple[pd.DataFrame, FeatureSchema]:
    """
    Join sampled objects with the measurement tables.

    Only objects present in every measurement table survive (inner join on
    TableNumber, ImageNumber, ObjectNumber).

    Parameters
    ----------
    repo : TableRepository
        Open backing store holding sampled_objects and the measurement tables
    prefixes : sequence of str
        Feature namespaces
    tables : sequence of str
        Measurement tables to join

    Returns
    -------
    Tuple[pd.DataFrame, FeatureSchema]
        Feature table (one row per surviving object) and its resolved schema

    Raises
    ------
    InputMissingError
        If sampled_objects or a measurement table is absent
    JoinMismatchError
        If no sampled object survives the join
    """
    repo.require_tables([SAMPLED_OBJECTS_TABLE, *tables])

    sample_columns = repo.list_columns(SAMPLED_OBJECTS_TABLE)
    table_columns = []
    seen = set(sample_columns)
    for table in tables:
        cols = [c for c in _namespaced_columns(repo, table, prefixes) if c not in seen]
        seen.update(cols)
        logger.debug(f"  • {table}: {len(cols)} feature column(s)")
        table_columns.append((table, cols))

    df = repo.query(build_feature_query(sample_columns, table_columns))
    if df.empty:
        raise JoinMismatchError(
            f"No sampled object is present in all of {', '.join(tables)}", stage="features"
        )

    n_sampled = repo.query(f'SELECT COUNT(*) AS n FROM "{SAMPLED_OBJECTS_TABLE}"')["n"].iloc[0]
    if len(df) < n_sampled:
        logger.warning(
            f"{n_sampled - len(df)} of {n_sampled} sampled object(s) missing from at least "
            f"one measurement table, dropped"
        )

    schema = FeatureSchema.resolve(df.columns, prefixes)
    if schema.n_features == 0:
        raise JoinMismatchError(
            f"Measurement tables hold no columns with prefixes {list(prefixes)}", stage="features"
        )

    features = list(schema.feature_columns)
    df[features] = df[features].apply(pd.to_numeric, errors="coerce")

    logger.info(f"Built feature table: {len(df)} object(s) x {schema.n_features} feature(s)")
    return df, schema
