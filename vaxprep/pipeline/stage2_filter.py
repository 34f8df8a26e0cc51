"""
Stage 2: Entity Filter

Keeps countries whose population exceeds the threshold.

Countries with no population figure are left out of the inclusion
record, and their rows are dropped from the working table.
"""

import logging
from typing import Tuple

import pandas as pd

from ..config import BasicInfo

logger = logging.getLogger(__name__)


def classify_entities(df: pd.DataFrame, threshold: int) -> pd.DataFrame:
    """
    One row per country with a known population.

    Returns:
        DataFrame with country, continent, population, included
    """
    known = df[df["population"].notna()]
    entities = (
        known.groupby("country", sort=True)
        .agg(continent=("continent", "first"), population=("population", "max"))
        .reset_index()
    )
    entities["included"] = (entities["population"] > threshold).astype(bool)
    return entities


def summarize_inclusion(entities: pd.DataFrame) -> pd.DataFrame:
    """Tally countries by continent and inclusion flag."""
    return (
        entities.groupby(["continent", "included"], observed=True)
        .size()
        .reset_index(name="count")
        .sort_values(["continent", "included"])
        .reset_index(drop=True)
    )


def filter_entities(df: pd.DataFrame, threshold: int) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split countries by population threshold.

    Args:
        df: Observation table from stage 1
        threshold: Countries need population strictly above this

    Returns:
        (working table of included countries, inclusion tally)
    """
    entities = classify_entities(df, threshold)
    included = set(entities.loc[entities["included"], "country"])

    keep = df["country"].isin(included) & df["population"].notna()
    working = df.loc[keep].reset_index(drop=True)

    n_excluded = len(entities) - len(included)
    n_unknown = df["country"].nunique() - len(entities)
    logger.info(
        f"  Population > {threshold:,}: {len(included)} included, "
        f"{n_excluded} excluded, {n_unknown} without population"
    )
    return working, summarize_inclusion(entities)


def run_filter(df: pd.DataFrame, info: BasicInfo) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Run the entity filter stage with the run's population threshold."""
    logger.info("=" * 60)
    logger.info("STAGE 2: ENTITY FILTER")
    logger.info("=" * 60)

    working, inclusion = filter_entities(df, info.population_threshold)

    logger.info(f"Stage 2 complete: {len(working):,} rows retained")
    return working, inclusion
