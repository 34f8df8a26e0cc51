"""
Stage 1: Load and Normalize

Reads the raw OWID table and produces the canonical observation table.

Operations:
    - Check that every required source column is present
    - Rename to canonical field names (unknown columns pass through)
    - Drop aggregate pseudo-entities (World, continents, income groups)
    - Cast date, continent and numeric fields
    - Remove the known erroneous (country, date) observations
    - Enforce (country, date) uniqueness
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pandas as pd

from ..config import (
    BasicInfo,
    COLUMN_MAP,
    NUMERIC_COLUMNS,
    OUTLIER_OBSERVATIONS,
    PipelineConfig,
    REQUIRED_COLUMNS,
)
from ..exceptions import DataIntegrityError, SchemaError, SourceNotFoundError

logger = logging.getLogger(__name__)


def read_raw_table(path: Path) -> pd.DataFrame:
    """Read the delimited source file as-is."""
    path = Path(path)
    if not path.exists():
        raise SourceNotFoundError(f"Source file not found: {path}")

    logger.info(f"Loading {path.name}")
    raw = pd.read_csv(path, low_memory=False)
    logger.info(f"  Loaded {len(raw):,} rows, {len(raw.columns)} columns")
    return raw


def check_required_columns(raw: pd.DataFrame) -> None:
    """Raise SchemaError naming every required column absent from raw."""
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise SchemaError(
            f"Source table is missing {len(missing)} required column(s): "
            f"{', '.join(missing)}",
            columns=missing,
        )


def _cast_columns(df: pd.DataFrame) -> pd.DataFrame:
    try:
        df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    except (ValueError, TypeError) as e:
        raise SchemaError(f"Column 'date' is not an ISO date: {e}", columns=["date"]) from e

    for col in NUMERIC_COLUMNS:
        try:
            df[col] = pd.to_numeric(df[col]).astype(float)
        except (ValueError, TypeError) as e:
            raise SchemaError(f"Column '{col}' is not numeric: {e}", columns=[col]) from e

    df["population"] = df["population"].round().astype("Int64")
    df["continent"] = df["continent"].astype("category")
    df["country"] = df["country"].astype(str)
    return df


def drop_outliers(
    df: pd.DataFrame,
    outliers: Iterable[Tuple[str, str]] = OUTLIER_OBSERVATIONS,
) -> pd.DataFrame:
    """Remove the listed (country, date) observations."""
    mask = pd.Series(False, index=df.index)
    for country, day in outliers:
        mask |= (df["country"] == country) & (df["date"] == pd.Timestamp(day))

    if mask.any():
        logger.info(f"  Removed {int(mask.sum())} flagged outlier observation(s)")
    return df.loc[~mask]


def check_unique_keys(df: pd.DataFrame) -> None:
    """Raise DataIntegrityError if a (country, date) pair repeats."""
    duplicates = int(df.duplicated(subset=["country", "date"]).sum())
    if duplicates:
        raise DataIntegrityError(
            f"{duplicates} duplicate (country, date) pair(s) in source table",
            duplicates=duplicates,
        )


def normalize_observations(
    raw: pd.DataFrame,
    outliers: Iterable[Tuple[str, str]] = OUTLIER_OBSERVATIONS,
) -> pd.DataFrame:
    """
    Produce the canonical observation table from the raw source.

    Args:
        raw: Raw OWID table
        outliers: (country, date) observations to remove

    Returns:
        New DataFrame sorted by (country, date)

    Raises:
        SchemaError: required column missing or not castable
        DataIntegrityError: duplicate (country, date) pairs
    """
    check_required_columns(raw)

    df = raw.rename(columns=COLUMN_MAP)

    # Aggregates (World, continents, income groups, EU) have no continent
    continent = df["continent"].astype("string").str.strip()
    is_entity = continent.notna() & (continent != "")
    n_aggregate = int((~is_entity).sum())
    df = df.loc[is_entity].copy()
    logger.info(f"  Dropped {n_aggregate:,} aggregate rows")

    df = _cast_columns(df)
    df = drop_outliers(df, outliers)
    check_unique_keys(df)

    df = df.sort_values(["country", "date"]).reset_index(drop=True)
    logger.info(f"  {len(df):,} observations for {df['country'].nunique()} countries")
    return df


def build_basic_info(
    raw: pd.DataFrame,
    config: PipelineConfig,
    retrieved_at: str,
) -> BasicInfo:
    """Create the run's immutable metadata record."""
    return BasicInfo(
        retrieved_at=retrieved_at,
        source_column_count=len(raw.columns),
        dose_effect_threshold=config.dose_effect_threshold,
        population_threshold=config.population_threshold,
    )


def run_load(
    path: Path,
    config: Optional[PipelineConfig] = None,
    retrieved_at: Optional[str] = None,
) -> Tuple[pd.DataFrame, BasicInfo]:
    """
    Run the load stage.

    Args:
        path: Source CSV
        config: Pipeline configuration (defaults if None)
        retrieved_at: Retrieval timestamp; looked up from the manifest if None

    Returns:
        (observations, basic_info)
    """
    from ..download import retrieval_timestamp

    logger.info("=" * 60)
    logger.info("STAGE 1: LOAD AND NORMALIZE")
    logger.info("=" * 60)

    config = config or PipelineConfig()
    raw = read_raw_table(path)
    info = build_basic_info(raw, config, retrieved_at or retrieval_timestamp(Path(path)))
    df = normalize_observations(raw)

    logger.info("Stage 1 complete")
    return df, info
