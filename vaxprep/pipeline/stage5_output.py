"""
Stage 5: Select and Write Output

Projects the processed panel to the analysis columns and writes every
artifact of the run together.

Outputs:
    - owid_vaccine_panel.parquet  full detail table
    - dashboard_panel.csv         reduced table for the dashboard
    - entity_inclusion.csv        population-threshold tally
    - basic_info.json             run metadata
"""

import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from ..config import (
    BASIC_INFO_FILE,
    BasicInfo,
    DASHBOARD_COLUMNS,
    DASHBOARD_FILE,
    FULL_COLUMNS,
    FULL_TABLE_FILE,
    INCLUSION_FILE,
)
from ..exceptions import SchemaError
from ..utils.io import ensure_dir, save_csv, save_json, save_parquet

logger = logging.getLogger(__name__)


def select_analysis_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Project to FULL_COLUMNS, sorted by (country, date)."""
    missing = [c for c in FULL_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(f"Processed table lacks column(s): {', '.join(missing)}", columns=missing)

    return (
        df[FULL_COLUMNS]
        .sort_values(["country", "date"])
        .reset_index(drop=True)
    )


def build_dashboard_table(df: pd.DataFrame) -> pd.DataFrame:
    """Reduced table with external column names."""
    return df[list(DASHBOARD_COLUMNS)].rename(columns=DASHBOARD_COLUMNS)


def export_outputs(
    df: pd.DataFrame,
    inclusion: pd.DataFrame,
    info: BasicInfo,
    output_dir: Path,
) -> Dict[str, Path]:
    """
    Write all artifacts of one run.

    The four files always describe the same run and are written together.

    Args:
        df: Table from stage 4
        inclusion: Tally from stage 2
        info: Run metadata
        output_dir: Destination directory

    Returns:
        dict: artifact name -> written path
    """
    output_dir = ensure_dir(Path(output_dir))

    full = select_analysis_columns(df)
    dashboard = build_dashboard_table(full)

    return {
        "full": save_parquet(full, output_dir / FULL_TABLE_FILE),
        "dashboard": save_csv(dashboard, output_dir / DASHBOARD_FILE),
        "inclusion": save_csv(inclusion, output_dir / INCLUSION_FILE),
        "basic_info": save_json(info.to_dict(), output_dir / BASIC_INFO_FILE),
    }


def run_output(
    df: pd.DataFrame,
    inclusion: pd.DataFrame,
    info: BasicInfo,
    output_dir: Path,
) -> Dict[str, Path]:
    """Run the output stage."""
    logger.info("=" * 60)
    logger.info("STAGE 5: WRITE OUTPUT")
    logger.info("=" * 60)

    paths = export_outputs(df, inclusion, info, output_dir)

    logger.info(f"Stage 5 complete: {len(paths)} artifacts")
    logger.info(f"  Output directory: {output_dir}")
    return paths
