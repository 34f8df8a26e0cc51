"""
Stage 4: Smoothing

Centered 7-day rolling means of new cases, new deaths and the
reproduction rate, computed per country.

Windows are partial at the ends of a series and skip nulls; a window
without any valid value is null. A country whose smoothed metric is
null everywhere is set to 0 for that metric (no detected activity).
"""

import logging

import pandas as pd

from ..config import SMOOTHED_SERIES, SMOOTHING_WINDOW

logger = logging.getLogger(__name__)


def centered_rolling_mean(values: pd.Series, window: int = SMOOTHING_WINDOW) -> pd.Series:
    """Mean over the value and the (window - 1) / 2 rows on each side."""
    return values.rolling(window, center=True, min_periods=1).mean()


def smooth_series(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add the smoothed columns named in SMOOTHED_SERIES.

    Args:
        df: Table from stage 3, one row per (country, date)

    Returns:
        New DataFrame sorted by (country, date)
    """
    out = df.sort_values(["country", "date"]).reset_index(drop=True)

    for source, target in SMOOTHED_SERIES.items():
        out[target] = out.groupby("country", sort=False)[source].transform(centered_rolling_mean)

        has_any = out[target].notna().groupby(out["country"]).transform("any")
        silent = out.loc[~has_any, "country"].nunique()
        out.loc[~has_any, target] = 0.0
        if silent:
            logger.info(f"  {target}: {silent} countries without data set to 0")

    return out


def run_smooth(df: pd.DataFrame) -> pd.DataFrame:
    """Run the smoothing stage."""
    logger.info("=" * 60)
    logger.info("STAGE 4: SMOOTHING")
    logger.info("=" * 60)

    out = smooth_series(df)

    logger.info(f"Stage 4 complete: {', '.join(SMOOTHED_SERIES.values())}")
    return out
