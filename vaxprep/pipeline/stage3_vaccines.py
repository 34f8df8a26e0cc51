"""
Stage 3: Vaccine-Series Normalization

Turns the reported vaccination share (vac_known) into a gap-free
vac_imputed series per country.

Operations:
    - Drop every row dated before the first rollout anywhere
    - Countries that never report a positive value: vac_imputed = 0
    - Other countries: trim to their own rollout start, reindex to
      one row per calendar day, then interpolate linearly in time
      between reported values. Nothing is filled after the last
      reported value.

A zero reported before the first positive value counts as "not yet
started", not as a measurement.
"""

import logging
from typing import Optional

import pandas as pd

from ..config import BasicInfo, STATIC_COLUMNS

logger = logging.getLogger(__name__)


def vaccination_records(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-country summary of the reported vaccination series.

    Returns:
        DataFrame with country, first_date (first positive value; NaT if
        none), last_date (last non-null value) and max_value. Countries
        without any reported value are absent.
    """
    reported = df[df["vac_known"].notna()]
    bounds = reported.groupby("country").agg(
        last_date=("date", "max"),
        max_value=("vac_known", "max"),
    )
    first = reported[reported["vac_known"] > 0].groupby("country")["date"].min()

    records = bounds.join(first.rename("first_date"), how="left")
    return (
        records.rename_axis("country")
        .reset_index()[["country", "first_date", "last_date", "max_value"]]
    )


def apply_global_start(df: pd.DataFrame, records: pd.DataFrame) -> pd.DataFrame:
    """Drop rows dated before the earliest rollout start of any country."""
    starts = records["first_date"].dropna()
    if starts.empty:
        logger.warning("No country reports a positive vaccination value; no rows dropped")
        return df.reset_index(drop=True)

    global_start = starts.min()
    kept = df[df["date"] >= global_start].reset_index(drop=True)
    logger.info(
        f"  Analysis window starts {global_start.date()}: "
        f"dropped {len(df) - len(kept):,} earlier rows"
    )
    return kept


def zero_fill_series(series_df: pd.DataFrame) -> pd.DataFrame:
    """Country without vaccination data: imputed value 0 on every row."""
    out = series_df.copy()
    out["vac_imputed"] = 0.0
    out["vac_day"] = 0
    return out


def interpolate_series(series_df: pd.DataFrame, start: pd.Timestamp) -> pd.DataFrame:
    """
    Trim one country's rows to its rollout start and fill the gaps.

    The result has one row per day from start to the country's last date.
    Inserted rows carry the country's static fields; time-varying fields
    stay null. vac_imputed is interpolated only between two reported
    values, so a single reported point fills nothing and the tail after
    the last reported value stays null.
    """
    country = series_df["country"].iloc[0]
    trimmed = series_df[series_df["date"] >= start]

    days = pd.date_range(start, trimmed["date"].max(), freq="D", name="date")
    out = trimmed.set_index("date").reindex(days)

    out["country"] = country
    static = [c for c in STATIC_COLUMNS if c in out.columns]
    out[static] = out[static].ffill()

    out["vac_imputed"] = out["vac_known"].interpolate(method="time", limit_area="inside")
    out["vac_day"] = (out.index - start).days + 1
    return out.reset_index()


def add_dose_effect_flag(df: pd.DataFrame, threshold: float) -> pd.DataFrame:
    """above_dose_effect: vac_imputed >= threshold, null where vac_imputed is."""
    out = df.copy()
    flag = (out["vac_imputed"] >= threshold).astype("boolean")
    out["above_dose_effect"] = flag.where(out["vac_imputed"].notna())
    return out


def normalize_vaccine_series(
    df: pd.DataFrame,
    info: Optional[BasicInfo] = None,
    dose_effect_threshold: float = 20.0,
) -> pd.DataFrame:
    """
    Normalize every country's vaccination series.

    Args:
        df: Working table from stage 2
        info: Run metadata; its dose_effect_threshold wins when given
        dose_effect_threshold: Threshold used when info is None

    Returns:
        New DataFrame with vac_imputed, vac_day and above_dose_effect
    """
    if info is not None:
        dose_effect_threshold = info.dose_effect_threshold

    records = vaccination_records(df)
    windowed = apply_global_start(df, records)
    starts = records.set_index("country")["first_date"].dropna()

    pieces = []
    n_zero = 0
    n_inserted = 0
    for country, series_df in windowed.groupby("country", sort=True):
        start = starts.get(country)
        if start is None:
            pieces.append(zero_fill_series(series_df))
            n_zero += 1
        else:
            filled = interpolate_series(series_df, start)
            n_inserted += len(filled) - int((series_df["date"] >= start).sum())
            pieces.append(filled)

    if pieces:
        out = pd.concat(pieces, ignore_index=True)
    else:
        out = windowed.assign(vac_imputed=pd.Series(dtype=float), vac_day=pd.Series(dtype=int))

    out = add_dose_effect_flag(out, dose_effect_threshold)
    out = out.sort_values(["country", "date"]).reset_index(drop=True)

    logger.info(
        f"  {len(starts)} countries interpolated ({n_inserted:,} rows inserted), "
        f"{n_zero} zero-filled"
    )
    return out


def run_vaccines(df: pd.DataFrame, info: BasicInfo) -> pd.DataFrame:
    """Run the vaccine-series stage."""
    logger.info("=" * 60)
    logger.info("STAGE 3: VACCINE-SERIES NORMALIZATION")
    logger.info("=" * 60)

    out = normalize_vaccine_series(df, info)

    logger.info(f"Stage 3 complete: {len(out):,} rows")
    return out
