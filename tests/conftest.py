"""
Shared fixtures for the vaccine panel tests.

Builders return synthetic frames shaped like the raw OWID file
(``make_raw``) or like the table entering stage 3 (``make_series``).
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Ensure the package is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from vaxprep.config import DEMOGRAPHIC_COLUMNS, REQUIRED_COLUMNS


def _raw_rows(
    country: str,
    start: str = "2021-01-01",
    vaccinated=None,
    n: int | None = None,
    continent: str | None = "Europe",
    population: float | None = 1_000_000,
    iso_code: str | None = None,
    **series,
) -> pd.DataFrame:
    n = n if n is not None else len(vaccinated)
    frame = pd.DataFrame({c: np.nan for c in REQUIRED_COLUMNS}, index=range(n))
    frame["iso_code"] = iso_code or country[:3].upper()
    frame["location"] = country
    frame["continent"] = continent
    frame["date"] = pd.date_range(start, periods=n, freq="D").strftime("%Y-%m-%d")
    frame["population"] = population
    if vaccinated is not None:
        frame["people_vaccinated_per_hundred"] = vaccinated
    for col in DEMOGRAPHIC_COLUMNS:
        frame[col] = 1.0
    for col, values in series.items():
        frame[col] = values
    return frame


def _series_rows(
    country: str,
    vac_known,
    start: str = "2021-01-01",
    dates=None,
    continent: str = "Europe",
    population: int = 1_000_000,
    **series,
) -> pd.DataFrame:
    if dates is None:
        dates = pd.date_range(start, periods=len(vac_known), freq="D")
    n = len(dates)
    frame = pd.DataFrame({
        "country": country,
        "iso_code": country[:3].upper(),
        "continent": continent,
        "date": pd.to_datetime(dates),
        "population": pd.array([population] * n, dtype="Int64"),
        "vac_known": np.asarray(vac_known, dtype=float),
        "cases": np.full(n, np.nan),
        "deaths": np.full(n, np.nan),
        "rt": np.full(n, np.nan),
        "median_age": 40.0,
    })
    for col, values in series.items():
        frame[col] = values
    return frame


@pytest.fixture
def make_raw():
    """Factory for raw OWID-shaped rows of one location."""
    return _raw_rows


@pytest.fixture
def make_series():
    """Factory for stage-3 input rows of one country."""
    return _series_rows


@pytest.fixture
def raw_table():
    """Three included countries, one too small, one aggregate."""
    nan = np.nan
    return pd.concat([
        _raw_rows(
            "Alpha", vaccinated=[nan, nan, 1, nan, 3, nan, nan, 6, nan, nan],
            continent="Europe", population=5_000_000,
            new_cases_per_million=[10.0] * 10,
            new_deaths_per_million=[1.0] * 10,
        ),
        _raw_rows(
            "Beta", n=10, continent="Africa", population=2_000_000,
            new_cases_per_million=[5.0] * 10,
        ),
        _raw_rows(
            "Tiny", vaccinated=[nan, 50, 60, nan, nan, nan, nan, nan, nan, nan],
            continent="Oceania", population=800,
        ),
        _raw_rows("World", n=10, continent=None, population=7_800_000_000, iso_code="OWID_WRL"),
    ], ignore_index=True)


@pytest.fixture
def raw_csv(tmp_path, raw_table):
    """raw_table written as owid-covid-data.csv."""
    path = tmp_path / "owid-covid-data.csv"
    raw_table.to_csv(path, index=False)
    return path


@pytest.fixture
def processed(raw_table):
    """raw_table run through stages 1-4: (panel, inclusion, info)."""
    from vaxprep.config import PipelineConfig
    from vaxprep.pipeline.stage1_load import build_basic_info, normalize_observations
    from vaxprep.pipeline.stage2_filter import run_filter
    from vaxprep.pipeline.stage3_vaccines import run_vaccines
    from vaxprep.pipeline.stage4_smooth import run_smooth

    info = build_basic_info(raw_table, PipelineConfig(), "2021-06-01T00:00:00Z")
    working, inclusion = run_filter(normalize_observations(raw_table), info)
    panel = run_smooth(run_vaccines(working, info))
    return panel, inclusion, info
