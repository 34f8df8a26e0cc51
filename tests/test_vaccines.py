"""
Tests for Stage 3: vaccination series trimming and interpolation.
"""

import numpy as np
import pandas as pd
import pytest

from vaxprep.config import BasicInfo
from vaxprep.pipeline.stage3_vaccines import (
    apply_global_start,
    normalize_vaccine_series,
    vaccination_records,
)

nan = np.nan


def _country(df: pd.DataFrame, name: str) -> pd.DataFrame:
    return df[df["country"] == name].reset_index(drop=True)


class TestInterpolation:

    def test_linear_blend_between_reported_values(self, make_series):
        df = make_series("B", [nan, nan, 10, nan, nan, 20, nan])

        out = normalize_vaccine_series(df)

        assert out["date"].tolist() == list(pd.date_range("2021-01-03", "2021-01-07"))
        values = out["vac_imputed"].tolist()
        assert values[0] == 10
        assert values[1] == pytest.approx(13.333, abs=1e-3)
        assert values[2] == pytest.approx(16.667, abs=1e-3)
        assert values[3] == 20
        assert np.isnan(values[4])

    def test_missing_days_are_inserted(self, make_series):
        dates = pd.to_datetime(["2021-01-01", "2021-01-04", "2021-01-07", "2021-01-09"])
        df = make_series("B", [5, nan, 11, nan], dates=dates, cases=[1.0, 2.0, 3.0, 4.0])

        out = normalize_vaccine_series(df)

        assert out["date"].tolist() == list(pd.date_range("2021-01-01", "2021-01-09"))
        assert out["vac_imputed"].tolist()[:7] == pytest.approx([5, 6, 7, 8, 9, 10, 11])
        assert out["vac_imputed"].iloc[7:].isna().all()

    def test_inserted_rows_carry_static_fields(self, make_series):
        dates = pd.to_datetime(["2021-01-01", "2021-01-03"])
        df = make_series("B", [1, 3], dates=dates, continent="Asia", population=42_000_000,
                         cases=[7.0, 8.0])

        out = normalize_vaccine_series(df)
        inserted = out.iloc[1]

        assert inserted["country"] == "B"
        assert inserted["continent"] == "Asia"
        assert inserted["population"] == 42_000_000
        assert inserted["median_age"] == 40.0
        assert np.isnan(inserted["cases"])
        assert np.isnan(inserted["vac_known"])
        assert inserted["vac_imputed"] == 2

    def test_no_value_after_last_report(self, make_series):
        df = make_series("B", [1, nan, 4, nan, nan, nan])

        out = normalize_vaccine_series(df)

        last_known = out.loc[out["vac_known"].notna(), "date"].max()
        assert out.loc[out["date"] > last_known, "vac_imputed"].isna().all()
        assert len(out) == 6

    def test_single_reported_point_fills_nothing(self, make_series):
        df = make_series("B", [nan, 7, nan, nan])

        out = normalize_vaccine_series(df)

        assert out["vac_imputed"].iloc[0] == 7
        assert out["vac_imputed"].iloc[1:].isna().all()

    def test_vac_known_keeps_reported_values(self, make_series):
        df = make_series("B", [2, nan, 6])

        out = normalize_vaccine_series(df)

        assert out["vac_known"].isna().tolist() == [False, True, False]
        assert out["vac_imputed"].tolist() == [2, 4, 6]


class TestRolloutStart:

    def test_leading_zeros_are_trimmed(self, make_series):
        df = make_series("B", [0, 0, nan, 4, 6])

        out = normalize_vaccine_series(df)

        assert out["date"].min() == pd.Timestamp("2021-01-04")
        assert out["vac_day"].tolist() == [1, 2]

    def test_global_window_starts_at_first_rollout(self, make_series):
        df = pd.concat([
            make_series("A", [nan, nan, 1, 2, 3]),
            make_series("C", [nan] * 5, cases=[1.0] * 5),
        ], ignore_index=True)

        out = normalize_vaccine_series(df)

        assert out["date"].min() == pd.Timestamp("2021-01-03")
        assert len(_country(out, "C")) == 3

    def test_each_country_starts_at_its_own_rollout(self, make_series):
        df = pd.concat([
            make_series("A", [1, 2, 3, 4, 5]),
            make_series("B", [nan, nan, nan, 1, 2]),
        ], ignore_index=True)

        out = normalize_vaccine_series(df)

        assert _country(out, "A")["date"].min() == pd.Timestamp("2021-01-01")
        assert _country(out, "B")["date"].min() == pd.Timestamp("2021-01-04")

    def test_no_rollout_anywhere_keeps_all_rows(self, make_series):
        df = make_series("C", [nan] * 4)

        out = normalize_vaccine_series(df)

        assert len(out) == 4

    def test_apply_global_start(self, make_series):
        df = pd.concat([
            make_series("A", [nan, 5, 6]),
            make_series("B", [nan, nan, nan]),
        ], ignore_index=True)

        out = apply_global_start(df, vaccination_records(df))

        assert len(out) == 4
        assert out["date"].min() == pd.Timestamp("2021-01-02")


class TestZeroFill:

    def test_country_without_data_is_zero(self, make_series):
        df = pd.concat([
            make_series("A", [1, 2, 3]),
            make_series("C", [nan, nan, nan]),
        ], ignore_index=True)

        out = _country(normalize_vaccine_series(df), "C")

        assert (out["vac_imputed"] == 0).all()
        assert out["vac_known"].isna().all()
        assert (out["vac_day"] == 0).all()

    def test_country_with_only_zeros_is_zero_filled(self, make_series):
        df = pd.concat([
            make_series("A", [1, 2, 3]),
            make_series("Z", [0, nan, 0]),
        ], ignore_index=True)

        out = _country(normalize_vaccine_series(df), "Z")

        assert len(out) == 3
        assert (out["vac_imputed"] == 0).all()

    def test_zero_filled_series_keeps_its_dates(self, make_series):
        dates = pd.to_datetime(["2021-01-01", "2021-01-05"])
        df = make_series("C", [nan, nan], dates=dates)

        out = normalize_vaccine_series(df)

        assert len(out) == 2


class TestDerivedFields:

    def test_dose_effect_flag(self, make_series):
        df = make_series("A", [10, nan, 30, nan])
        info = BasicInfo(retrieved_at="x", source_column_count=1, dose_effect_threshold=20.0)

        out = normalize_vaccine_series(df, info)

        flags = out["above_dose_effect"]
        assert flags.iloc[:3].tolist() == [False, True, True]
        assert pd.isna(flags.iloc[3])

    def test_threshold_from_info_overrides_argument(self, make_series):
        df = make_series("A", [10, 15])
        info = BasicInfo(retrieved_at="x", source_column_count=1, dose_effect_threshold=12.0)

        out = normalize_vaccine_series(df, info, dose_effect_threshold=99.0)

        assert out["above_dose_effect"].tolist() == [False, True]

    def test_vac_day_counts_from_one(self, make_series):
        out = normalize_vaccine_series(make_series("A", [nan, 1, nan, 2]))

        assert out["vac_day"].tolist() == [1, 2, 3]

    def test_input_not_mutated(self, make_series):
        df = make_series("A", [nan, 1, nan, 2])
        before = df.copy()

        normalize_vaccine_series(df)

        pd.testing.assert_frame_equal(df, before)


class TestVaccinationRecords:

    def test_bounds(self, make_series):
        df = pd.concat([
            make_series("A", [0, 2, nan, 9, 4, nan]),
            make_series("C", [nan, nan]),
        ], ignore_index=True)

        records = vaccination_records(df).set_index("country")

        assert list(records.index) == ["A"]
        assert records.loc["A", "first_date"] == pd.Timestamp("2021-01-02")
        assert records.loc["A", "last_date"] == pd.Timestamp("2021-01-05")
        assert records.loc["A", "max_value"] == 9

    def test_zero_only_country_has_no_start(self, make_series):
        records = vaccination_records(make_series("Z", [0, 0])).set_index("country")

        assert pd.isna(records.loc["Z", "first_date"])
