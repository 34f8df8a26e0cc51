"""
Tests for the QA validators and report.
"""

import numpy as np
import pandas as pd

from vaxprep.qa import compute_imputation_summary, generate_qa_report, validate_vaccine_panel
from vaxprep.qa.validators import (
    check_contiguity,
    check_key_uniqueness,
    check_no_extrapolation,
    check_zero_filled,
)


def _by_name(results):
    return {r.check_name: r for r in results}


class TestValidators:

    def test_processed_panel_passes(self, processed):
        panel, _, _ = processed

        results = validate_vaccine_panel(panel)

        assert all(r.passed for r in results), [r.message for r in results if not r.passed]

    def test_duplicate_keys(self, processed):
        panel = processed[0]
        doubled = pd.concat([panel, panel.iloc[[0]]], ignore_index=True)

        result = check_key_uniqueness(doubled)

        assert not result.passed
        assert result.affected_count == 1

    def test_gap_after_rollout(self, processed):
        panel = processed[0]
        alpha = panel[panel["country"] == "Alpha"]
        gapped = panel.drop(index=alpha.index[3])

        result = check_contiguity(gapped)

        assert not result.passed
        assert result.details == {"countries": ["Alpha"]}

    def test_value_after_last_report(self, processed):
        panel = processed[0].copy()
        last = panel[panel["country"] == "Alpha"].index[-1]
        panel.loc[last, "vac_imputed"] = 6.0

        result = check_no_extrapolation(panel)

        assert not result.passed
        assert result.affected_count == 1

    def test_zero_filled_country_with_value(self, processed):
        panel = processed[0].copy()
        beta = panel[panel["country"] == "Beta"].index
        panel.loc[beta[0], "vac_imputed"] = 3.0

        assert not check_zero_filled(panel).passed

    def test_failures_reported_together(self, processed):
        panel = processed[0].copy()
        panel.loc[panel["country"] == "Beta", "vac_imputed"] = 500.0

        results = _by_name(validate_vaccine_panel(panel))

        assert not results["zero_filled_without_data"].passed
        assert not results["vaccination_range"].passed
        assert results["country_date_uniqueness"].passed


class TestReport:

    def test_imputation_summary(self, processed):
        summary = compute_imputation_summary(processed[0])

        assert summary["rows"] == 16
        assert summary["reported"] == 3
        assert summary["interpolated"] == 3
        assert summary["zero_filled"] == 8
        assert summary["missing_after_last_report"] == 2
        assert summary["countries_interpolated"] == 1
        assert summary["countries_zero_filled"] == 1

    def test_report_sections(self, processed, tmp_path):
        panel = processed[0]
        path = tmp_path / "docs" / "qa_report.md"

        report = generate_qa_report(panel, output_path=path)

        assert path.read_text() == report
        for heading in ("## Panel Summary", "## Vaccination Imputation",
                        "## Missingness", "## Validation Checks"):
            assert heading in report
        assert "✗" not in report

    def test_missingness_before_and_after(self, processed):
        panel = processed[0]
        before = panel.assign(vac_known=np.nan)

        report = generate_qa_report(panel, before=before)

        assert "| vac_known | 100.0% |" in report

    def test_failed_check_shows_affected_rows(self, processed):
        panel = processed[0]
        alpha = panel[panel["country"] == "Alpha"]
        gapped = panel.drop(index=alpha.index[3])

        report = generate_qa_report(gapped)

        row = next(line for line in report.splitlines() if line.startswith("| date_contiguity"))
        assert "✗" in row
        assert "| 1 (100.0%) |" in row
        assert "countries: Alpha" in row
