"""
Data validation functions for the vaccine panel.

Implements the consistency checks of the processed table:
key uniqueness, daily contiguity after rollout start, no values past the
last reported vaccination figure, zero-filled countries, value range.
"""

import pandas as pd
from typing import Any, Dict, List, Optional
from dataclasses import dataclass
import logging

from ..config import VALIDATION_CONFIG, ValidationConfig

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    check_name: str
    passed: bool
    message: str
    affected_count: int = 0
    affected_fraction: float = 0.0
    details: Optional[Dict[str, Any]] = None


def _fraction(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def check_key_uniqueness(df: pd.DataFrame, config: ValidationConfig = VALIDATION_CONFIG) -> ValidationResult:
    duplicates = int(df.duplicated(subset=config.key_columns).sum())
    return ValidationResult(
        check_name="country_date_uniqueness",
        passed=(duplicates == 0),
        message=f"{duplicates} duplicate (country, date) pairs",
        affected_count=duplicates,
        affected_fraction=_fraction(duplicates, len(df)),
    )


def check_contiguity(df: pd.DataFrame) -> ValidationResult:
    """Countries with vaccination data must have one row per day from rollout start."""
    started = df[df["vac_day"] >= 1].sort_values(["country", "date"])
    gaps = started.groupby("country")["date"].diff().dt.days.gt(1)
    broken = sorted(started.loc[gaps, "country"].unique().tolist())
    n_countries = started["country"].nunique()
    return ValidationResult(
        check_name="date_contiguity",
        passed=not broken,
        message=f"{len(broken)} of {n_countries} countries have missing days after rollout",
        affected_count=len(broken),
        affected_fraction=_fraction(len(broken), n_countries),
        details={"countries": broken} if broken else None,
    )


def check_no_extrapolation(df: pd.DataFrame) -> ValidationResult:
    """No imputed value after a country's last reported vaccination value."""
    started = df[df["vac_day"] >= 1]
    last_known = (
        started[started["vac_known"].notna()]
        .groupby("country")["date"].max()
        .rename("last_known")
    )
    joined = started.join(last_known, on="country")
    beyond = joined["date"] > joined["last_known"]
    violations = int((beyond & joined["vac_imputed"].notna()).sum())
    return ValidationResult(
        check_name="no_extrapolation",
        passed=(violations == 0),
        message=f"{violations} imputed values after the last reported value",
        affected_count=violations,
        affected_fraction=_fraction(violations, int(beyond.sum())),
    )


def check_zero_filled(df: pd.DataFrame) -> ValidationResult:
    """Countries that never started vaccinating carry 0 everywhere."""
    never = df[df["vac_day"] == 0]
    wrong = int((never["vac_imputed"] != 0).sum())
    return ValidationResult(
        check_name="zero_filled_without_data",
        passed=(wrong == 0),
        message=f"{wrong} non-zero values for countries without vaccination data",
        affected_count=wrong,
        affected_fraction=_fraction(wrong, len(never)),
    )


def check_vaccination_range(df: pd.DataFrame, config: ValidationConfig = VALIDATION_CONFIG) -> ValidationResult:
    v = df["vac_imputed"]
    below = int((v < config.min_vaccinated).sum())
    above = int((v > config.max_vaccinated).sum())
    return ValidationResult(
        check_name="vaccination_range",
        passed=(below + above == 0),
        message=f"{below} below {config.min_vaccinated}, {above} above {config.max_vaccinated}",
        affected_count=below + above,
        affected_fraction=_fraction(below + above, int(v.notna().sum())),
    )


def validate_vaccine_panel(
    df: pd.DataFrame,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> List[ValidationResult]:
    """
    Validate the processed panel.

    Returns:
        List of ValidationResult objects
    """
    results = [
        check_key_uniqueness(df, config),
        check_contiguity(df),
        check_no_extrapolation(df),
        check_zero_filled(df),
        check_vaccination_range(df, config),
    ]

    for r in results:
        if not r.passed:
            logger.warning(f"QA check failed: {r.check_name}: {r.message}")
    return results
