"""
QA report generation for the vaccine panel.

Produces qa_report.md with row counts, vaccination imputation
bookkeeping, per-column missingness and the validation results.
"""

import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime
import logging

from ..config import VALIDATION_CONFIG
from .validators import validate_vaccine_panel, ValidationResult

logger = logging.getLogger(__name__)


def compute_missingness(df: pd.DataFrame) -> Dict[str, float]:
    """Compute missingness rate for each column."""
    return {
        col: float(df[col].isna().mean()) if len(df) else 0.0
        for col in df.columns
    }


def compute_imputation_summary(df: pd.DataFrame) -> Dict[str, int]:
    """Count reported, interpolated and still-missing vaccination values."""
    known = df["vac_known"].notna()
    imputed = df["vac_imputed"].notna()
    started = df["vac_day"] >= 1
    return {
        "rows": len(df),
        "reported": int(known.sum()),
        "interpolated": int((~known & imputed & started).sum()),
        "zero_filled": int((~started).sum()),
        "missing_after_last_report": int((~imputed).sum()),
        "countries_interpolated": int(df.loc[started, "country"].nunique()),
        "countries_zero_filled": int(df.loc[~started, "country"].nunique()),
    }


def _missingness_table(
    after: Dict[str, float],
    before: Optional[Dict[str, float]] = None,
) -> List[str]:
    lines = ["| Column | Missing (before) | Missing (after) |",
             "|--------|------------------|-----------------|"]
    for col, rate in after.items():
        prior = f"{before[col]:.1%}" if before and col in before else "-"
        flag = " ⚠" if rate > VALIDATION_CONFIG.missingness_warn_fraction else ""
        lines.append(f"| {col} | {prior} | {rate:.1%}{flag} |")
    return lines


def _validation_table(results: List[ValidationResult]) -> List[str]:
    lines = ["| Check | Status | Affected | Details |",
             "|-------|--------|----------|---------|"]
    for r in results:
        status = "✓" if r.passed else "✗"
        detail = r.message
        if r.details:
            detail += "; " + "; ".join(
                f"{k}: {', '.join(map(str, v)) if isinstance(v, list) else v}"
                for k, v in r.details.items()
            )
        lines.append(
            f"| {r.check_name} | {status} | {r.affected_count:,} ({r.affected_fraction:.1%}) | {detail} |"
        )
    return lines


def generate_qa_report(
    panel: pd.DataFrame,
    before: Optional[pd.DataFrame] = None,
    output_path: Optional[Path] = None,
) -> str:
    """
    Generate the QA report.

    Args:
        panel: Processed table (after stage 4)
        before: Table entering stage 3, for before/after missingness
        output_path: Where to write the markdown (not written if None)

    Returns:
        Markdown report string
    """
    sections = [f"""# Data Quality Assurance Report

Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}

## Panel Summary

- **Rows**: {len(panel):,}
- **Countries**: {panel['country'].nunique():,}
- **Date range**: {panel['date'].min()} - {panel['date'].max()}
"""]

    summary = compute_imputation_summary(panel)
    sections.append("## Vaccination Imputation\n")
    sections.append("\n".join(f"- **{k}**: {v:,}" for k, v in summary.items()) + "\n")

    before_rates = compute_missingness(before) if before is not None else None
    sections.append("## Missingness\n")
    sections.append("\n".join(_missingness_table(compute_missingness(panel), before_rates)) + "\n")

    sections.append("## Validation Checks\n")
    sections.append("\n".join(_validation_table(validate_vaccine_panel(panel))) + "\n")

    report = "\n".join(sections)

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report)
        logger.info(f"QA report written to {output_path}")

    return report
