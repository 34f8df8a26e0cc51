"""Quality assurance utilities."""

from .validators import validate_vaccine_panel, ValidationResult
from .reporters import generate_qa_report, compute_missingness, compute_imputation_summary

__all__ = [
    "validate_vaccine_panel",
    "ValidationResult",
    "generate_qa_report",
    "compute_missingness",
    "compute_imputation_summary",
]
