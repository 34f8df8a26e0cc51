"""
Global configuration for the OWID vaccine panel pipeline.

Implements project conventions for:
- File paths and the source URL
- Canonical column names of the source table
- Analysis thresholds (population, dose effect)
- QA bounds
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
FINAL_DIR = DATA_DIR / "final"
DOCS_DIR = PROJECT_ROOT / "docs"

RAW_FILENAME = "owid-covid-data.csv"

# =============================================================================
# DATA SOURCE
# =============================================================================

OWID_URL = "https://covid.ourworldindata.org/data/owid-covid-data.csv"

MANIFEST_FILE = PROJECT_ROOT / "manifest.jsonl"

MANIFEST_FIELDS = [
    "source_name",
    "retrieval_date_utc",
    "download_url",
    "local_path",
    "file_hash_sha256",
    "license_or_terms_note",
]

LICENSE_NOTES = {
    "owid": "CC BY 4.0 - Our World in Data COVID-19 dataset",
}

# =============================================================================
# COLUMN CONVENTIONS
# =============================================================================

# Source name -> canonical name. Every key is required in the raw table.
COLUMN_MAP: Dict[str, str] = {
    "iso_code": "iso_code",
    "location": "country",
    "continent": "continent",
    "date": "date",
    "population": "population",
    "people_vaccinated_per_hundred": "vac_known",
    "total_vaccinations_per_hundred": "doses_per_hundred",
    "new_cases_per_million": "cases",
    "new_deaths_per_million": "deaths",
    "total_cases_per_million": "cases_cum",
    "total_deaths_per_million": "deaths_cum",
    "reproduction_rate": "rt",
    "icu_patients_per_million": "icu",
    "hosp_patients_per_million": "hosp",
    "new_tests_per_thousand": "tests",
    "stringency_index": "stringency_index",
}

# Static per-country controls, carried through unchanged (also required)
DEMOGRAPHIC_COLUMNS: List[str] = [
    "population_density",
    "median_age",
    "aged_65_older",
    "aged_70_older",
    "gdp_per_capita",
    "extreme_poverty",
    "cardiovasc_death_rate",
    "diabetes_prevalence",
    "female_smokers",
    "male_smokers",
    "handwashing_facilities",
    "hospital_beds_per_thousand",
    "life_expectancy",
    "human_development_index",
]

REQUIRED_COLUMNS: List[str] = list(COLUMN_MAP) + DEMOGRAPHIC_COLUMNS

# Canonical columns that must parse as numbers
NUMERIC_COLUMNS: List[str] = [
    "population",
    "vac_known",
    "doses_per_hundred",
    "cases",
    "deaths",
    "cases_cum",
    "deaths_cum",
    "rt",
    "icu",
    "hosp",
    "tests",
    "stringency_index",
] + DEMOGRAPHIC_COLUMNS

# Columns that hold one value per country; copied onto inserted rows
STATIC_COLUMNS: List[str] = [
    "iso_code",
    "continent",
    "population",
] + DEMOGRAPHIC_COLUMNS

# Known erroneous (country, date) observations, removed unconditionally
OUTLIER_OBSERVATIONS: List[Tuple[str, str]] = [
    ("Ecuador", "2020-09-07"),
    ("Kyrgyzstan", "2020-07-18"),
]

# Raw series -> smoothed column
SMOOTHED_SERIES: Dict[str, str] = {
    "cases": "cases_smooth",
    "deaths": "deaths_smooth",
    "rt": "rt_smooth",
}

SMOOTHING_WINDOW = 7

# Columns of the full detail table
FULL_COLUMNS: List[str] = [
    "country",
    "iso_code",
    "continent",
    "date",
    "population",
    "vac_known",
    "vac_imputed",
    "vac_day",
    "above_dose_effect",
    "doses_per_hundred",
    "cases",
    "deaths",
    "rt",
    "cases_smooth",
    "deaths_smooth",
    "rt_smooth",
    "cases_cum",
    "deaths_cum",
    "icu",
    "hosp",
    "tests",
    "stringency_index",
] + DEMOGRAPHIC_COLUMNS

# Full-table name -> dashboard name
DASHBOARD_COLUMNS: Dict[str, str] = {
    "country": "country",
    "date": "date",
    "continent": "continent",
    "population": "population",
    "vac_imputed": "vaccinated_pct",
    "vac_known": "vaccinated_pct_reported",
    "cases_smooth": "cases_per_million_7d",
    "deaths_smooth": "deaths_per_million_7d",
    "cases": "cases_per_million",
    "deaths": "deaths_per_million",
}

# Output file names
FULL_TABLE_FILE = "owid_vaccine_panel.parquet"
DASHBOARD_FILE = "dashboard_panel.csv"
INCLUSION_FILE = "entity_inclusion.csv"
BASIC_INFO_FILE = "basic_info.json"
QA_REPORT_FILE = "qa_report.md"

# =============================================================================
# PIPELINE CONFIGURATION
# =============================================================================


@dataclass
class PipelineConfig:
    """Tunable parameters and I/O locations for one pipeline run."""

    # Analysis thresholds
    population_threshold: int = 100_000
    dose_effect_threshold: float = 20.0

    # Source
    source_url: str = OWID_URL
    download_timeout: int = 300

    # I/O paths
    raw_path: str = str(RAW_DIR / RAW_FILENAME)
    output_dir: str = str(FINAL_DIR)
    docs_dir: str = str(DOCS_DIR)

    @property
    def output_path(self) -> Path:
        p = Path(self.output_dir)
        p.mkdir(parents=True, exist_ok=True)
        return p


def load_config(path: Optional[str | Path] = None) -> PipelineConfig:
    """Load config from JSON, falling back to defaults for missing keys."""
    if path is None:
        logger.info("No config path supplied, using defaults.")
        return PipelineConfig()
    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found, using defaults.", path)
        return PipelineConfig()
    with open(path) as f:
        data = json.load(f)
    known = {f.name for f in PipelineConfig.__dataclass_fields__.values()}
    filtered = {k: v for k, v in data.items() if k in known}
    cfg = PipelineConfig(**filtered)
    logger.info("Loaded config from %s (%d overrides).", path, len(filtered))
    return cfg


def save_config(cfg: PipelineConfig, path: str | Path) -> None:
    """Serialise the current config to JSON for reproducibility."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(asdict(cfg), f, indent=2, default=str)
    logger.info("Saved config to %s.", path)


# =============================================================================
# RUN METADATA
# =============================================================================


@dataclass(frozen=True)
class BasicInfo:
    """Process-wide metadata, fixed for the whole run."""

    retrieved_at: str
    source_column_count: int
    dose_effect_threshold: float = 20.0
    population_threshold: int = 100_000

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


# =============================================================================
# VALIDATION CONFIGURATION
# =============================================================================


@dataclass
class ValidationConfig:
    """Configuration for QA checks on the final panel."""

    # Vaccination share bounds (per hundred)
    min_vaccinated: float = 0.0
    max_vaccinated: float = 130.0

    # Missingness above this fraction is flagged in the QA report
    missingness_warn_fraction: float = 0.5

    key_columns: List[str] = field(default_factory=lambda: ["country", "date"])


VALIDATION_CONFIG = ValidationConfig()
