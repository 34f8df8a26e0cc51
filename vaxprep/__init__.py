"""
OWID Vaccine Panel - data preparation for vaccination modeling.

Downloads the Our World in Data COVID-19 table, filters it to countries
above a population threshold, gap-fills the vaccination series, smooths
case, death and reproduction-rate series, and writes the analysis panel
plus a reduced dashboard table.

Public API
----------
Core configuration:
    PROJECT_ROOT, RAW_DIR, FINAL_DIR, PipelineConfig, BasicInfo, load_config

Errors:
    PipelineError, SchemaError, DataIntegrityError, DownloadError,
    SourceNotFoundError

Download utilities:
    download_owid_data, ManifestManager

Pipeline:
    run_full_pipeline
"""

__version__ = "0.1"


from .config import (
    PROJECT_ROOT,
    RAW_DIR,
    FINAL_DIR,
    PipelineConfig,
    BasicInfo,
    load_config,
)

from .exceptions import (
    PipelineError,
    SchemaError,
    DataIntegrityError,
    DownloadError,
    SourceNotFoundError,
)

from .download import (
    download_owid_data,
    ManifestManager,
)


def run_full_pipeline(*args, **kwargs):
    """Run the complete pipeline. See vaxprep.pipeline.runner for details."""
    from .pipeline.runner import run_full_pipeline as _run
    return _run(*args, **kwargs)


__all__ = [
    # Version
    "__version__",
    # Configuration
    "PROJECT_ROOT",
    "RAW_DIR",
    "FINAL_DIR",
    "PipelineConfig",
    "BasicInfo",
    "load_config",
    # Errors
    "PipelineError",
    "SchemaError",
    "DataIntegrityError",
    "DownloadError",
    "SourceNotFoundError",
    # Download
    "download_owid_data",
    "ManifestManager",
    # Pipeline
    "run_full_pipeline",
]
