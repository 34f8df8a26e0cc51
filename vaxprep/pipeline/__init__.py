"""
OWID Vaccine Panel Pipeline - 5-Stage Architecture

The pipeline is organized into 5 sequential stages:
    1. LOAD     - Normalize the raw OWID table
    2. FILTER   - Population-threshold entity filter
    3. VACCINES - Vaccination series trimming and interpolation
    4. SMOOTH   - Centered 7-day rolling means
    5. OUTPUT   - Full table, dashboard table, inclusion tally, basic info

Usage:
    from vaxprep.pipeline import run_full_pipeline
    run_full_pipeline()

Or run individual stages:
    from vaxprep.pipeline import run_load, run_filter, run_vaccines, run_smooth, run_output
    df, info = run_load(path)
    df, inclusion = run_filter(df, info)
    df = run_vaccines(df, info)
    df = run_smooth(df)
    run_output(df, inclusion, info, output_dir)
"""

from .stage1_load import run_load, normalize_observations
from .stage2_filter import run_filter, filter_entities
from .stage3_vaccines import run_vaccines, normalize_vaccine_series, vaccination_records
from .stage4_smooth import run_smooth, smooth_series, centered_rolling_mean
from .stage5_output import run_output, export_outputs
from .runner import run_full_pipeline

__all__ = [
    'run_load',
    'normalize_observations',
    'run_filter',
    'filter_entities',
    'run_vaccines',
    'normalize_vaccine_series',
    'vaccination_records',
    'run_smooth',
    'smooth_series',
    'centered_rolling_mean',
    'run_output',
    'export_outputs',
    'run_full_pipeline',
]
