"""
Pipeline Runner

Orchestrates the complete pipeline.

Stages:
    0. PULL     - Download the OWID source file (optional)
    1. LOAD     - Normalize the raw table
    2. FILTER   - Keep countries above the population threshold
    3. VACCINES - Trim and interpolate vaccination series
    4. SMOOTH   - 7-day centered rolling means
    5. OUTPUT   - Write the panel, dashboard table and metadata

Each stage receives the previous stage's complete output. Fatal errors
(SchemaError, DataIntegrityError, DownloadError) propagate to the caller.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from ..config import PipelineConfig

logger = logging.getLogger(__name__)


def run_full_pipeline(
    config: Optional[PipelineConfig] = None,
    input_path: Optional[Path] = None,
    skip_download: bool = False,
    force_download: bool = False,
    write_qa_report: bool = True,
) -> dict:
    """
    Run the complete pipeline.

    Args:
        config: Pipeline configuration (defaults if None)
        input_path: Local source CSV; implies skip_download
        skip_download: Use the file at config.raw_path without fetching
        force_download: Re-download even if the file exists
        write_qa_report: Also write the QA report to config.docs_dir

    Returns:
        dict: Results from all stages
    """
    from .stage1_load import run_load
    from .stage2_filter import run_filter
    from .stage3_vaccines import run_vaccines
    from .stage4_smooth import run_smooth
    from .stage5_output import run_output

    config = config or PipelineConfig()
    start_time = time.time()

    logger.info("=" * 70)
    logger.info("OWID VACCINE PANEL PIPELINE")
    logger.info("=" * 70)

    results = {
        'source': None,
        'basic_info': None,
        'inclusion': None,
        'panel': None,
        'outputs': None,
        'qa_report': None,
    }

    # Stage 0: Data Pull
    if input_path is not None:
        source = Path(input_path)
        logger.info(f"Using local source file: {source}")
    elif skip_download:
        source = Path(config.raw_path)
        logger.info("Skipping download")
    else:
        from ..download import download_owid_data
        source = download_owid_data(
            force=force_download,
            url=config.source_url,
            target_path=Path(config.raw_path),
            timeout=config.download_timeout,
        )
    results['source'] = source

    observations, info = run_load(source, config)
    results['basic_info'] = info

    working, inclusion = run_filter(observations, info)
    results['inclusion'] = inclusion

    vaccinated = run_vaccines(working, info)
    panel = run_smooth(vaccinated)
    results['panel'] = panel

    results['outputs'] = run_output(panel, inclusion, info, config.output_path)

    if write_qa_report:
        from ..qa import generate_qa_report
        from ..config import QA_REPORT_FILE
        report_path = Path(config.docs_dir) / QA_REPORT_FILE
        generate_qa_report(panel, before=working, output_path=report_path)
        results['qa_report'] = report_path

    elapsed = time.time() - start_time

    logger.info("=" * 70)
    logger.info("PIPELINE COMPLETE")
    logger.info("=" * 70)
    logger.info(f"Total time: {elapsed:.1f} seconds")
    logger.info(f"Panel: {len(panel):,} rows, {panel['country'].nunique()} countries")

    return results


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    run_full_pipeline()
