#!/usr/bin/env python3
"""
OWID Vaccine Panel Pipeline - Main Runner

Usage:
    python run_pipeline.py --help
    python run_pipeline.py download          # Download owid-covid-data.csv
    python run_pipeline.py all               # Run full pipeline (download + stages 1-5)
    python run_pipeline.py all --input FILE  # Run on a local copy
    python run_pipeline.py qa                # Rebuild the QA report from the last run
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from vaxprep.config import FULL_TABLE_FILE, QA_REPORT_FILE, load_config, save_config
from vaxprep.exceptions import PipelineError, SourceNotFoundError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def stage_download(config, force: bool = False):
    """Download the raw OWID file."""
    logger.info("=== Download Raw Data ===")

    from vaxprep.download import download_owid_data, ManifestManager

    manifest = ManifestManager()
    path = download_owid_data(
        manifest,
        force=force,
        url=config.source_url,
        target_path=Path(config.raw_path),
        timeout=config.download_timeout,
    )
    logger.info(f"  Source: {path}")
    logger.info(f"Manifest contains {len(manifest)} entries")


def stage_qa(config):
    """Regenerate the QA report from the written panel."""
    logger.info("=== QA Report ===")

    from vaxprep.qa import generate_qa_report
    from vaxprep.utils import load_parquet

    panel_path = config.output_path / FULL_TABLE_FILE
    if not panel_path.exists():
        raise SourceNotFoundError(f"No panel at {panel_path}; run the pipeline first")
    panel = load_parquet(panel_path)
    report_path = Path(config.docs_dir) / QA_REPORT_FILE
    generate_qa_report(panel, output_path=report_path)


def run_all(config, input_path=None, skip_download: bool = False, force_download: bool = False):
    """Run the full pipeline."""
    from vaxprep.pipeline import run_full_pipeline

    results = run_full_pipeline(
        config,
        input_path=input_path,
        skip_download=skip_download,
        force_download=force_download,
    )
    save_config(config, config.output_path / "run_config.json")

    for name, path in results['outputs'].items():
        logger.info(f"  {name}: {path}")


def main():
    parser = argparse.ArgumentParser(
        description="OWID Vaccine Panel Pipeline"
    )

    parser.add_argument(
        "stage",
        choices=["download", "all", "qa"],
        help="Pipeline stage to run"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with PipelineConfig overrides"
    )

    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Local owid-covid-data.csv (skips the download)"
    )

    parser.add_argument(
        "--population-threshold",
        type=int,
        default=None,
        help="Minimum population for a country to be kept (default 100000)"
    )

    parser.add_argument(
        "--dose-effect-threshold",
        type=float,
        default=None,
        help="People vaccinated per hundred counted as effective (default 20)"
    )

    parser.add_argument(
        "--skip-download",
        action="store_true",
        help="Use the existing raw file without fetching"
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Force re-download even if the file exists"
    )

    args = parser.parse_args()

    config = load_config(args.config)
    if args.population_threshold is not None:
        config.population_threshold = args.population_threshold
    if args.dose_effect_threshold is not None:
        config.dose_effect_threshold = args.dose_effect_threshold

    try:
        if args.stage == "download":
            stage_download(config, force=args.force)
        elif args.stage == "all":
            run_all(
                config,
                input_path=args.input,
                skip_download=args.skip_download,
                force_download=args.force,
            )
        elif args.stage == "qa":
            stage_qa(config)
    except PipelineError as e:
        logger.error(f"Pipeline aborted: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
