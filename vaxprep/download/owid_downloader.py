"""
Downloader for the Our World in Data COVID-19 dataset.

Fetches owid-covid-data.csv and records it in the manifest so the
retrieval timestamp can be reported with the outputs.
"""

import requests
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging

from ..config import OWID_URL, RAW_DIR, RAW_FILENAME
from ..exceptions import DownloadError
from .manifest import ManifestManager, utc_timestamp

logger = logging.getLogger(__name__)

SOURCE_NAME = "OWID_COVID"


def download_file(url: str, target_path: Path, timeout: int = 300) -> Path:
    """
    Stream a remote file to disk.

    Args:
        url: URL to download from
        target_path: Destination file
        timeout: Request timeout in seconds

    Returns:
        The destination path
    """
    logger.info(f"Downloading from {url}")

    target_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target_path.with_suffix(target_path.suffix + ".part")

    try:
        with requests.get(url, timeout=timeout, stream=True) as response:
            response.raise_for_status()
            with open(tmp_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=1 << 20):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        tmp_path.unlink(missing_ok=True)
        raise DownloadError(f"Could not download {url}: {e}") from e

    tmp_path.replace(target_path)

    logger.info(f"  Saved: {target_path.name} ({target_path.stat().st_size:,} bytes)")
    return target_path


def download_owid_data(
    manifest: Optional[ManifestManager] = None,
    force: bool = False,
    url: str = OWID_URL,
    target_path: Optional[Path] = None,
    timeout: int = 300,
) -> Path:
    """
    Download the OWID COVID-19 dataset.

    Args:
        manifest: ManifestManager to record download (creates new if None)
        force: If True, download even if the file exists
        url: Source URL
        target_path: Destination (defaults to data/raw/owid-covid-data.csv)
        timeout: Request timeout in seconds

    Returns:
        Path to the local CSV
    """
    if manifest is None:
        manifest = ManifestManager()

    target_path = target_path or (RAW_DIR / RAW_FILENAME)

    if target_path.exists() and not force:
        logger.info(f"OWID data already downloaded: {target_path}")
        return target_path

    download_file(url, target_path, timeout=timeout)

    manifest.add_entry(
        source_name=SOURCE_NAME,
        download_url=url,
        local_path=target_path,
        license_key="owid",
    )

    logger.info(f"Downloaded OWID data: {target_path.name}")
    return target_path


def retrieval_timestamp(path: Path, manifest: Optional[ManifestManager] = None) -> str:
    """
    Retrieval time of a local source file.

    Uses the manifest entry when the file was fetched by this pipeline
    and is unchanged since, otherwise the file's modification time.
    """
    path = Path(path)
    manifest = manifest if manifest is not None else ManifestManager()
    entry = manifest.find_by_path(path)
    if entry is not None and manifest.verify_hash(path):
        return entry.retrieval_date_utc

    if entry is not None:
        logger.warning(f"{path.name} changed since download, using file modification time")
    else:
        logger.info(f"No manifest entry for {path.name}, using file modification time")
    mtime = datetime.fromtimestamp(Path(path).stat().st_mtime, tz=timezone.utc)
    return utc_timestamp(mtime)
