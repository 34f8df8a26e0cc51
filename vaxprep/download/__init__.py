"""Source download and manifest management."""

from .manifest import ManifestManager, ManifestEntry, compute_file_hash
from .owid_downloader import download_owid_data, retrieval_timestamp

__all__ = [
    "ManifestManager",
    "ManifestEntry",
    "compute_file_hash",
    "download_owid_data",
    "retrieval_timestamp",
]
