"""
Manifest manager for tracking the downloaded source file.

Records:
- source_name
- retrieval_date_utc
- download_url
- local_path
- file_hash_sha256
- license_or_terms_note

The retrieval timestamp of the entry matching the input file becomes
the run's BasicInfo.retrieved_at.
"""

import json
import hashlib
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, asdict

from ..config import MANIFEST_FILE, MANIFEST_FIELDS, LICENSE_NOTES

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass
class ManifestEntry:
    """A single manifest entry for a downloaded file."""
    source_name: str
    retrieval_date_utc: str
    download_url: str
    local_path: str
    file_hash_sha256: str
    license_or_terms_note: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ManifestEntry":
        return cls(**{k: d[k] for k in MANIFEST_FIELDS})


def compute_file_hash(filepath: Path) -> str:
    """Compute SHA256 hash of a file."""
    sha256_hash = hashlib.sha256()
    with open(filepath, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment (default: now) as an ISO-8601 UTC string."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class ManifestManager:
    """
    Manages the manifest.jsonl file for tracking download provenance.

    Each line in the manifest is a JSON object with the fields specified
    in MANIFEST_FIELDS.
    """

    def __init__(self, manifest_path: Optional[Path] = None):
        self.manifest_path = manifest_path or MANIFEST_FILE
        self._entries: List[ManifestEntry] = []
        self._load()

    def _load(self) -> None:
        """Load existing manifest entries from file."""
        if self.manifest_path.exists():
            with open(self.manifest_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        self._entries.append(ManifestEntry.from_dict(json.loads(line)))

    def _save(self) -> None:
        """Save all manifest entries to file."""
        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.manifest_path, "w") as f:
            for entry in self._entries:
                f.write(json.dumps(entry.to_dict()) + "\n")

    def add_entry(
        self,
        source_name: str,
        download_url: str,
        local_path: Path,
        license_key: Optional[str] = None,
    ) -> ManifestEntry:
        """
        Add a manifest entry for a downloaded file.

        An older entry with the same source and URL is replaced.

        Args:
            source_name: Identifier for the data source (e.g., "OWID_COVID")
            download_url: URL the file was downloaded from
            local_path: Local filesystem path where file is stored
            license_key: Key into LICENSE_NOTES dict, or None

        Returns:
            The created ManifestEntry
        """
        entry = ManifestEntry(
            source_name=source_name,
            retrieval_date_utc=utc_timestamp(),
            download_url=download_url,
            local_path=str(local_path.absolute()),
            file_hash_sha256=compute_file_hash(local_path),
            license_or_terms_note=LICENSE_NOTES.get(license_key, "Unknown license"),
        )

        self._entries = [
            e for e in self._entries
            if not (e.source_name == source_name and e.download_url == download_url)
        ]
        self._entries.append(entry)
        self._save()

        return entry

    def find_by_path(self, local_path: Path) -> Optional[ManifestEntry]:
        """Return the most recent entry recorded for a local file."""
        path_str = str(Path(local_path).absolute())
        matches = [e for e in self._entries if e.local_path == path_str]
        return matches[-1] if matches else None

    def verify_hash(self, local_path: Path) -> bool:
        """True if the file's current hash matches its manifest entry."""
        entry = self.find_by_path(local_path)
        if entry is None or not Path(local_path).exists():
            return False
        return compute_file_hash(Path(local_path)) == entry.file_hash_sha256

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ManifestManager({len(self._entries)} entries)"
