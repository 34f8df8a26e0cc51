"""Shared utilities for the vaccine panel pipeline."""

from .io import ensure_dir, save_parquet, load_parquet, save_csv, save_json

__all__ = [
    "ensure_dir",
    "save_parquet",
    "load_parquet",
    "save_csv",
    "save_json",
]
