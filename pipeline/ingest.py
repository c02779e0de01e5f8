"""Fetch the Minneapolis police use-of-force CSV into data/raw."""

from __future__ import annotations

import shutil
from pathlib import Path

import httpx

from shared.config import get_settings

RAW_FILE_NAME = "police_use_of_force.csv"


def _csv_download(url: str, out_path: Path, *, force: bool = False) -> Path:
    """Stream-download a CSV file."""
    if out_path.exists() and not force:
        print(f"  cached: {out_path.name}")
        return out_path

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with httpx.stream("GET", url, follow_redirects=True, timeout=300) as r:
        r.raise_for_status()
        with open(out_path, "wb") as f:
            for chunk in r.iter_bytes(chunk_size=1 << 20):
                f.write(chunk)
    size_mb = out_path.stat().st_size / (1 << 20)
    print(f"  downloaded: {out_path.name} ({size_mb:.1f} MB)")
    return out_path


def _csv_copy(src: Path, out_path: Path, *, force: bool = False) -> Path:
    if out_path.exists() and not force:
        print(f"  cached: {out_path.name}")
        return out_path
    if not src.exists():
        raise FileNotFoundError(f"use-of-force source not found: {src}")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, out_path)
    print(f"  copied: {src} -> {out_path.name}")
    return out_path


def ingest(force: bool = False, source: str | None = None) -> Path:
    """Make the raw CSV available locally. Returns its path."""
    settings = get_settings()
    source = source or settings.source_url
    out = settings.raw_dir / RAW_FILE_NAME

    print("\n  Police use of force:")
    if source.startswith(("http://", "https://")):
        return _csv_download(source, out, force=force)
    return _csv_copy(Path(source), out, force=force)


if __name__ == "__main__":
    import sys

    ingest(force="--force" in sys.argv)
