"""Pipeline orchestrator: ingest -> transform -> validate."""

from __future__ import annotations

import sys
import time

from pipeline.ingest import ingest
from pipeline.transform import transform
from pipeline.validate import validate


def main() -> None:
    force = "--force" in sys.argv
    t0 = time.time()

    print("=" * 60)
    print("Minneapolis Police Use of Force Pipeline")
    print("=" * 60)

    print("\n── Step 1: Ingest ──")
    path = ingest(force=force)
    print(f"  raw file ready: {path}\n")

    print("── Step 2: Transform ──")
    counts = transform()
    print(f"  {len(counts)} tables written")

    print("\n── Step 3: Validate ──")
    issues = validate()

    elapsed = time.time() - t0
    print(f"\nPipeline complete in {elapsed:.1f}s")
    if issues:
        sys.exit(1)


if __name__ == "__main__":
    main()
