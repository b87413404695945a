"""
Demo script: decode the sample documents via the public API.

Usage:
    python scripts/run_decode.py                  # decode the built-in samples
    python scripts/run_decode.py --workers 4      # decode rows on a thread pool
    python scripts/run_decode.py --export outputs # also write Parquet files

Each sample is decoded against its target row type and every row is
logged, failures included. Bad rows never stop the run.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Person:
    id: int
    name: str


SAMPLES = [
    ("people", "1,Nicolas\n2,Jessica\n3,Matt", tuple[int, str]),
    ("people_optional_id", "1,Nicolas\n,Jessica\n3,Matt", tuple[int | None, str]),
    ("numbers", "1,2,3\n4,5,6", list[int]),
    ("people_records", "1,Nicolas\nx,Jessica\n3", Person),
]

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_decode")


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _arg_value(flag: str) -> str | None:
    """Return the value following *flag* on the command line, if any."""
    if flag in sys.argv:
        idx = sys.argv.index(flag)
        if idx + 1 < len(sys.argv):
            return sys.argv[idx + 1]
    return None


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import typed_csv
    from typed_csv.export import export_records

    workers = int(_arg_value("--workers") or 1)
    export_dir = _arg_value("--export")

    registry = typed_csv.get_default_registry().copy()
    registry.register_record(Person)

    for name, text, target in SAMPLES:
        log.info("=" * 70)
        log.info("Decoding '%s' as %s", name, target)
        log.info("=" * 70)

        records = typed_csv.decode(text, target, registry=registry, workers=workers)
        for rec in records:
            if rec.ok:
                log.info("  row %d -> %r", rec.row_index, rec.value)
            else:
                log.warning("  %s", rec.failure)

        if export_dir:
            path = Path(export_dir) / f"{name}.parquet"
            export_records(records, path, output_format="parquet")

    log.info("All samples decoded.")


if __name__ == "__main__":
    main()
