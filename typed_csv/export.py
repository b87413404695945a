"""
Exporter for typed-csv.

Turns decoded records into pandas DataFrames and writes them to disk as
CSV or Parquet.

Value-to-column mapping (``records_to_frame``):
- dataclass instances -> one column per field,
- NamedTuples -> one column per field,
- other tuples and lists -> positional columns ``0, 1, 2, ...`` (or the
  names passed in ``columns``),
- ``Left`` / ``Right`` and scalars -> a single ``value`` column.

Ragged collections (``list[int]`` rows of different lengths) are padded
with missing values by pandas.

Failed records are excluded from ``records_to_frame`` and reported by
``failures_to_frame`` instead.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Literal, Sequence

import pandas as pd

from typed_csv.either import Either
from typed_csv.exceptions import ExportError
from typed_csv.results import DecodedRecord

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = {"csv", "parquet"}

_FAILURE_COLUMNS = ["row_index", "column_index", "expected", "text", "message"]


def _to_row(value: Any) -> dict[Any, Any]:
    """Flatten one decoded value into a column -> value mapping."""
    if dataclasses.is_dataclass(value) and not isinstance(value, Either):
        return dataclasses.asdict(value)
    if isinstance(value, tuple) and hasattr(value, "_asdict"):
        return dict(value._asdict())
    if isinstance(value, (tuple, list)):
        return dict(enumerate(value))
    if isinstance(value, Either):
        return {"value": value.value}
    return {"value": value}


def records_to_frame(
    records: Sequence[DecodedRecord[Any]],
    columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Build a DataFrame from the successful records.

    Args:
        records: Output of ``decode()``.
        columns: Optional names for the resulting columns, in order.
            Must match the number of columns produced.

    Returns:
        DataFrame indexed by the source ``row_index``.
    """
    ok = [r for r in records if r.ok]
    df = pd.DataFrame(
        [_to_row(r.value) for r in ok],
        index=pd.Index([r.row_index for r in ok], name="row_index"),
    )
    if columns is not None:
        if len(columns) != len(df.columns):
            raise ValueError(
                f"columns has {len(columns)} name(s) but the records produce "
                f"{len(df.columns)} column(s)"
            )
        df.columns = list(columns)
    return df


def failures_to_frame(records: Sequence[DecodedRecord[Any]]) -> pd.DataFrame:
    """Build a DataFrame with one row per failed record."""
    rows = [dataclasses.asdict(r.failure) for r in records if r.failure is not None]
    df = pd.DataFrame(rows, columns=_FAILURE_COLUMNS)
    df["column_index"] = df["column_index"].astype("Int64")
    return df


def _write_dataframe(df: pd.DataFrame, path: Path, output_format: str) -> None:
    """Write a single DataFrame to disk in the specified format.

    Raises:
        ExportError: If writing fails for any reason.
    """
    try:
        if output_format == "csv":
            df.to_csv(path, index=True, encoding="utf-8-sig")
        else:  # parquet
            # Parquet needs string column names.
            df = df.rename(columns=str)
            df.to_parquet(path, index=True, engine="pyarrow")
    except Exception as exc:
        raise ExportError(
            f"Failed to write {path.name} as {output_format}: {exc}"
        ) from exc


def export_records(
    records: Sequence[DecodedRecord[Any]],
    path: str | Path,
    output_format: Literal["csv", "parquet"] = "parquet",
    columns: Sequence[str] | None = None,
) -> str:
    """Write the successful records to *path*.

    The parent directory is created if needed. CSV files are written with
    ``utf-8-sig`` encoding (BOM) so non-ASCII text opens correctly in
    Excel.

    Returns:
        The written file path as a string.

    Raises:
        ExportError: If *output_format* is unsupported, or if the write fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(records, columns=columns)
    _write_dataframe(df, path, output_format)
    logger.info(
        "Exported %d record(s) -> %s (%d cols, %d failed row(s) skipped)",
        len(df),
        path.name,
        len(df.columns),
        len(records) - len(df),
    )
    return str(path)
