"""
Document-level decoding for typed-csv.

Splits raw text into rows and cells and applies one row decoder to each
row. The split is a naive literal split -- first on the row separator,
then on the cell separator. Quotes and escapes are NOT interpreted, so
``'"a,b",c'`` is three cells: ``'"a'``, ``'b"'`` and ``'c'``. Inputs
that need real CSV quoting must be pre-processed by the caller.

Row layout rules:
- ``""`` contains no rows.
- A single trailing row separator does not produce an extra row.
- A zero-length line is an empty row (``[]``), or is skipped when
  ``skip_blank_lines`` is set. Skipped lines still count towards the
  row index, so reported indices always match line positions.

Failure policy:
- The target's row decoder is resolved before any row is touched, so a
  ``CompositionError`` is raised even for an empty document.
- A failing row becomes a ``DecodedRecord`` with a ``DecodeFailure``;
  every other row is still decoded.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterator, Sequence

from typed_csv.config import DecodeConfig, DialectConfig
from typed_csv.decoders.base import RowDecoder
from typed_csv.exceptions import DecodeError, DocumentDecodeError
from typed_csv.registry import DecoderRegistry, get_default_registry
from typed_csv.results import DecodedRecord, DecodeFailure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------

def _iter_rows(text: str, dialect: DialectConfig) -> Iterator[tuple[int, list[str]]]:
    """Yield ``(row_index, cells)`` pairs following the row layout rules."""
    if text == "":
        return
    lines = text.split(dialect.row_separator)
    if lines[-1] == "":
        lines.pop()
    for index, line in enumerate(lines):
        if line == "":
            if dialect.skip_blank_lines:
                continue
            yield index, []
        else:
            yield index, line.split(dialect.cell_separator)


def split_document(text: str, dialect: DialectConfig | None = None) -> list[list[str]]:
    """Split raw text into rows of raw cell strings.

    Args:
        text: The whole document.
        dialect: Separators to split on. Defaults to ``\\n`` and ``,``.

    Returns:
        One list of cells per row, in input order.
    """
    return [cells for _, cells in _iter_rows(text, dialect or DialectConfig())]


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def resolve_target(
    target: Any,
    registry: DecoderRegistry | None = None,
    config: DecodeConfig | None = None,
) -> RowDecoder[Any]:
    """Turn a target type (or a ready-made row decoder) into a row decoder.

    An explicit *registry* takes precedence: ``config.booleans`` only
    selects the default registry when *registry* is omitted.

    Raises:
        CompositionError: If the registry cannot build a row decoder.
    """
    if isinstance(target, RowDecoder):
        return target
    if registry is None:
        registry = get_default_registry(config)
    return registry.resolve_row(target)


def decode_row(decoder: RowDecoder[Any], row_index: int, cells: Sequence[str]) -> DecodedRecord[Any]:
    """Decode a single row, converting decode errors into a failed record."""
    try:
        value = decoder.decode(cells)
    except DecodeError as exc:
        return DecodedRecord(
            row_index=row_index,
            failure=DecodeFailure.from_error(row_index, exc),
            raw=tuple(cells),
        )
    return DecodedRecord(row_index=row_index, value=value, raw=tuple(cells))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def iter_decode(
    text: str,
    target: Any,
    *,
    registry: DecoderRegistry | None = None,
    config: DecodeConfig | None = None,
) -> Iterator[DecodedRecord[Any]]:
    """Lazily decode a document, one ``DecodedRecord`` per row.

    The row decoder is resolved immediately (not on first iteration), so
    composition errors surface at call time.
    """
    config = config or DecodeConfig()
    decoder = resolve_target(target, registry, config)
    rows = _iter_rows(text, config.dialect)
    return (decode_row(decoder, index, cells) for index, cells in rows)


def decode(
    text: str,
    target: Any,
    *,
    registry: DecoderRegistry | None = None,
    config: DecodeConfig | None = None,
    workers: int | None = None,
) -> list[DecodedRecord[Any]]:
    """Decode every row of a document.

    Args:
        text: Raw document text.
        target: The row type (``tuple[int, str]``, ``list[int]``, a
            registered record class, ...) or a ``RowDecoder``.
        registry: Where to resolve *target*. Defaults to the shared
            default registry for ``config.booleans``. When given, it is
            used as is and ``config.booleans`` is ignored.
        config: Dialect, boolean vocabulary and execution settings.
        workers: Overrides ``config.execution.workers``. With more than
            one worker rows are decoded on a thread pool; the output
            order still equals the input order.

    Returns:
        One ``DecodedRecord`` per row, in input order.

    Raises:
        CompositionError: If no unique row decoder exists for *target*.
    """
    config = config or DecodeConfig()
    decoder = resolve_target(target, registry, config)
    rows = list(_iter_rows(text, config.dialect))
    workers = workers or config.execution.workers

    if workers > 1 and len(rows) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            records = list(executor.map(lambda r: decode_row(decoder, r[0], r[1]), rows))
    else:
        records = [decode_row(decoder, index, cells) for index, cells in rows]

    failed = sum(1 for r in records if not r.ok)
    logger.info(
        "Decoded %d row(s) as %s: %d ok, %d failed",
        len(records), decoder.name, len(records) - failed, failed,
    )
    return records


def decode_values(
    text: str,
    target: Any,
    *,
    registry: DecoderRegistry | None = None,
    config: DecodeConfig | None = None,
    workers: int | None = None,
) -> list[Any]:
    """Decode a document and return plain values.

    Every row is attempted. If any failed, a single ``DocumentDecodeError``
    listing all failures is raised instead of returning.
    """
    records = decode(text, target, registry=registry, config=config, workers=workers)
    failures = [r.failure for r in records if r.failure is not None]
    if failures:
        raise DocumentDecodeError(failures)
    return [r.value for r in records]


def decode_file(
    path: str | Path,
    target: Any,
    *,
    registry: DecoderRegistry | None = None,
    config: DecodeConfig | None = None,
    workers: int | None = None,
    encoding: str = "utf-8-sig",
) -> list[DecodedRecord[Any]]:
    """Read a text file and ``decode()`` its contents.

    The default ``utf-8-sig`` encoding strips a leading byte-order mark
    so it does not end up in the first cell.
    """
    path = Path(path)
    with open(path, "r", encoding=encoding) as f:
        text = f.read()
    logger.info("Decoding %s (%d chars)", path, len(text))
    return decode(text, target, registry=registry, config=config, workers=workers)
