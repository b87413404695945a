"""
typed-csv: type-directed decoding of naive CSV text into Python values.

Public API surface:

- ``decode(text, target, ...)`` -- **recommended entry point**. Splits
  the text into rows and cells, resolves a row decoder for *target* and
  returns one ``DecodedRecord`` per row (value or failure).

- ``decode_values(...)`` -- same, but returns plain values and raises a
  single ``DocumentDecodeError`` listing every failed row.

- ``iter_decode(...)`` / ``decode_file(...)`` -- lazy and file-based
  variants.

- ``DecoderRegistry`` / ``get_default_registry()`` -- type-keyed decoder
  lookup. Copy the default registry to register decoders for your own
  types.

Example::

    import typed_csv

    typed_csv.decode_values("1,Nicolas\\n2,Jessica", tuple[int, str])
    # [(1, 'Nicolas'), (2, 'Jessica')]

    typed_csv.decode_values("1,2,3\\n4,5,6", list[int])
    # [[1, 2, 3], [4, 5, 6]]
"""

from __future__ import annotations

import logging

from typed_csv.config import DecodeConfig, load_config, save_config
from typed_csv.decoders import (
    CellDecoder,
    FunctionCellDecoder,
    RowDecoder,
    collection,
    either,
    optional,
    record,
    tuple_of,
    union,
)
from typed_csv.document import decode, decode_file, decode_values, iter_decode, split_document
from typed_csv.either import Either, Left, Right
from typed_csv.exceptions import (
    AmbiguousDecoderError,
    CellDecodeError,
    CompositionError,
    DecodeError,
    DecoderNotFoundError,
    DocumentDecodeError,
    RowDecodeError,
    TypedCsvError,
)
from typed_csv.registry import DecoderRegistry, DerivationRule, get_default_registry
from typed_csv.results import DecodedRecord, DecodeFailure

__all__ = [
    "decode",
    "decode_values",
    "iter_decode",
    "decode_file",
    "split_document",
    "DecoderRegistry",
    "DerivationRule",
    "get_default_registry",
    "CellDecoder",
    "RowDecoder",
    "FunctionCellDecoder",
    "optional",
    "either",
    "union",
    "collection",
    "tuple_of",
    "record",
    "Either",
    "Left",
    "Right",
    "DecodedRecord",
    "DecodeFailure",
    "DecodeConfig",
    "load_config",
    "save_config",
    "TypedCsvError",
    "CompositionError",
    "DecoderNotFoundError",
    "AmbiguousDecoderError",
    "DecodeError",
    "CellDecodeError",
    "RowDecodeError",
    "DocumentDecodeError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
