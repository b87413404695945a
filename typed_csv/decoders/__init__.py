"""
Decoders sub-package for typed-csv.

- base.py defines the ``CellDecoder`` / ``RowDecoder`` ABCs.
- cells.py implements the primitive cell decoders (str, int, float, ...).
- rows.py implements tuple, record and collection row decoders.
- combinators.py derives decoders from decoders (optional, either,
  union, collection, tuple_of, record).

Concrete types are only bound to decoders by the registry
(``typed_csv.registry``); everything in this package works purely with
decoder instances.
"""

from typed_csv.decoders.base import CellDecoder, FunctionCellDecoder, RowDecoder
from typed_csv.decoders.combinators import collection, either, optional, record, tuple_of, union

__all__ = [
    "CellDecoder",
    "RowDecoder",
    "FunctionCellDecoder",
    "optional",
    "either",
    "union",
    "collection",
    "tuple_of",
    "record",
]
