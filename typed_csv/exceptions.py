"""
Custom exception hierarchy for typed-csv.

Two families of errors exist and they are raised at different moments:

- ``CompositionError`` -- raised while *building* a decoder (registry
  lookup). No decoder, or more than one equally valid decoder, for a
  requested type. These surface before any row is processed.
- ``DecodeError`` -- raised while *running* a decoder against text.
  Malformed cells, short rows, exhausted unions. The document-level
  functions turn these into ``DecodeFailure`` results so a bad row never
  aborts the rest of the document.
"""

from __future__ import annotations

from typing import Any, Sequence


class TypedCsvError(Exception):
    """Base exception for all typed-csv errors."""


# ---------------------------------------------------------------------------
# Composition-time errors
# ---------------------------------------------------------------------------

class CompositionError(TypedCsvError):
    """Raised when a decoder cannot be composed for a requested type."""

    def __init__(self, message: str, requested: Any = None) -> None:
        super().__init__(message)
        self.requested = requested


class DecoderNotFoundError(CompositionError):
    """Raised when no registered decoder or derivation rule covers a type."""


class AmbiguousDecoderError(CompositionError):
    """Raised when more than one decoder or rule matches a type.

    Attributes:
        candidates: Descriptions of every competing decoder / rule.
    """

    def __init__(
        self, message: str, requested: Any = None, candidates: Sequence[str] = ()
    ) -> None:
        super().__init__(message, requested)
        self.candidates = list(candidates)


class RegistryFrozenError(CompositionError):
    """Raised when registering into a registry that has been frozen."""


# ---------------------------------------------------------------------------
# Decode-time errors
# ---------------------------------------------------------------------------

class DecodeError(TypedCsvError):
    """Base class for failures while decoding text."""


class CellDecodeError(DecodeError):
    """Raised when a single cell's text is not valid for the expected type.

    Attributes:
        expected: Name of the type the decoder was producing.
        text: The offending raw cell text.
        reason: Short explanation (without the expected/text prefix).
    """

    def __init__(self, expected: str, text: str, reason: str = "") -> None:
        self.expected = expected
        self.text = text
        self.reason = reason
        message = f"cannot decode {text!r} as {expected}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnionDecodeError(CellDecodeError):
    """Raised when every alternative of a union/either decoder failed.

    Attributes:
        attempts: The underlying ``CellDecodeError`` of each alternative,
            in the order they were tried.
    """

    def __init__(self, expected: str, text: str, attempts: Sequence[CellDecodeError]) -> None:
        self.attempts = list(attempts)
        reason = "; ".join(f"{a.expected}: {a}" for a in self.attempts)
        super().__init__(expected, text, f"all alternatives failed ({reason})")


class RowDecodeError(DecodeError):
    """Raised when a row cannot be decoded.

    Attributes:
        column: Zero-based column index that failed, or ``None`` when the
            failure concerns the row as a whole.
        expected: Name of the type that was expected at that position.
        text: The offending cell text (``None`` for row-level failures).
        cause: The underlying ``CellDecodeError``, when there is one.
    """

    def __init__(
        self,
        message: str,
        column: int | None = None,
        expected: str = "",
        text: str | None = None,
        cause: CellDecodeError | None = None,
    ) -> None:
        super().__init__(message)
        self.column = column
        self.expected = expected
        self.text = text
        self.cause = cause

    @classmethod
    def at_column(cls, column: int, error: CellDecodeError) -> RowDecodeError:
        """Attribute a cell failure to the column it happened in."""
        return cls(
            f"column {column}: {error}",
            column=column,
            expected=error.expected,
            text=error.text,
            cause=error,
        )


class InsufficientColumnsError(RowDecodeError):
    """Raised when a fixed-arity row decoder receives too few cells."""

    def __init__(self, expected_columns: int, actual_columns: int, expected: str = "") -> None:
        super().__init__(
            f"insufficient columns: expected at least {expected_columns}, "
            f"got {actual_columns}",
            column=None,
            expected=expected,
        )
        self.expected_columns = expected_columns
        self.actual_columns = actual_columns


class DocumentDecodeError(DecodeError):
    """Raised by strict document decoding when one or more rows failed.

    Attributes:
        failures: Every ``DecodeFailure`` in the document, in row order.
    """

    def __init__(self, failures: Sequence[Any]) -> None:
        self.failures = list(failures)
        preview = "\n".join(f"  {f}" for f in self.failures[:10])
        more = len(self.failures) - 10
        if more > 0:
            preview += f"\n  ... and {more} more"
        super().__init__(f"{len(self.failures)} row(s) failed to decode:\n{preview}")


# ---------------------------------------------------------------------------
# Ambient errors
# ---------------------------------------------------------------------------

class ConfigValidationError(TypedCsvError):
    """Raised when a YAML config file is empty or semantically invalid."""


class ExportError(TypedCsvError):
    """Raised when decoded records cannot be written to disk.

    For example, permission errors or an unsupported output format.
    """
