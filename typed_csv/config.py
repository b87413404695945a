"""
Configuration models and YAML I/O for typed-csv.

Key models:
- DecodeConfig: Top-level config (dialect + booleans + execution).
- DialectConfig: Row/cell separators of the naive CSV dialect.
- BooleanConfig: Textual vocabulary accepted by the ``bool`` cell decoder.
- ExecutionConfig: Row-level parallelism for document decoding.

Key functions:
- load_config(path) -> DecodeConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

The dialect is deliberately naive: a literal split on ``row_separator``
and then on ``cell_separator``. There is no quote or escape character, so
a separator inside a cell cannot be expressed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from typed_csv.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class DialectConfig(BaseModel):
    """Separators used to split a document into rows and cells."""

    row_separator: str = Field("\n", description="Literal text separating rows")
    cell_separator: str = Field(",", description="Literal text separating cells")
    skip_blank_lines: bool = Field(
        False,
        description="If True, zero-length lines are dropped instead of decoded as empty rows",
    )

    @field_validator("row_separator", "cell_separator")
    @classmethod
    def _check_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("separators must be non-empty strings")
        return value

    @model_validator(mode="after")
    def _check_distinct(self) -> DialectConfig:
        if self.row_separator == self.cell_separator:
            raise ValueError(
                f"row_separator and cell_separator must differ (both {self.row_separator!r})"
            )
        return self


class BooleanConfig(BaseModel):
    """Canonical textual forms of ``True`` and ``False``."""

    true_values: list[str] = Field(default_factory=lambda: ["true"])
    false_values: list[str] = Field(default_factory=lambda: ["false"])
    case_sensitive: bool = True

    @model_validator(mode="after")
    def _check_vocabulary(self) -> BooleanConfig:
        if not self.true_values or not self.false_values:
            raise ValueError("true_values and false_values must each contain at least one token")
        fold = (lambda s: s) if self.case_sensitive else str.lower
        overlap = {fold(v) for v in self.true_values} & {fold(v) for v in self.false_values}
        if overlap:
            raise ValueError(f"tokens cannot be both true and false: {sorted(overlap)}")
        return self


class ExecutionConfig(BaseModel):
    """How rows are scheduled during document decoding."""

    workers: int = Field(1, ge=1, description="Thread pool size; 1 decodes rows inline")


class DecodeConfig(BaseModel):
    """Top-level configuration for typed-csv.

    Maps 1:1 to a YAML file. Every section is optional; defaults give the
    ``\\n`` / ``,`` dialect with ``true`` / ``false`` booleans.
    """

    dialect: DialectConfig = Field(default_factory=DialectConfig)
    booleans: BooleanConfig = Field(default_factory=BooleanConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)


def load_config(path: str | Path) -> DecodeConfig:
    """Load and validate a YAML config file into a DecodeConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty or not a mapping.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"Config file must contain a mapping, got {type(raw).__name__}: {path}"
        )
    logger.info("Loaded config from %s", path)
    return DecodeConfig.model_validate(raw)


def save_config(config: DecodeConfig, path: str | Path) -> None:
    """Serialize a DecodeConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# typed-csv configuration\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
