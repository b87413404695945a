"""
Integration tests: YAML config -> decode file -> export.

Exercises the full round trip a user performs with a non-default
dialect: write a config, reload it, decode a file with it and export
the result.
"""

from __future__ import annotations

import pandas as pd
import pytest

import typed_csv
from typed_csv.config import BooleanConfig, DecodeConfig, DialectConfig, ExecutionConfig
from typed_csv.export import export_records, failures_to_frame

pytestmark = pytest.mark.integration

SEMICOLON_DOC = "1;true;2024-01-01\n2;N;2024-01-02\n\nx;Y;2024-01-03\n"


@pytest.fixture
def config_path(tmp_path):
    cfg = DecodeConfig(
        dialect=DialectConfig(cell_separator=";", skip_blank_lines=True),
        booleans=BooleanConfig(true_values=["Y", "true"], false_values=["N", "false"]),
        execution=ExecutionConfig(workers=2),
    )
    path = tmp_path / "typed_csv.yaml"
    typed_csv.save_config(cfg, path)
    return path


def test_decode_file_with_yaml_config(tmp_path, config_path):
    from datetime import date

    config = typed_csv.load_config(config_path)
    data = tmp_path / "flags.csv"
    data.write_text(SEMICOLON_DOC, encoding="utf-8")

    records = typed_csv.decode_file(data, tuple[int, bool, date], config=config)

    assert [r.row_index for r in records] == [0, 1, 3]
    assert records[0].value == (1, True, date(2024, 1, 1))
    assert records[1].value == (2, False, date(2024, 1, 2))
    assert records[2].failure.column_index == 0

    out = export_records(records, tmp_path / "out" / "flags.csv", "csv", columns=["id", "flag", "day"])
    df = pd.read_csv(out, encoding="utf-8-sig", index_col="row_index")
    assert df.index.tolist() == [0, 1]
    assert df["flag"].tolist() == [True, False]

    failures = failures_to_frame(records)
    assert failures["row_index"].tolist() == [3]
