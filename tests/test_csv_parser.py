from __future__ import annotations

import io

import pytest

from csvprovider.errors import CsvParseError
from csvprovider.infra.sources.csv_parser import inferScalar, parse_csv


def parse_text(text: str):
    return parse_csv(io.StringIO(text, newline=""), location="memory")


def test_parse_types_cells_dynamically():
    rows = parse_text("id,name,score,active,note\n1,alice,3.5,true,\n2,bob,-4,FALSE,x\n")

    assert rows == [
        {"id": 1, "name": "alice", "score": 3.5, "active": True, "note": None},
        {"id": 2, "name": "bob", "score": -4, "active": False, "note": "x"},
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-122", -122),
        ("37.5", 37.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("TRUE", True),
        ("True", "True"),
        ("False", "False"),
        ("abc", "abc"),
        ("12abc", "12abc"),
        ("", None),
        (" ", " "),
    ],
)
def test_infer_scalar(raw, expected):
    assert inferScalar(raw) == expected


def test_parse_keeps_file_order_and_skips_blank_lines():
    rows = parse_text("id,value\n\n3,c\n1,a\n\n2,b\n")

    assert [row["id"] for row in rows] == [3, 1, 2]


def test_parse_quoted_field_with_delimiter_and_newline():
    rows = parse_text('id,name\n1,"Doe, Jane"\n2,"multi\nline"\n')

    assert rows[0]["name"] == "Doe, Jane"
    assert rows[1]["name"] == "multi\nline"


def test_parse_strips_bom_from_header():
    rows = parse_text("\ufeffid,longitude\n1,2\n")

    assert rows == [{"id": 1, "longitude": 2}]


def test_parse_header_only_and_empty_input():
    assert parse_text("id,longitude,latitude\n") == []
    assert parse_text("") == []


def test_parse_raises_on_column_count_mismatch():
    with pytest.raises(CsvParseError) as exc:
        parse_text("id,longitude,latitude\n1,-122,37\n2,-121\n")

    assert "line 3" in exc.value.message
    assert "expected 3, got 2" in exc.value.message
    assert exc.value.details["line_no"] == 3
    assert exc.value.details["location"] == "memory"


def test_parse_raises_on_malformed_quotes():
    with pytest.raises(CsvParseError) as exc:
        parse_text('id,name\n1,"bad"quote\n')

    assert exc.value.code == "CSV_PARSE_ERROR"
