from __future__ import annotations

import csv
import re
from typing import Iterable

from csvprovider.domain.models import Row, Scalar
from csvprovider.errors import CsvParseError

_NUMBER_RE = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_TRUE_TOKENS = frozenset({"true", "TRUE"})
_FALSE_TOKENS = frozenset({"false", "FALSE"})
_BOM = "\ufeff"


def inferScalar(value: str) -> Scalar:
    """
    Назначение:
        Автоматическая типизация значения ячейки.

    Алгоритм:
        - "" -> None
        - true/false токены -> bool
        - целое -> int, дробное/экспонента -> float
        - иначе строка без изменений
    """
    if value == "":
        return None
    if value in _TRUE_TOKENS:
        return True
    if value in _FALSE_TOKENS:
        return False
    match = _NUMBER_RE.match(value)
    if match:
        if "." in value or match.group(2):
            return float(value)
        return int(value)
    return value


def _is_blank(row: list[str]) -> bool:
    return len(row) == 0 or (len(row) == 1 and row[0].strip() == "")


def parse_csv(source: Iterable[str], location: str | None = None) -> list[Row]:
    """
    Назначение:
        Разбирает CSV с заголовком в список строк с типизированными значениями.

    Входные данные:
        source: Iterable[str]
            Поток строк (файл, открытый с newline="", или StringIO).
        location: str | None
            Источник для диагностики.

    Выходные данные:
        list[Row] в порядке файла.

    Поведение:
        - Первая непустая строка - заголовок, пустые строки пропускаются.
        - Несовпадение числа колонок или битые кавычки -> CsvParseError.
    """
    reader = csv.reader(source, strict=True)
    header: list[str] | None = None
    rows: list[Row] = []
    try:
        for row in reader:
            if _is_blank(row):
                continue
            if header is None:
                header = list(row)
                header[0] = header[0].lstrip(_BOM)
                continue
            if len(row) != len(header):
                raise CsvParseError(
                    f"Invalid column count at line {reader.line_num}: expected {len(header)}, got {len(row)}",
                    line_no=reader.line_num,
                    location=location,
                )
            rows.append({name: inferScalar(value) for name, value in zip(header, row)})
    except csv.Error as exc:
        raise CsvParseError(
            f"Malformed CSV at line {reader.line_num}: {exc}",
            line_no=reader.line_num,
            location=location,
        ) from exc
    return rows
