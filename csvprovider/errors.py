from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class AppError(Exception):
    """
    Унифицированная ошибка приложения.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class UnknownSourceError(AppError):
    def __init__(self, source_id: str):
        super().__init__(
            category="config",
            code="UNKNOWN_SOURCE",
            message=f'Unknown CSV source "{source_id}".',
            details={"source_id": source_id},
        )


class MissingSourceError(AppError):
    """
    Назначение:
        Ни url, ни path не дали пригодного источника CSV.
        Показывается вызывающему как есть.
    """

    def __init__(self, source_id: str | None = None):
        super().__init__(
            category="config",
            code="MISSING_SOURCE",
            message=(
                'No CSV source specified. Either "url" or "path" must be specified '
                "at the source configuration."
            ),
            details={"source_id": source_id},
        )


class AmbiguousSourceError(AppError):
    """
    Назначение:
        Заданы одновременно пригодный url и path.
        Показывается вызывающему как есть.
    """

    def __init__(self, source_id: str | None = None):
        super().__init__(
            category="config",
            code="AMBIGUOUS_SOURCE",
            message=(
                'Invalid CSV source: both "url" and "path" are specified; '
                "exactly one is allowed at the source configuration."
            ),
            details={"source_id": source_id},
        )


class SourceConfigError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(
            category="config",
            code="INVALID_SOURCE_CONFIG",
            message=message,
            details=details or {},
        )


class InvalidSourceError(AppError):
    def __init__(self, location: str):
        super().__init__(
            category="source",
            code="INVALID_SOURCE",
            message=f"Invalid CSV source url: not a URL or a CSV file path: {location}",
            details={"location": location},
        )


class CsvParseError(AppError):
    """
    Назначение:
        Структурная ошибка разбора CSV (число колонок, кавычки).
    Контракт:
        message - текст первой найденной ошибки.
    """

    def __init__(self, message: str, line_no: int | None = None, location: str | None = None):
        super().__init__(
            category="source",
            code="CSV_PARSE_ERROR",
            message=message,
            details={"line_no": line_no, "location": location},
        )


class TransportError(AppError):
    """
    Назначение:
        Сбой сети или файловой системы при чтении источника.
    Контракт:
        - code: NETWORK_ERROR, HTTP_<status> или FILE_ERROR.
    """

    def __init__(
        self,
        message: str,
        location: str,
        status_code: int | None = None,
        code: str | None = None,
        body_snippet: str | None = None,
    ):
        super().__init__(
            category="transport",
            code=code or (f"HTTP_{status_code}" if status_code else "NETWORK_ERROR"),
            message=message,
            retryable=status_code is None or status_code >= 500,
            details={"location": location, "status_code": status_code, "body_snippet": body_snippet},
        )
        self.status_code = status_code


class DataUnavailableError(AppError):
    """
    Назначение:
        Обобщённая ошибка для вызывающего: детали остаются в логе.
    """

    def __init__(self, source_id: str | None = None):
        super().__init__(
            category="pipeline",
            code="DATA_UNAVAILABLE",
            message="Unable to read CSV data",
            details={"source_id": source_id},
        )


__all__ = [
    "AppError",
    "UnknownSourceError",
    "MissingSourceError",
    "AmbiguousSourceError",
    "SourceConfigError",
    "InvalidSourceError",
    "CsvParseError",
    "TransportError",
    "DataUnavailableError",
]
