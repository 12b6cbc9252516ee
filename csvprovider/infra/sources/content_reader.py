from __future__ import annotations

import asyncio
import glob
import io
import logging
import os
from pathlib import Path
from typing import Any, Sequence

import httpx

from csvprovider.common.sanitize import maskUrlCredentials, truncateText
from csvprovider.domain.models import Row
from csvprovider.errors import InvalidSourceError, TransportError
from csvprovider.infra.http.url_classifier import is_url_shaped
from csvprovider.infra.logging.setup import getDefaultLogger, logEvent
from csvprovider.infra.sources.csv_parser import parse_csv

CSV_EXTENSION = ".csv"


def is_local_csv_file(location: Any) -> bool:
    """Путь с расширением .csv (без учёта регистра), указывающий на существующий файл."""
    if not isinstance(location, str) or not location.lower().endswith(CSV_EXTENSION):
        return False
    return Path(location).is_file()


def file_creation_time(path: str) -> float:
    """
    Назначение:
        Время создания файла: st_birthtime, где платформа его отдаёт, иначе st_ctime.
    """
    stat = os.stat(path)
    birthtime = getattr(stat, "st_birthtime", None)
    if birthtime is not None:
        return birthtime
    return stat.st_ctime


def resolve_glob(pattern: str) -> list[str]:
    """
    Назначение:
        Разворачивает glob-шаблон в список файлов.
    Алгоритм:
        - glob с поддержкой **, дубликаты убираются, каталоги отбрасываются.
        - Сортировка по времени создания по убыванию (новые первыми), при равенстве - по пути.
    """
    matches = {match for match in glob.glob(pattern, recursive=True) if os.path.isfile(match)}
    timed = [(file_creation_time(match), match) for match in matches]
    timed.sort(key=lambda item: (-item[0], item[1]))
    return [match for _, match in timed]


def _read_file_rows(path: str) -> list[Row]:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return parse_csv(f, location=path)


class ContentReader:
    """
    Назначение/ответственность:
        Читает строки CSV из URL, локального файла или glob-шаблона.
    Ограничения:
        - Все чтения строго последовательны, порядок строк детерминирован.
        - Ошибка любого расположения прерывает всё чтение (без retry/skip).
        - Файловый I/O выполняется в пуле потоков, чтобы не блокировать event loop.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout_seconds: float | None = None,
        logger: logging.Logger | None = None,
        run_id: str = "-",
    ):
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._logger = logger or getDefaultLogger()
        self._run_id = run_id

    def _log(self, level: int, message: str) -> None:
        logEvent(self._logger, level, self._run_id, "reader", message)

    async def read_one(self, location: str) -> list[Row]:
        """
        Контракт:
            Вход: URL или путь к .csv файлу.
            Выход: строки CSV.
            Ошибки: InvalidSourceError, TransportError, CsvParseError.
        """
        if is_url_shaped(location):
            return await self._read_url(location)
        if is_local_csv_file(location):
            return await self._read_file(location)
        raise InvalidSourceError(str(location))

    async def read_many(self, locations: Sequence[str]) -> list[Row]:
        all_rows: list[Row] = []
        for location in locations:
            all_rows.extend(await self.read_one(location))
        return all_rows

    async def read_from_glob(self, pattern: str) -> list[Row]:
        try:
            paths = await asyncio.to_thread(resolve_glob, pattern)
        except OSError as exc:
            raise TransportError(f"Failed to resolve path pattern: {exc}", location=pattern, code="FILE_ERROR") from exc

        self._log(logging.INFO, f"Pattern {pattern} matched {len(paths)} file(s)")
        all_rows: list[Row] = []
        for path in paths:
            all_rows.extend(await self._read_file(path))
        return all_rows

    async def _read_file(self, path: str) -> list[Row]:
        try:
            rows = await asyncio.to_thread(_read_file_rows, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise TransportError(f"Failed to read CSV file: {exc}", location=path, code="FILE_ERROR") from exc
        self._log(logging.INFO, f"Read {len(rows)} row(s) from file {path}")
        return rows

    async def _read_url(self, url: str) -> list[Row]:
        safe_url = maskUrlCredentials(url)
        kwargs: dict[str, Any] = {"follow_redirects": True}
        if self._timeout_seconds is not None:
            kwargs["timeout"] = self._timeout_seconds
        try:
            async with self._client.stream("GET", url, **kwargs) as resp:
                if not resp.is_success:
                    await resp.aread()
                    raise TransportError(
                        f"HTTP {resp.status_code} while fetching {safe_url}",
                        location=safe_url,
                        status_code=resp.status_code,
                        body_snippet=truncateText(resp.text, 200) if resp.text else None,
                    )
                buffer = io.StringIO(newline="")
                async for chunk in resp.aiter_text():
                    buffer.write(chunk)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Network error while fetching {safe_url}: {exc.__class__.__name__}: {exc}",
                location=safe_url,
            ) from exc

        buffer.seek(0)
        rows = parse_csv(buffer, location=safe_url)
        self._log(logging.INFO, f"Read {len(rows)} row(s) from {safe_url}")
        return rows
