from __future__ import annotations

from typing import Protocol, Sequence

from csvprovider.domain.models import FeatureCollection, Row, SourceConfig


class UrlGeneratorProtocol(Protocol):
    """
    Назначение/ответственность:
        Стратегия получения списка кандидатов (URL или путей) из SourceConfig.
    """

    def __call__(self, source_config: SourceConfig) -> Sequence[str]:
        """
        Контракт:
            Вход: SourceConfig.
            Выход: упорядоченная последовательность строк-кандидатов.
        """
        ...


class TranslatorProtocol(Protocol):
    """
    Назначение/ответственность:
        Чистая функция rows -> FeatureCollection, без I/O.
    """

    def __call__(self, rows: list[Row], source_config: SourceConfig) -> FeatureCollection: ...


class CoordinateTransformProtocol(Protocol):
    def __call__(self, longitude: float, latitude: float) -> Sequence[float]: ...


class ReachabilityProbeProtocol(Protocol):
    """
    Назначение/ответственность:
        Проверка доступности URL. Никогда не бросает исключений.
    """

    async def is_reachable(self, url: str) -> bool: ...


class RowReaderProtocol(Protocol):
    """
    Назначение/ответственность:
        Чтение строк CSV из одного или нескольких расположений.
    """

    async def read_one(self, location: str) -> list[Row]: ...

    async def read_many(self, locations: Sequence[str]) -> list[Row]: ...

    async def read_from_glob(self, pattern: str) -> list[Row]: ...


__all__ = [
    "UrlGeneratorProtocol",
    "TranslatorProtocol",
    "CoordinateTransformProtocol",
    "ReachabilityProbeProtocol",
    "RowReaderProtocol",
]
