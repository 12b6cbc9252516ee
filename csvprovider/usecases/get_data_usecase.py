from __future__ import annotations

import logging
from typing import Callable, Mapping

from csvprovider.domain.geojson import translate
from csvprovider.domain.models import FeatureCollection, PathSource, ResolvedSource, Row, SourceConfig, UrlSource
from csvprovider.domain.ports.sources import (
    ReachabilityProbeProtocol,
    RowReaderProtocol,
    TranslatorProtocol,
    UrlGeneratorProtocol,
)
from csvprovider.domain.url_generators import get_url_generator
from csvprovider.errors import (
    AmbiguousSourceError,
    AppError,
    DataUnavailableError,
    MissingSourceError,
    UnknownSourceError,
)
from csvprovider.infra.logging.setup import getDefaultLogger, logEvent
from csvprovider.usecases.source_resolver import enumerate_candidates, resolve_source

GetDataCallback = Callable[[AppError | None, FeatureCollection | None], None]


class GetDataUseCase:
    """
    Назначение/ответственность:
        Use-case для одного запроса: source_id -> FeatureCollection.
        enumerate -> resolve (UrlSource | PathSource) -> read -> translate.
    Ограничения:
        - Шаги выполняются строго последовательно.
        - MissingSourceError/AmbiguousSourceError/UnknownSourceError отдаются как есть,
          остальные ошибки логируются и заменяются на DataUnavailableError.
        - generate_urls, если передан, имеет приоритет над url_generator из конфигурации.
    """

    def __init__(
        self,
        sources: Mapping[str, SourceConfig],
        probe: ReachabilityProbeProtocol,
        reader: RowReaderProtocol,
        translator: TranslatorProtocol = translate,
        generate_urls: UrlGeneratorProtocol | None = None,
        logger: logging.Logger | None = None,
        run_id: str = "-",
    ) -> None:
        self.sources = sources
        self.probe = probe
        self.reader = reader
        self.translator = translator
        self.generate_urls = generate_urls
        self.logger = logger or getDefaultLogger()
        self.run_id = run_id

    def _log(self, level: int, message: str, exc_info: bool = False) -> None:
        logEvent(self.logger, level, self.run_id, "pipeline", message, exc_info=exc_info)

    def _get_source(self, source_id: str) -> SourceConfig:
        source_config = self.sources.get(source_id)
        if source_config is None:
            raise UnknownSourceError(source_id)
        return source_config

    async def _read(self, source: ResolvedSource) -> list[Row]:
        if isinstance(source, PathSource):
            return await self.reader.read_from_glob(source.pattern)
        if isinstance(source, UrlSource):
            if len(source.locations) == 1:
                return await self.reader.read_one(source.locations[0])
            return await self.reader.read_many(source.locations)
        raise TypeError(f"Unsupported source variant: {type(source).__name__}")

    async def execute(self, source_id: str) -> FeatureCollection:
        """
        Контракт (вход/выход):
            Вход: идентификатор источника.
            Выход: FeatureCollection.
            Ошибки: UnknownSourceError, MissingSourceError, AmbiguousSourceError, DataUnavailableError.
        """
        try:
            source_config = self._get_source(source_id)
        except UnknownSourceError as exc:
            self._log(logging.ERROR, exc.message)
            raise

        try:
            generate_urls = self.generate_urls or get_url_generator(source_config.url_generator)
            candidates = enumerate_candidates(source_config, generate_urls)
            source = await resolve_source(source_config, candidates, self.probe, self.logger, self.run_id)
            rows = await self._read(source)
            self._log(logging.INFO, f"Source '{source_id}': {len(rows)} row(s) read")
            result = self.translator(rows, source_config)
            self._log(logging.INFO, f"Source '{source_id}': {len(result['features'])} feature(s) built")
        except (MissingSourceError, AmbiguousSourceError) as exc:
            self._log(logging.ERROR, exc.message)
            raise
        except AppError as exc:
            self._log(
                logging.ERROR,
                f"Unable to read CSV data for source '{source_id}': "
                f"{exc.__class__.__name__} code={exc.code} message={exc.message} details={exc.details}",
                exc_info=True,
            )
            raise DataUnavailableError(source_id) from exc
        except Exception as exc:
            self._log(
                logging.ERROR,
                f"Unable to read CSV data for source '{source_id}': {exc.__class__.__name__}: {exc}",
                exc_info=True,
            )
            raise DataUnavailableError(source_id) from exc
        return result

    async def get_data(self, source_id: str, callback: GetDataCallback) -> None:
        """
        Назначение:
            Callback-обёртка над execute: callback вызывается ровно один раз,
            либо с ошибкой, либо с результатом.
        """
        try:
            result = await self.execute(source_id)
        except AppError as exc:
            callback(exc, None)
            return
        callback(None, result)
