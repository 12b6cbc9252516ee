from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from csvprovider.domain.models import PathSource, ResolvedSource, SourceConfig, UrlSource
from csvprovider.domain.ports.sources import ReachabilityProbeProtocol, UrlGeneratorProtocol
from csvprovider.errors import AmbiguousSourceError, AppError, MissingSourceError, SourceConfigError
from csvprovider.infra.http.url_classifier import is_url_shaped
from csvprovider.infra.logging.setup import getDefaultLogger, logEvent
from csvprovider.infra.sources.content_reader import is_local_csv_file


def enumerate_candidates(source_config: SourceConfig, generate_urls: UrlGeneratorProtocol) -> list[Any]:
    """
    Назначение:
        Применяет стратегию генерации к SourceConfig.
    Контракт:
        - Возвращает упорядоченный список кандидатов.
        - Строковые кандидаты очищаются от пробелов по краям.
        - Исключение стратегии или результат не-последовательность -> SourceConfigError.
    """
    try:
        candidates = generate_urls(source_config)
    except AppError:
        raise
    except Exception as exc:
        raise SourceConfigError(
            f"URL generator failed for source '{source_config.source_id}': {exc}",
            details={"source_id": source_config.source_id},
        ) from exc

    if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence):
        raise SourceConfigError(
            f"URL generator for source '{source_config.source_id}' must return a sequence, "
            f"got {type(candidates).__name__}",
            details={"source_id": source_config.source_id},
        )
    return [candidate.strip() if isinstance(candidate, str) else candidate for candidate in candidates]


async def filter_valid_urls(candidates: Sequence[Any], probe: ReachabilityProbeProtocol) -> list[str]:
    """Оставляет URL-кандидаты, которые отвечают успешным статусом; порядок сохраняется."""
    valid: list[str] = []
    for candidate in candidates:
        if is_url_shaped(candidate) and await probe.is_reachable(candidate):
            valid.append(candidate)
    return valid


async def filter_usable_locations(candidates: Sequence[Any], probe: ReachabilityProbeProtocol) -> list[str]:
    """
    Назначение:
        Кандидаты, пригодные для чтения через url: живые URL и существующие .csv файлы.
    """
    valid_urls = await filter_valid_urls(candidates, probe)
    return [
        candidate
        for candidate in candidates
        if candidate in valid_urls or (not is_url_shaped(candidate) and is_local_csv_file(candidate))
    ]


async def resolve_source(
    source_config: SourceConfig,
    candidates: Sequence[Any],
    probe: ReachabilityProbeProtocol,
    logger: logging.Logger | None = None,
    run_id: str = "-",
) -> ResolvedSource:
    """
    Назначение:
        Один раз выбирает вариант источника: UrlSource или PathSource.
    Алгоритм:
        - Нет ни пригодных url, ни path -> MissingSourceError.
        - Есть и то, и другое -> AmbiguousSourceError.
    """
    logger = logger or getDefaultLogger()
    locations = await filter_usable_locations(candidates, probe)
    has_locations = len(locations) > 0

    logEvent(
        logger,
        logging.DEBUG,
        run_id,
        "pipeline",
        f"Source '{source_config.source_id}': {len(locations)} of {len(candidates)} candidate(s) usable, "
        f"path={'set' if source_config.has_path else 'unset'}",
    )

    if not has_locations and not source_config.has_path:
        raise MissingSourceError(source_config.source_id)
    if has_locations and source_config.has_path:
        raise AmbiguousSourceError(source_config.source_id)
    if has_locations:
        return UrlSource(locations=tuple(locations))
    return PathSource(pattern=source_config.path)
