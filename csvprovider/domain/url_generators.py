from __future__ import annotations

from typing import Callable, Sequence

from csvprovider.domain.models import SourceConfig
from csvprovider.errors import SourceConfigError

REGION_PLACEHOLDER = "{region}"


def passthrough_urls(source_config: SourceConfig) -> list[str | None]:
    """Стратегия по умолчанию: единственный кандидат - url как есть."""
    return [source_config.url]


def region_urls(source_config: SourceConfig) -> list[str]:
    """
    Назначение:
        Разворачивает список regions в URL по одному на регион.
    Алгоритм:
        - Если url содержит {region}, подставляет код региона.
        - Иначе добавляет /<region> к url.
    """
    if not source_config.url:
        raise SourceConfigError(
            f"Source '{source_config.source_id}': 'url' is required for region URLs",
            details={"source_id": source_config.source_id},
        )
    if not source_config.regions:
        raise SourceConfigError(
            f"Source '{source_config.source_id}': 'regions' must not be empty",
            details={"source_id": source_config.source_id},
        )
    base = source_config.url
    if REGION_PLACEHOLDER in base:
        return [base.replace(REGION_PLACEHOLDER, region) for region in source_config.regions]
    base = base.rstrip("/")
    return [f"{base}/{region}" for region in source_config.regions]


_registry: dict[str, Callable[[SourceConfig], Sequence[str]]] = {
    "passthrough": passthrough_urls,
    "regions": region_urls,
}


def get_url_generator(name: str | None) -> Callable[[SourceConfig], Sequence[str]]:
    """
    Возвращает генератор URL по имени (None -> passthrough) или SourceConfigError.
    """
    if name is None:
        return passthrough_urls
    try:
        return _registry[name]
    except KeyError as exc:
        known = ", ".join(list_url_generators())
        raise SourceConfigError(
            f"Unsupported url_generator: {name} (known: {known})",
            details={"url_generator": name},
        ) from exc


def list_url_generators() -> list[str]:
    return sorted(_registry)
