from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from csvprovider.errors import SourceConfigError

Scalar = Union[str, int, float, bool, None]
Row = Dict[str, Scalar]
FeatureCollection = Dict[str, Any]

_KNOWN_KEYS = ("url", "path", "regions", "geometry_columns", "metadata", "url_generator")
_KEY_ALIASES = {"geometryColumns": "geometry_columns", "urlGenerator": "url_generator"}


@dataclass(frozen=True)
class SourceConfig:
    """
    Назначение/ответственность:
        Описание одного именованного источника CSV из конфигурации.
    Инварианты/гарантии:
        - url/path либо строка, либо None.
        - geometry_columns: роль координаты (longitude/latitude) -> имя колонки.
        - extra хранит прочие ключи для пользовательских генераторов URL.
    Взаимодействия:
        Читается генератором URL, resolve_source и translate.
    """

    source_id: str
    url: str | None = None
    path: str | None = None
    regions: List[str] | None = None
    geometry_columns: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    url_generator: str | None = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_path(self) -> bool:
        return isinstance(self.path, str) and self.path != ""

    def get(self, key: str, default: Any = None) -> Any:
        """Доступ к известным полям и к extra по имени ключа конфигурации."""
        key = _KEY_ALIASES.get(key, key)
        if key in _KNOWN_KEYS:
            return getattr(self, key)
        return self.extra.get(key, default)

    @classmethod
    def from_dict(cls, source_id: str, raw: Mapping[str, Any] | None) -> "SourceConfig":
        """
        Назначение:
            Строит SourceConfig из секции YAML.
        Контракт:
            - Пустая секция допустима (ошибка выбора источника возникнет позже).
            - Неверные типы полей -> SourceConfigError.
            - geometryColumns/urlGenerator принимаются как синонимы snake_case ключей.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise SourceConfigError(
                f"Source '{source_id}' must be a mapping", details={"source_id": source_id}
            )

        normalized: dict[str, Any] = {}
        for key, value in raw.items():
            canonical = _KEY_ALIASES.get(key, key)
            if canonical in normalized:
                raise SourceConfigError(
                    f"Source '{source_id}': '{key}' duplicates '{canonical}'",
                    details={"source_id": source_id, "field": key},
                )
            normalized[canonical] = value
        raw = normalized

        def opt_str(key: str) -> str | None:
            value = raw.get(key)
            if value is None or isinstance(value, str):
                return value
            raise SourceConfigError(
                f"Source '{source_id}': '{key}' must be a string",
                details={"source_id": source_id, "field": key},
            )

        def opt_mapping(key: str) -> dict:
            value = raw.get(key)
            if value is None:
                return {}
            if not isinstance(value, Mapping):
                raise SourceConfigError(
                    f"Source '{source_id}': '{key}' must be a mapping",
                    details={"source_id": source_id, "field": key},
                )
            return dict(value)

        regions = raw.get("regions")
        if regions is not None:
            if isinstance(regions, str) or not isinstance(regions, (list, tuple)):
                raise SourceConfigError(
                    f"Source '{source_id}': 'regions' must be a list",
                    details={"source_id": source_id, "field": "regions"},
                )
            regions = [str(region) for region in regions]

        return cls(
            source_id=source_id,
            url=opt_str("url"),
            path=opt_str("path"),
            regions=regions,
            geometry_columns=opt_mapping("geometry_columns"),
            metadata=opt_mapping("metadata"),
            url_generator=opt_str("url_generator"),
            extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
        )


@dataclass(frozen=True)
class UrlSource:
    """Источник из одного или нескольких URL/CSV-файлов; порядок чтения = порядок locations."""

    locations: tuple[str, ...]


@dataclass(frozen=True)
class PathSource:
    """Источник по glob-шаблону."""

    pattern: str


ResolvedSource = Union[UrlSource, PathSource]


__all__ = [
    "Scalar",
    "Row",
    "FeatureCollection",
    "SourceConfig",
    "UrlSource",
    "PathSource",
    "ResolvedSource",
]
