from __future__ import annotations

from functools import partial
from typing import Any, Callable

from csvprovider.domain.models import FeatureCollection, Row, SourceConfig
from csvprovider.domain.ports.sources import CoordinateTransformProtocol

DEFAULT_LONGITUDE_COLUMN = "longitude"
DEFAULT_LATITUDE_COLUMN = "latitude"


def identity_coordinates(longitude: float, latitude: float) -> list[float]:
    return [longitude, latitude]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def build_feature(
    row: Row,
    longitude_column: str,
    latitude_column: str,
    transform_coordinates: CoordinateTransformProtocol,
) -> dict | None:
    """
    Назначение:
        Строит Point-фичу из строки.
    Контракт:
        - None, если координатные колонки отсутствуют или не числовые.
        - properties содержат всю строку целиком.
    """
    longitude = row.get(longitude_column)
    latitude = row.get(latitude_column)
    if not _is_number(longitude) or not _is_number(latitude):
        return None
    coordinates = list(transform_coordinates(longitude, latitude))
    return {
        "type": "Feature",
        "properties": dict(row),
        "geometry": {"type": "Point", "coordinates": coordinates},
    }


def translate(
    rows: list[Row],
    source_config: SourceConfig,
    transform_coordinates: CoordinateTransformProtocol | None = None,
) -> FeatureCollection:
    """
    Назначение:
        Переводит строки CSV в GeoJSON FeatureCollection.
    Контракт:
        - Одна фича на строку с числовыми координатами; остальные строки пропускаются.
        - metadata источника копируется в коллекцию.
        - Чистая функция, без I/O.
    """
    transform = transform_coordinates or identity_coordinates
    geometry_columns = source_config.geometry_columns or {}
    longitude_column = geometry_columns.get("longitude", DEFAULT_LONGITUDE_COLUMN)
    latitude_column = geometry_columns.get("latitude", DEFAULT_LATITUDE_COLUMN)

    features = []
    for row in rows:
        feature = build_feature(row, longitude_column, latitude_column, transform)
        if feature is not None:
            features.append(feature)

    collection: FeatureCollection = {"type": "FeatureCollection", "features": features}
    if source_config.metadata:
        collection["metadata"] = dict(source_config.metadata)
    return collection


def make_translator(
    transform_coordinates: CoordinateTransformProtocol,
) -> Callable[[list[Row], SourceConfig], FeatureCollection]:
    """Возвращает translate с привязанной функцией преобразования координат."""
    return partial(translate, transform_coordinates=transform_coordinates)
