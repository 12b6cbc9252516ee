from __future__ import annotations

from csvprovider.domain.geojson import make_translator, translate
from csvprovider.domain.models import SourceConfig


def test_translate_builds_point_features():
    rows = [
        {"id": 1, "longitude": -122, "latitude": 37},
        {"id": 2, "longitude": -121, "latitude": 36},
    ]
    config = SourceConfig(source_id="t", geometry_columns={"longitude": "longitude", "latitude": "latitude"})

    collection = translate(rows, config)

    assert collection["type"] == "FeatureCollection"
    assert [f["geometry"] for f in collection["features"]] == [
        {"type": "Point", "coordinates": [-122, 37]},
        {"type": "Point", "coordinates": [-121, 36]},
    ]
    assert collection["features"][0]["properties"] == rows[0]
    assert "metadata" not in collection


def test_translate_uses_configured_columns_and_metadata():
    rows = [{"name": "a", "x": 10.5, "y": -3.25}]
    config = SourceConfig(
        source_id="t",
        geometry_columns={"longitude": "x", "latitude": "y"},
        metadata={"idField": "name"},
    )

    collection = translate(rows, config)

    assert collection["features"][0]["geometry"]["coordinates"] == [10.5, -3.25]
    assert collection["metadata"] == {"idField": "name"}


def test_translate_skips_rows_without_numeric_coordinates():
    rows = [
        {"longitude": -122, "latitude": 37},
        {"longitude": None, "latitude": 37},
        {"longitude": "west", "latitude": 37},
        {"longitude": True, "latitude": False},
        {"latitude": 37},
    ]

    collection = translate(rows, SourceConfig(source_id="t"))

    assert len(collection["features"]) == 1


def test_translate_with_coordinate_transform():
    translator = make_translator(lambda lon, lat: (lon + 1, lat + 1))

    collection = translator([{"longitude": -122, "latitude": 37}], SourceConfig(source_id="t"))

    assert collection["features"][0]["geometry"]["coordinates"] == [-121, 38]


def test_translate_with_camel_case_geometry_columns():
    config = SourceConfig.from_dict("t", {"geometryColumns": {"longitude": "lon", "latitude": "lat"}})

    collection = translate([{"id": 1, "lon": -122, "lat": 37}, {"id": 2, "lon": -121, "lat": 36}], config)

    assert [f["geometry"]["coordinates"] for f in collection["features"]] == [[-122, 37], [-121, 36]]


def test_translate_passes_transform_through():
    collection = translate(
        [{"longitude": -122, "latitude": 37}],
        SourceConfig(source_id="t"),
        transform_coordinates=lambda lon, lat: [lat, lon],
    )

    assert collection["features"][0]["geometry"]["coordinates"] == [37, -122]
