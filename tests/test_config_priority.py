from __future__ import annotations

import pytest

from csvprovider.config.config import load_settings, load_sources
from csvprovider.errors import SourceConfigError


def test_priority_cli_over_env_over_config(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            'log_level: "DEBUG"',
            "timeout_seconds: 11",
            "probe_timeout_seconds: 3",
            'log_dir: "cfg-logs"',
        ]),
        encoding="utf-8",
    )

    # ENV overrides config
    monkeypatch.setenv("CSV_PROVIDER_TIMEOUT_SECONDS", "22")
    monkeypatch.setenv("CSV_PROVIDER_LOG_DIR", "env-logs")
    monkeypatch.setenv("CSV_PROVIDER_TLS_SKIP_VERIFY", "yes")

    # CLI overrides env
    loaded = load_settings(str(cfg), {"log_dir": "cli-logs", "timeout_seconds": None})

    assert loaded.settings.log_level == "DEBUG"
    assert loaded.settings.probe_timeout_seconds == 3.0
    assert loaded.settings.timeout_seconds == 22.0
    assert loaded.settings.log_dir == "cli-logs"
    assert loaded.settings.tls_skip_verify is True
    assert loaded.sources_used == ["config", "env", "cli"]


def test_defaults_without_config(monkeypatch):
    for name in (
        "CSV_PROVIDER_LOG_DIR",
        "CSV_PROVIDER_LOG_LEVEL",
        "CSV_PROVIDER_TIMEOUT_SECONDS",
        "CSV_PROVIDER_PROBE_TIMEOUT_SECONDS",
        "CSV_PROVIDER_TLS_SKIP_VERIFY",
        "CSV_PROVIDER_CA_FILE",
    ):
        monkeypatch.delenv(name, raising=False)

    loaded = load_settings(None, {})

    assert loaded.settings.timeout_seconds == 30.0
    assert loaded.settings.probe_timeout_seconds == 10.0
    assert loaded.sources_used == []


def test_invalid_boolean_env_value(monkeypatch):
    monkeypatch.setenv("CSV_PROVIDER_TLS_SKIP_VERIFY", "maybe")

    with pytest.raises(ValueError):
        load_settings(None, {})


def test_load_sources_reads_namespace(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        """
csv_provider:
  sources:
    points:
      url: http://my-site.com/points.csv
      geometry_columns:
        longitude: lon
        latitude: lat
      metadata:
        idField: id
    regional:
      url: https://example.com/data
      url_generator: regions
      regions: [Region1, Region2]
      layer: stations
""",
        encoding="utf-8",
    )

    sources = load_sources(str(cfg))

    assert sorted(sources) == ["points", "regional"]
    assert sources["points"].geometry_columns == {"longitude": "lon", "latitude": "lat"}
    assert sources["points"].metadata == {"idField": "id"}
    assert sources["regional"].regions == ["Region1", "Region2"]
    assert sources["regional"].get("layer") == "stations"
    assert sources["regional"].get("url_generator") == "regions"


def test_load_sources_rejects_wrong_types(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text("csv_provider:\n  sources:\n    bad:\n      path: [a, b]\n", encoding="utf-8")

    with pytest.raises(SourceConfigError):
        load_sources(str(cfg))


def test_load_sources_missing_file_is_empty(tmp_path):
    assert load_sources(str(tmp_path / "absent.yml")) == {}
    assert load_sources(None) == {}


def test_load_sources_accepts_camel_case_keys(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        """
csv_provider:
  sources:
    points:
      url: http://my-site.com/points.csv
      urlGenerator: passthrough
      geometryColumns:
        longitude: lon
        latitude: lat
""",
        encoding="utf-8",
    )

    points = load_sources(str(cfg))["points"]

    assert points.geometry_columns == {"longitude": "lon", "latitude": "lat"}
    assert points.url_generator == "passthrough"
    assert points.extra == {}
    assert points.get("geometryColumns") == {"longitude": "lon", "latitude": "lat"}


def test_load_sources_rejects_both_spellings_of_one_key(tmp_path):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            "csv_provider:",
            "  sources:",
            "    points:",
            "      geometry_columns: {longitude: x, latitude: y}",
            "      geometryColumns: {longitude: lon, latitude: lat}",
        ]),
        encoding="utf-8",
    )

    with pytest.raises(SourceConfigError) as exc:
        load_sources(str(cfg))

    assert exc.value.details["field"] == "geometryColumns"
