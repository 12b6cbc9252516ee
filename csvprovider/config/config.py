from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import yaml

from csvprovider.domain.models import SourceConfig
from csvprovider.errors import SourceConfigError

SOURCES_NAMESPACE = "csv_provider"


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"

    # Logging
    log_level: str = "INFO"

    # HTTP
    timeout_seconds: float = 30.0
    probe_timeout_seconds: float = 10.0
    tls_skip_verify: bool = False
    ca_file: str | None = None


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def parse_float(v: str | None) -> float | None:
    if v is None:
        return None
    return float(v)


def parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def load_settings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {
        "log_dir": _env_get("CSV_PROVIDER_LOG_DIR"),
        "log_level": _env_get("CSV_PROVIDER_LOG_LEVEL"),
        "timeout_seconds": _env_get("CSV_PROVIDER_TIMEOUT_SECONDS"),
        "probe_timeout_seconds": _env_get("CSV_PROVIDER_PROBE_TIMEOUT_SECONDS"),
        "tls_skip_verify": _env_get("CSV_PROVIDER_TLS_SKIP_VERIFY"),
        "ca_file": _env_get("CSV_PROVIDER_CA_FILE"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    # merge config -> env -> cli
    merged = {
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "log_level": cfg.get("log_level", defaults.log_level),
        "timeout_seconds": cfg.get("timeout_seconds", defaults.timeout_seconds),
        "probe_timeout_seconds": cfg.get("probe_timeout_seconds", defaults.probe_timeout_seconds),
        "tls_skip_verify": cfg.get("tls_skip_verify", defaults.tls_skip_verify),
        "ca_file": cfg.get("ca_file", defaults.ca_file),
    }

    # apply env
    if env["log_dir"] is not None:
        merged["log_dir"] = env["log_dir"]
    if env["log_level"] is not None:
        merged["log_level"] = env["log_level"]
    if env["timeout_seconds"] is not None:
        merged["timeout_seconds"] = parse_float(env["timeout_seconds"])
    if env["probe_timeout_seconds"] is not None:
        merged["probe_timeout_seconds"] = parse_float(env["probe_timeout_seconds"])
    if env["tls_skip_verify"] is not None:
        merged["tls_skip_verify"] = parse_bool(env["tls_skip_verify"])
    if env["ca_file"] is not None:
        merged["ca_file"] = env["ca_file"]

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    settings = Settings(
        log_dir=merged["log_dir"],
        log_level=merged["log_level"],
        timeout_seconds=float(merged["timeout_seconds"]),
        probe_timeout_seconds=float(merged["probe_timeout_seconds"]),
        tls_skip_verify=bool(merged["tls_skip_verify"]),
        ca_file=merged["ca_file"],
    )

    return LoadedSettings(settings=settings, sources_used=sources)


def load_sources(config_path: str | None) -> dict[str, SourceConfig]:
    """
    Назначение:
        Читает секцию csv_provider.sources из YAML-конфигурации.

    Выходные данные:
        dict[source_id, SourceConfig]; пустой dict, если файла или секции нет.

    Поведение:
        - Неверная структура секции -> SourceConfigError.
    """
    if not config_path:
        return {}
    cfg = _read_yaml_config(Path(config_path))
    namespace = cfg.get(SOURCES_NAMESPACE) or {}
    if not isinstance(namespace, dict):
        raise SourceConfigError(f"'{SOURCES_NAMESPACE}' must be a mapping")
    raw_sources = namespace.get("sources") or {}
    if not isinstance(raw_sources, dict):
        raise SourceConfigError(f"'{SOURCES_NAMESPACE}.sources' must be a mapping")
    return {str(source_id): SourceConfig.from_dict(str(source_id), raw) for source_id, raw in raw_sources.items()}
