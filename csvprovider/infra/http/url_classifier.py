from __future__ import annotations

import logging
from typing import Any

import httpx

from csvprovider.common.sanitize import maskUrlCredentials
from csvprovider.infra.logging.setup import getDefaultLogger, logEvent

URL_SCHEMES = ("http", "https")


def is_url_shaped(candidate: Any) -> bool:
    """
    Назначение:
        Синтаксическая проверка: похожа ли строка на абсолютный сетевой URL.
    Контракт:
        - Без I/O.
        - True только для http/https с непустым хостом.
    """
    if not isinstance(candidate, str) or not candidate.strip():
        return False
    try:
        url = httpx.URL(candidate)
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    return url.scheme in URL_SCHEMES and bool(url.host)


class UrlProbe:
    """
    Назначение/ответственность:
        Быстрая проверка доступности URL запросом HEAD.
    Ограничения:
        - Никогда не бросает исключений: любые сбои логируются и дают False.
        - Клиент не принадлежит пробе, закрывает его вызывающий.
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

    async def is_reachable(self, url: str) -> bool:
        safe_url = maskUrlCredentials(url) if isinstance(url, str) else repr(url)
        kwargs: dict[str, Any] = {"follow_redirects": True}
        if self._timeout_seconds is not None:
            kwargs["timeout"] = self._timeout_seconds
        try:
            resp = await self._client.head(url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logEvent(
                self._logger,
                logging.WARNING,
                self._run_id,
                "probe",
                f"URL check failed: {safe_url}: {exc.__class__.__name__}: {exc}",
            )
            return False

        if not resp.is_success:
            logEvent(
                self._logger,
                logging.WARNING,
                self._run_id,
                "probe",
                f"URL check failed: {safe_url}: HTTP {resp.status_code}",
            )
            return False

        logEvent(self._logger, logging.DEBUG, self._run_id, "probe", f"URL reachable: {safe_url}")
        return True
