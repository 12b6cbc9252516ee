from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import httpx
import typer

from csvprovider.common.run_id import generate_run_id
from csvprovider.config.config import Settings, load_settings, load_sources
from csvprovider.domain.models import SourceConfig
from csvprovider.errors import AppError, SourceConfigError
from csvprovider.infra.http.url_classifier import UrlProbe, is_url_shaped
from csvprovider.infra.logging.setup import closeCommandLogger, createCommandLogger, logEvent
from csvprovider.infra.sources.content_reader import ContentReader
from csvprovider.usecases.get_data_usecase import GetDataUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)


def buildHttpClient(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """
    Назначение:
        Общий AsyncClient для проверок HEAD и загрузки CSV.

    Входные данные:
        settings: Settings
        transport: httpx.AsyncBaseTransport | None
            Подмена транспорта (тесты).
    """
    verify: bool | str = True
    if settings.tls_skip_verify:
        verify = False
    elif settings.ca_file:
        verify = settings.ca_file
    return httpx.AsyncClient(
        timeout=settings.timeout_seconds,
        verify=verify,
        follow_redirects=True,
        transport=transport,
    )


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает сводку параметров запуска в stderr, чтобы не смешивать с GeoJSON в stdout.
    """
    typer.echo(
        f"run_id={runId} command={command} log_level={settings.log_level} "
        f"timeout_seconds={settings.timeout_seconds} probe_timeout_seconds={settings.probe_timeout_seconds} "
        f"sources={sources}",
        err=True,
    )


def loadSourcesOrExit(configPath: str | None) -> dict[str, SourceConfig]:
    try:
        return load_sources(configPath)
    except SourceConfigError as exc:
        typer.echo(f"ERROR: invalid source configuration: {exc.message}", err=True)
        raise typer.Exit(code=2)


def runWithLogger(ctx: typer.Context, commandName: str, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - пишет старт/завершение команды
        - гарантирует закрытие файла лога в finally

    Поведение:
        - runner(logger) возвращает exit code; ненулевой код завершает процесс.
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    exitCode = 0
    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        exitCode = runner(logger)
    finally:
        logEvent(logger, logging.INFO, runId, "core", f"Command finished exit_code={exitCode} log={logFilePath}")
        closeCommandLogger(logger)

    if exitCode:
        raise typer.Exit(code=exitCode)


def runGetDataCommand(
    ctx: typer.Context,
    sourceId: str,
    outputPath: str | None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]
    sources = loadSourcesOrExit(ctx.obj["configPath"])

    def execute(logger: logging.Logger) -> int:
        printRunHeader(runId, "get-data", settings, ctx.obj["sources"])
        outcome: dict = {}

        def callback(error: AppError | None, result: dict | None) -> None:
            outcome["error"] = error
            outcome["result"] = result

        async def run() -> None:
            async with buildHttpClient(settings, transport) as client:
                useCase = GetDataUseCase(
                    sources=sources,
                    probe=UrlProbe(client, settings.probe_timeout_seconds, logger, runId),
                    reader=ContentReader(client, settings.timeout_seconds, logger, runId),
                    logger=logger,
                    run_id=runId,
                )
                await useCase.get_data(sourceId, callback)

        asyncio.run(run())

        error = outcome.get("error")
        if error is not None:
            typer.echo(f"ERROR: {error.message}", err=True)
            return 1

        payload = json.dumps(outcome["result"], ensure_ascii=False)
        if outputPath:
            Path(outputPath).write_text(payload, encoding="utf-8")
            logEvent(logger, logging.INFO, runId, "core", f"FeatureCollection written: {outputPath}")
        else:
            typer.echo(payload)
        return 0

    runWithLogger(ctx, "get-data", execute)


def runCheckUrlCommand(ctx: typer.Context, url: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger: logging.Logger) -> int:
        if not is_url_shaped(url):
            typer.echo(f"url={url} url_shaped=false reachable=false")
            return 1

        async def run() -> bool:
            async with buildHttpClient(settings, transport) as client:
                return await UrlProbe(client, settings.probe_timeout_seconds, logger, runId).is_reachable(url)

        reachable = asyncio.run(run())
        typer.echo(f"url={url} url_shaped=true reachable={str(reachable).lower()}")
        return 0 if reachable else 1

    runWithLogger(ctx, "check-url", execute)


def describeSource(sourceConfig: SourceConfig) -> str:
    if sourceConfig.url_generator:
        return f"generator={sourceConfig.url_generator} url={sourceConfig.url}"
    if sourceConfig.url and sourceConfig.has_path:
        return "ambiguous (url and path)"
    if sourceConfig.url:
        return f"url={sourceConfig.url}"
    if sourceConfig.has_path:
        return f"path={sourceConfig.path}"
    return "unset"


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="CSV fetch timeout in seconds"),
    probeTimeoutSeconds: float | None = typer.Option(
        None, "--probe-timeout-seconds", help="URL liveness check timeout in seconds"
    ),
    tlsSkipVerify: bool | None = typer.Option(None, "--tls-skip-verify", help="Disable TLS verification"),
    caFile: str | None = typer.Option(None, "--ca-file", help="CA file path"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "timeout_seconds": timeoutSeconds,
        "probe_timeout_seconds": probeTimeoutSeconds,
        "tls_skip_verify": tlsSkipVerify,
        "ca_file": caFile,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command("get-data")
def getData(
    ctx: typer.Context,
    sourceId: str = typer.Argument(..., help="Source id from csv_provider.sources"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write FeatureCollection to file"),
):
    runGetDataCommand(ctx, sourceId, output)


@app.command("sources")
def listSources(ctx: typer.Context):
    sources = loadSourcesOrExit(ctx.obj["configPath"])
    for sourceId in sorted(sources):
        typer.echo(f"{sourceId}: {describeSource(sources[sourceId])}")


@app.command("check-url")
def checkUrl(ctx: typer.Context, url: str = typer.Argument(..., help="URL to check with HEAD")):
    runCheckUrlCommand(ctx, url)
