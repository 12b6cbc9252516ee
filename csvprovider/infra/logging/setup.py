from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_LOGGER_NAME = "csvProvider"


class EnsureFieldsFilter(logging.Filter):
    """
    Назначение:
        Гарантирует наличие полей runId и component в LogRecord,
        чтобы форматтер не падал KeyError.

    Входные данные:
        runId: str
            Идентификатор запуска.
        defaultComponent: str
            Компонент по умолчанию, если не задан.
    """

    def __init__(self, runId: str, defaultComponent: str = "core"):
        super().__init__()
        self.runId = runId
        self.defaultComponent = defaultComponent

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "runId"):
            record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = self.defaultComponent
        return True


def mapLogLevel(levelName: str) -> int:
    """
    Назначение:
        Преобразует строковый уровень логирования в logging level.

    Входные данные:
        levelName: str
            ERROR|WARN|INFO|DEBUG

    Выходные данные:
        int
    """
    value = (levelName or "").strip().upper()
    if value == "ERROR":
        return logging.ERROR
    if value in ("WARN", "WARNING"):
        return logging.WARNING
    if value == "INFO":
        return logging.INFO
    if value == "DEBUG":
        return logging.DEBUG
    raise ValueError(f"Unsupported log level: {levelName}")


def getDefaultLogger() -> logging.Logger:
    """Логгер для компонентов, которым не передали логгер команды."""
    return logging.getLogger(DEFAULT_LOGGER_NAME)


def createCommandLogger(commandName: str, logDir: str, runId: str, logLevel: str) -> tuple[logging.Logger, str]:
    """
    Назначение:
        Создаёт логгер для конкретной команды и возвращает путь к log-файлу.

    Входные данные:
        commandName: str
        logDir: str
        runId: str
        logLevel: str

    Выходные данные:
        (logger, logFilePath)
    """
    Path(logDir).mkdir(parents=True, exist_ok=True)

    logFilePath = str(Path(logDir) / f"{commandName}_{runId}.log")

    loggerName = f"{DEFAULT_LOGGER_NAME}.{commandName}.{runId}"
    logger = logging.getLogger(loggerName)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    level = mapLogLevel(logLevel)
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s msg=%(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    fileHandler = logging.FileHandler(logFilePath, encoding="utf-8")
    fileHandler.setLevel(level)
    fileHandler.setFormatter(formatter)
    fileHandler.addFilter(EnsureFieldsFilter(runId=runId))
    logger.addHandler(fileHandler)

    return logger, logFilePath


def closeCommandLogger(logger: logging.Logger) -> None:
    """Закрывает файловые хендлеры логгера команды."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def logEvent(
    logger: logging.Logger,
    level: int,
    runId: str,
    component: str,
    message: str,
    exc_info: bool = False,
) -> None:
    """
    Назначение:
        Унифицированная запись событий с runId/component.

    Входные данные:
        logger: logging.Logger
        level: int
        runId: str
        component: str
        message: str
        exc_info: bool
            Добавить traceback текущего исключения.
    """
    logger.log(level, message, exc_info=exc_info, extra={"runId": runId, "component": component})
