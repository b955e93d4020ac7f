# app/core/logging.py
import logging
import os
import sys
from typing import Any, Optional

from loguru import logger

from app.core.config import settings

# Loggers de librerías que redirigimos a loguru
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
)


class InterceptHandler(logging.Handler):
    """
    Redirige los logs de logging estándar a loguru.
    """
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        # sube en la pila hasta salir de logging/__init__.py
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(
            depth=depth,
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(
    *,
    json_logs: bool = False,
    log_file: bool = True,
    log_dir: Optional[str] = None,
) -> None:
    """
    Config global:
    - Intercepta logging estándar (uvicorn, fastapi, httpx)
    - Consola: todos los niveles
    - Ficheros:
        - app_YYYY-MM-DD.log   → INFO y WARNING
        - error_YYYY-MM-DD.log → ERROR y superiores
    """
    logging.root.handlers = []
    logging.root.setLevel(logging.INFO)

    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False

    logger.remove()

    if json_logs:
        # {extra} lleva el contexto de get_logger(...) y de logger.info(..., k=v)
        fmt = (
            '{{"time":"{time}","level":"{level}","message":{message!r},'
            '"name":"{name}","function":"{function}","line":{line},"extra":"{extra}"}}'
        )
    else:
        fmt = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> | {extra}"
        )

    logger.add(
        sys.stdout,
        format=fmt,
        level="INFO",
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        target_dir = log_dir or settings.LOG_DIR
        os.makedirs(target_dir, exist_ok=True)

        app_log_path = os.path.join(target_dir, "app_{time:YYYY-MM-DD}.log")
        error_log_path = os.path.join(target_dir, "error_{time:YYYY-MM-DD}.log")

        # INFO / WARNING → app_YYYY-MM-DD.log
        logger.add(
            app_log_path,
            format=fmt,
            level="INFO",
            filter=lambda record: record["level"].no < 40,  # < ERROR (40)
            rotation="00:00",
            retention="7 days",
            compression="zip",
            enqueue=True,
        )

        # Solo errores y críticos → error_YYYY-MM-DD.log
        logger.add(
            error_log_path,
            format=fmt,
            level="ERROR",
            rotation="00:00",
            retention="30 days",       # errores los dejamos más tiempo
            compression="zip",
            enqueue=True,
        )


def get_logger(**binds: Any):
    """
    Helper para obtener un logger con contexto extra.
    Ej: logger = get_logger(module="inspection_wizard")
    """
    return logger.bind(**binds)
