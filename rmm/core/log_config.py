"""
Настройка structlog для RMM engine

Модули получают logger через structlog.get_logger(__name__) и пишут
события в форме: logger.info("event_name", key=value, ...).
configure_logging вызывается один раз встраивающим приложением
(симуляцией, тестами); без вызова действуют настройки structlog по умолчанию.
"""

import logging
from typing import Union

import structlog


def configure_logging(level: Union[int, str] = logging.INFO, json: bool = False) -> None:
    """
    Конфигурация structlog processors.

    Args:
        level: Минимальный уровень событий (int или имя, например "DEBUG")
        json: JSON renderer вместо консольного
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
