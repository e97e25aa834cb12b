"""
Модуль структурированного логирования на основе structlog.

Режимы работы:
- DEBUG/development: цветной вывод в консоль
- PRODUCTION: структурированный JSON-формат для машинной обработки

Использование:
    from dts_assistant.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info('crawl_started', urls=17, delay=2.0)
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import Processor

# определяем режим работы из переменных окружения
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = os.getenv('LOG_FORMAT', 'console')  # "console" | "json"

APP_NAME = 'dts-assistant'


def _add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Добавляет имя приложения в каждое сообщение
    """
    event_dict['app'] = APP_NAME
    return event_dict


def _order_keys(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Упорядочивает ключи: timestamp, level, event, logger, остальное по алфавиту
    """
    ordered = {}

    for key in ('timestamp', 'level', 'event', 'logger'):
        if key in event_dict:
            ordered[key] = event_dict.pop(key)

    for key in sorted(event_dict.keys()):
        ordered[key] = event_dict[key]

    return ordered


def _get_console_processors() -> list[Processor]:
    """
    Процессоры для вывода в консоль (dev режим)
    """
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='%H:%M:%S', utc=False),
        _add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def _get_json_processors() -> list[Processor]:
    """
    Процессоры для JSON-вывода (production режим)
    """
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
        _add_app_context,
        _order_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(ensure_ascii=False),
    ]


def _configure_stdlib_logging(level: int) -> None:
    """
    Настройка стандартного logging: httpx и прочие библиотеки пишут через него
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    logging.basicConfig(
        format='%(message)s',
        level=level,
        handlers=[handler],
        force=True,
    )

    # понижаем уровень для шумных библиотек
    for logger_name in ('httpx', 'httpcore', 'asyncio'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def configure_logging() -> None:
    """
    Инициализирует структурированное логирование.

    Логи пишутся в stderr, чтобы не смешиваться с выводом CLI-команд.
    LOG_FORMAT=json включает JSON-формат, иначе используется консольный.
    """
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    _configure_stdlib_logging(level)

    if LOG_FORMAT == 'json':
        processors = _get_json_processors()
    else:
        processors = _get_console_processors()

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Получает настроенный logger

    Args:
        name: Имя модуля (обычно __name__)

    Пример:
        logger = get_logger(__name__)
        logger.info('page_fetched', url='https://dtsgb.gog.pk/fees', status=200)
    """
    return structlog.get_logger(name or 'dts_assistant')


def bind_context(**kwargs: Any) -> None:
    """
    Привязывает контекст ко всем последующим сообщениям (например, job_id фонового обновления)
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """
    Очищает привязанный контекст
    """
    structlog.contextvars.clear_contextvars()


# автоматически настраиваем при импорте
configure_logging()
