"""
Утилиты для работы со временем.

Все метки времени в базе знаний хранятся в UTC.
pendulum используется для отображения возраста и времени в часовом поясе Гилгит-Балтистана.
"""

from datetime import UTC, datetime

import pendulum

# Часовой пояс Пакистана (PKT, UTC+5)
PKT_TZ = 'Asia/Karachi'


def utc_now() -> datetime:
    """
    Текущее время в UTC (timezone-aware)
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Приводит метку времени к UTC; наивные значения считаются UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_local(value: datetime) -> str:
    """
    Форматирует метку времени для человека в часовом поясе PKT.

    Returns:
        Строка вида "2026-10-18 14:05 PKT"
    """
    return pendulum.instance(ensure_utc(value)).in_timezone(PKT_TZ).format('YYYY-MM-DD HH:mm') + ' PKT'


def format_age(value: datetime) -> str:
    """
    Возраст метки времени относительно текущего момента ("2 hours ago")
    """
    return pendulum.instance(ensure_utc(value)).diff_for_humans()


def format_duration(seconds: float) -> str:
    """
    Длительность в виде "3h 12m"
    """
    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f'{hours}h {minutes}m'
