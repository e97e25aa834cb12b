"""
Отчёт о состоянии базы знаний для мониторинга.

Статусы:
- critical: документа нет, он не читается или нет обязательных секций
- warning: динамические секции старше 2 часов или документ старше 4 часов
- healthy: всё остальное

Коды выхода: 0 - healthy, 1 - warning, 2 - critical (3 - внутренняя ошибка, см. cli.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from dts_assistant.config import FreshnessConfig
from dts_assistant.knowledge.errors import StoreReadError
from dts_assistant.knowledge.freshness import FreshnessPolicy
from dts_assistant.knowledge.store import KnowledgeBaseStore
from dts_assistant.logging_config import get_logger
from dts_assistant.time_utils import ensure_utc, utc_now

if TYPE_CHECKING:
    from dts_assistant.knowledge.service import RefreshJob

logger = get_logger(__name__)


class HealthStatus(StrEnum):
    HEALTHY = 'healthy'
    WARNING = 'warning'
    CRITICAL = 'critical'


EXIT_CODES: dict[HealthStatus, int] = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.WARNING: 1,
    HealthStatus.CRITICAL: 2,
}


@dataclass
class HealthReport:
    """
    Отчёт о состоянии.

    Attributes:
        status: Итоговый статус
        last_updated: Время последней записи документа (None - документа нет)
        time_since_update: Сколько прошло с последней записи
        total_sources: Количество записей обхода
        missing_sections: Отсутствующие обязательные секции
        stale_sections: Устаревшие динамические секции
        recommendations: Рекомендации оператору
        last_refresh_status: Статус последнего фонового обновления (если известен)
    """

    status: HealthStatus = HealthStatus.HEALTHY
    last_updated: datetime | None = None
    time_since_update: timedelta | None = None
    total_sources: int = 0
    missing_sections: list[str] = field(default_factory=list)
    stale_sections: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    last_refresh_status: str | None = None

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.status]


def check_health(
    store: KnowledgeBaseStore,
    now: datetime | None = None,
    freshness: FreshnessConfig | None = None,
    policy: FreshnessPolicy | None = None,
    last_job: RefreshJob | None = None,
) -> HealthReport:
    """
    Проверяет документ в хранилище.

    Args:
        store: Хранилище базы знаний
        now: Текущее время (для тестов)
        freshness: Пороги устаревания
        policy: Политика свежести (источник обязательных и динамических секций)
        last_job: Последнее фоновое обновление сервиса

    Returns:
        HealthReport
    """
    now = ensure_utc(now or utc_now())
    freshness = freshness or FreshnessConfig()
    policy = policy or FreshnessPolicy(
        static_max_age=freshness.static_max_age,
        dynamic_max_age=freshness.dynamic_max_age,
    )
    report = HealthReport()

    if last_job is not None:
        report.last_refresh_status = last_job.status.value
        if last_job.error:
            report.recommendations.append(f'Last background refresh failed: {last_job.error}')

    try:
        document = store.read()
    except StoreReadError as e:
        report.status = HealthStatus.CRITICAL
        if store.exists():
            report.recommendations.append(f'Knowledge base is unreadable ({e.message}) - run full update')
        else:
            report.recommendations.append('Knowledge base file not found - run initial scraping')
        logger.warning('health_check_critical', reason=e.message)
        return report

    report.last_updated = document.last_updated
    report.time_since_update = now - ensure_utc(document.last_updated)
    report.total_sources = len(document.sources)
    report.missing_sections = policy.missing_sections(document)
    report.stale_sections = policy.stale_dynamic_sections(
        document, now, max_age=freshness.health_dynamic_max_age
    )

    if report.missing_sections:
        report.status = HealthStatus.CRITICAL
        report.recommendations.append(
            f'Missing critical sections: {", ".join(report.missing_sections)}'
        )
    elif report.stale_sections:
        report.status = HealthStatus.WARNING
        report.recommendations.append(
            f'Stale dynamic content: {", ".join(report.stale_sections)}'
        )
    elif report.time_since_update > freshness.static_max_age:
        report.status = HealthStatus.WARNING
        report.recommendations.append('Knowledge base is older than 4 hours')

    if report.time_since_update > freshness.health_full_update_age:
        report.recommendations.append('Consider running full knowledge base update')
    elif report.stale_sections:
        report.recommendations.append('Run selective update for dynamic content')

    logger.info(
        'health_check',
        status=report.status.value,
        sources=report.total_sources,
        missing=report.missing_sections,
        stale=report.stale_sections,
    )
    return report
