"""
Политика свежести базы знаний.

Таблица решений (проверяется сверху вниз):

┌───────────┬────────────────────┬──────────────────────┬──────────────┬───────────────────┐
│ Документ  │ Нет обязательной   │ Динамическая секция  │ Возраст > 4ч │ Действие          │
│           │ секции             │ устарела (> 30 мин)  │              │                   │
├───────────┼────────────────────┼──────────────────────┼──────────────┼───────────────────┤
│ нет       │ -                  │ -                    │ -            │ полный обход      │
│ есть      │ да                 │ -                    │ -            │ полный обход      │
│ есть      │ нет                │ да                   │ -            │ выборочный обход  │
│ есть      │ нет                │ нет                  │ да           │ полный обход      │
│ есть      │ нет                │ нет                  │ нет          │ ничего (кеш)      │
└───────────┴────────────────────┴──────────────────────┴──────────────┴───────────────────┘

Динамическая секция проверяется по scrapedAt её записи; секции без записи
в устаревшие не попадают (их отсутствие ловит проверка обязательных секций).
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

from dts_assistant.knowledge.models import KnowledgeBaseDocument, SiteMapNode
from dts_assistant.knowledge.site_map import DTS_SITE_MAP, REQUIRED_SECTIONS, dynamic_sections
from dts_assistant.logging_config import get_logger
from dts_assistant.time_utils import ensure_utc, utc_now

logger = get_logger(__name__)


class RefreshAction(StrEnum):
    """
    Что нужно сделать с базой знаний
    """

    FULL = 'full'
    SELECTIVE = 'selective'
    NONE = 'none'


@dataclass(frozen=True)
class FreshnessDecision:
    """
    Решение политики свежести.

    Attributes:
        action: Действие
        stale_sections: Устаревшие динамические секции (для выборочного обхода)
        missing_sections: Отсутствующие обязательные секции
        reason: Причина решения (для логов и отчётов)
    """

    action: RefreshAction
    reason: str
    stale_sections: list[str] = field(default_factory=list)
    missing_sections: list[str] = field(default_factory=list)

    @property
    def needs_refresh(self) -> bool:
        return self.action != RefreshAction.NONE


class FreshnessPolicy:
    """
    Решает, нужен ли полный, выборочный обход или ничего.
    """

    def __init__(
        self,
        static_max_age: timedelta = timedelta(hours=4),
        dynamic_max_age: timedelta = timedelta(minutes=30),
        required_sections: tuple[str, ...] | list[str] = REQUIRED_SECTIONS,
        site_map: tuple[SiteMapNode, ...] | list[SiteMapNode] = DTS_SITE_MAP,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.static_max_age = static_max_age
        self.dynamic_max_age = dynamic_max_age
        self.required_sections = tuple(required_sections)
        self.dynamic_sections = tuple(dynamic_sections(site_map))
        self._clock = clock

    def missing_sections(self, document: KnowledgeBaseDocument) -> list[str]:
        present = document.present_sections()
        return [section for section in self.required_sections if section not in present]

    def stale_dynamic_sections(
        self,
        document: KnowledgeBaseDocument,
        now: datetime,
        max_age: timedelta | None = None,
    ) -> list[str]:
        """
        Динамические секции, запись которых старше порога
        """
        threshold = self.dynamic_max_age if max_age is None else max_age
        stale = []
        for section in self.dynamic_sections:
            record = document.source_for(section)
            if record is None:
                continue
            if now - ensure_utc(record.scraped_at) > threshold:
                stale.append(section)
        return stale

    def decide(
        self,
        document: KnowledgeBaseDocument | None,
        now: datetime | None = None,
    ) -> FreshnessDecision:
        """
        Применяет таблицу решений.

        Args:
            document: Документ из хранилища (None - документа нет или он не читается)
            now: Текущее время (по умолчанию - часы политики)

        Returns:
            FreshnessDecision
        """
        now = ensure_utc(now or self._clock())
        decision = self._decide(document, now)
        logger.info(
            'freshness_decision',
            action=decision.action.value,
            reason=decision.reason,
            stale_sections=decision.stale_sections,
            missing_sections=decision.missing_sections,
        )
        return decision

    def _decide(self, document: KnowledgeBaseDocument | None, now: datetime) -> FreshnessDecision:
        if document is None:
            return FreshnessDecision(RefreshAction.FULL, reason='knowledge base does not exist')

        missing = self.missing_sections(document)
        if missing:
            return FreshnessDecision(
                RefreshAction.FULL,
                reason='required sections missing',
                missing_sections=missing,
            )

        stale = self.stale_dynamic_sections(document, now)
        if stale:
            return FreshnessDecision(
                RefreshAction.SELECTIVE,
                reason='dynamic sections stale',
                stale_sections=stale,
            )

        age = now - ensure_utc(document.last_updated)
        if age > self.static_max_age:
            return FreshnessDecision(RefreshAction.FULL, reason='knowledge base older than static threshold')

        return FreshnessDecision(RefreshAction.NONE, reason='knowledge base is fresh')
