"""
Обновление базы знаний: полный и выборочный обход с записью в хранилище.

Полный обход:
- документ собирается в памяти и записывается один раз в конце
- если обход не дал ни одной записи, выбрасывается CrawlError,
  прежний документ на диске остаётся нетронутым

Выборочный обход:
- каждая обновлённая секция записывается сразу (чтение -> замена -> запись),
  поэтому прерванный обход оставляет частично обновлённый документ
- любая ошибка или пустой результат -> полный обход
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, assert_never

from dts_assistant.config import KnowledgeBaseConfig
from dts_assistant.knowledge.crawler import CrawlOrchestrator, CrawlResult
from dts_assistant.knowledge.errors import CrawlError, SelectiveUpdateError
from dts_assistant.knowledge.faq import DEFAULT_FAQ
from dts_assistant.knowledge.fetcher import PageFetcher
from dts_assistant.knowledge.freshness import FreshnessDecision, FreshnessPolicy, RefreshAction
from dts_assistant.knowledge.models import FaqEntry, KnowledgeBaseDocument, ScrapedPage, SiteMapNode
from dts_assistant.knowledge.site_map import BASE_URL, DTS_SITE_MAP, ROOT_SECTION
from dts_assistant.knowledge.store import KnowledgeBaseStore
from dts_assistant.logging_config import get_logger
from dts_assistant.time_utils import utc_now

logger = get_logger(__name__)


@dataclass
class UpdateResult:
    """
    Итог обновления.

    Attributes:
        action: Выполненное действие (после возможного перехода к полному обходу)
        document: Документ после обновления (для NONE - текущий)
        refreshed_sections: Секции, записи которых были обновлены
        errors: Неудачные узлы обхода
        fell_back: Выборочный обход не удался и был заменён полным
    """

    action: RefreshAction
    document: KnowledgeBaseDocument | None = None
    refreshed_sections: list[str] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    fell_back: bool = False

    @property
    def records_count(self) -> int:
        return len(self.refreshed_sections)


class KnowledgeBaseUpdater:
    """
    Выполняет решения политики свежести.

    Пример:
        updater = KnowledgeBaseUpdater.from_config(get_kb_config())
        result = await updater.check_and_update()
    """

    def __init__(
        self,
        store: KnowledgeBaseStore,
        fetcher_factory: Callable[[], PageFetcher] = PageFetcher,
        site_map: tuple[SiteMapNode, ...] | list[SiteMapNode] = DTS_SITE_MAP,
        base_url: str = BASE_URL,
        root_section: str = ROOT_SECTION,
        delay: float = 2.0,
        selective_delay: float = 1.0,
        faq: tuple[FaqEntry, ...] | list[FaqEntry] = DEFAULT_FAQ,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.site_map = tuple(site_map)
        self.base_url = base_url
        self.root_section = root_section
        self.delay = delay
        self.selective_delay = selective_delay
        self.faq = tuple(faq)
        self._fetcher_factory = fetcher_factory
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(cls, config: KnowledgeBaseConfig, **overrides: Any) -> 'KnowledgeBaseUpdater':
        """
        Создаёт обновлятель из конфигурации
        """
        options: dict[str, Any] = {
            'store': KnowledgeBaseStore(config.storage.knowledge_base_path),
            'fetcher_factory': lambda: PageFetcher(
                user_agent=config.crawl.user_agent,
                timeout=config.crawl.request_timeout,
            ),
            'base_url': config.site.base_url,
            'root_section': config.site.root_section,
            'delay': config.crawl.delay_seconds,
            'selective_delay': config.crawl.selective_delay_seconds,
        }
        options.update(overrides)
        return cls(**options)

    def _orchestrator(self, fetcher: PageFetcher) -> CrawlOrchestrator:
        return CrawlOrchestrator(
            fetcher,
            site_map=self.site_map,
            base_url=self.base_url,
            root_section=self.root_section,
            delay=self.delay,
            selective_delay=self.selective_delay,
            sleep=self._sleep,
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Полный обход
    # ------------------------------------------------------------------

    def build_document(
        self,
        records: list[ScrapedPage],
        previous: KnowledgeBaseDocument | None = None,
    ) -> KnowledgeBaseDocument:
        """
        Собирает документ из записей полного обхода.

        Повторная секция (узел встречается в карте дважды) заменяет
        предыдущую запись на её месте.
        """
        now = self._clock()
        if previous is not None and previous.last_updated > now:
            now = previous.last_updated

        document = KnowledgeBaseDocument(
            last_updated=now,
            base_url=self.base_url,
            sections=list(self.site_map),
            faq=list(self.faq),
        )
        for record in records:
            document.replace_source(record)
        return document

    async def full_update(self) -> UpdateResult:
        """
        Полный обход и замена документа целиком.

        Raises:
            CrawlError: Обход не дал ни одной записи
            StoreWriteError: Ошибка записи
        """
        logger.info('full_update_started', base_url=self.base_url)

        async with self._fetcher_factory() as fetcher:
            crawl = await self._orchestrator(fetcher).crawl_all()

        if not crawl.records:
            raise CrawlError(
                'Full crawl produced no records, keeping previous knowledge base',
                details={'errors': crawl.error_count},
            )

        document = self.build_document(crawl.records, previous=self.store.load())
        self.store.write(document)

        logger.info(
            'full_update_finished',
            sources=len(document.sources),
            failed=crawl.error_count,
        )
        return UpdateResult(
            action=RefreshAction.FULL,
            document=document,
            refreshed_sections=[source.section for source in document.sources],
            errors=crawl.errors,
        )

    # ------------------------------------------------------------------
    # Выборочный обход
    # ------------------------------------------------------------------

    async def _write_section(self, record: ScrapedPage) -> None:
        document = self.store.read()
        document.replace_source(record)
        document.touch(self._clock())
        self.store.write(document)
        logger.info('section_updated', section=record.section)

    async def _crawl_sections(self, section_names: list[str]) -> CrawlResult:
        async with self._fetcher_factory() as fetcher:
            crawl = await self._orchestrator(fetcher).crawl_sections(
                section_names, on_record=self._write_section
            )
        if not crawl.records:
            raise SelectiveUpdateError(
                'Selective crawl produced no records',
                details={'sections': section_names, 'errors': crawl.error_count},
            )
        return crawl

    async def selective_update(self, section_names: list[str]) -> UpdateResult:
        """
        Обновляет только указанные динамические секции.

        При любой ошибке выполняется полный обход.

        Args:
            section_names: Устаревшие секции

        Returns:
            UpdateResult (fell_back=True, если пришлось делать полный обход)
        """
        logger.info('selective_update_started', sections=section_names)

        try:
            crawl = await self._crawl_sections(section_names)
        except Exception as e:
            logger.warning(
                'selective_update_fallback',
                sections=section_names,
                error=str(e),
                error_type=type(e).__name__,
            )
            result = await self.full_update()
            result.fell_back = True
            return result

        refreshed = [record.section for record in crawl.records]
        logger.info('selective_update_finished', sections=refreshed, failed=crawl.error_count)
        return UpdateResult(
            action=RefreshAction.SELECTIVE,
            document=self.store.load(),
            refreshed_sections=refreshed,
            errors=crawl.errors,
        )

    # ------------------------------------------------------------------
    # Выполнение решения
    # ------------------------------------------------------------------

    async def run(self, decision: FreshnessDecision) -> UpdateResult:
        """
        Выполняет решение политики свежести
        """
        match decision.action:
            case RefreshAction.FULL:
                return await self.full_update()
            case RefreshAction.SELECTIVE:
                return await self.selective_update(decision.stale_sections)
            case RefreshAction.NONE:
                return UpdateResult(action=RefreshAction.NONE, document=self.store.load())
            case _:
                assert_never(decision.action)

    async def check_and_update(self, policy: FreshnessPolicy | None = None) -> UpdateResult:
        """
        Проверяет свежесть документа и выполняет нужное обновление
        """
        policy = policy or FreshnessPolicy(site_map=self.site_map, clock=self._clock)
        decision = policy.decide(self.store.load())
        return await self.run(decision)
