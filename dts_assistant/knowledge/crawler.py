"""
- оркестратор обхода сайта

Полный обход:
1. Карта сайта разворачивается в список (в глубину, родитель перед детьми)
2. Первым добавляется корень сайта
3. Страницы загружаются строго последовательно с паузой 2 секунды

Выборочный обход:
- только динамические секции из переданного списка, пауза 1 секунда

Ошибка одной страницы логируется и пропускается, обход продолжается.
Параллельных запросов нет: сайт государственный и маломощный.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dts_assistant.knowledge.classifier import classify
from dts_assistant.knowledge.extractor import ContentExtractor, page_title, parse_html
from dts_assistant.knowledge.fetcher import FetchFailure, PageFetcher
from dts_assistant.knowledge.models import ScrapedPage, SiteMapNode
from dts_assistant.knowledge.site_map import (
    BASE_URL,
    DTS_SITE_MAP,
    ROOT_SECTION,
    CrawlTarget,
    flatten_site_map,
)
from dts_assistant.logging_config import get_logger
from dts_assistant.time_utils import utc_now

logger = get_logger(__name__)

RecordCallback = Callable[[ScrapedPage], Awaitable[None]]


@dataclass
class CrawlResult:
    """
    Результат обхода.

    Attributes:
        records: Записи успешно обработанных страниц (в порядке обхода)
        errors: Неудачные узлы
        stats: Статистика обхода
    """

    records: list[ScrapedPage] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)

    def add_record(self, record: ScrapedPage) -> None:
        self.records.append(record)

    def add_error(self, url: str, section: str, error: str) -> None:
        self.errors.append(
            {
                'url': url,
                'section': section,
                'error': error,
                'timestamp': utc_now().isoformat(),
            }
        )

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class CrawlOrchestrator:
    """
    Обходит карту сайта: загрузка -> классификация -> извлечение для каждого узла.

    Attributes:
        fetcher: Открытый загрузчик страниц
        site_map: Карта сайта
        delay: Пауза между запросами полного обхода (секунды)
        selective_delay: Пауза между запросами выборочного обхода (секунды)
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        site_map: tuple[SiteMapNode, ...] | list[SiteMapNode] = DTS_SITE_MAP,
        base_url: str = BASE_URL,
        root_section: str = ROOT_SECTION,
        delay: float = 2.0,
        selective_delay: float = 1.0,
        extractor: ContentExtractor | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.fetcher = fetcher
        self.site_map = tuple(site_map)
        self.base_url = base_url
        self.root_section = root_section
        self.delay = delay
        self.selective_delay = selective_delay
        self.extractor = extractor or ContentExtractor()
        self._sleep = sleep
        self._clock = clock

    def crawl_plan(
        self, site_map: tuple[SiteMapNode, ...] | list[SiteMapNode] | None = None
    ) -> list[CrawlTarget]:
        """
        Список узлов полного обхода: корень сайта, затем карта сайта
        """
        targets = flatten_site_map(self.site_map if site_map is None else site_map)
        targets.insert(0, CrawlTarget(url=self.base_url, section=self.root_section))
        return targets

    def selective_plan(self, section_names: list[str]) -> list[CrawlTarget]:
        """
        Узлы выборочного обхода: только динамические секции из списка
        """
        wanted = set(section_names)
        targets: list[CrawlTarget] = []
        seen: set[str] = set()

        for target in flatten_site_map(self.site_map):
            if target.section not in wanted or target.section in seen:
                continue
            if not target.is_dynamic:
                logger.info('selective_skip_static_section', section=target.section)
                continue
            seen.add(target.section)
            targets.append(
                CrawlTarget(
                    url=target.refresh_url or target.url,
                    section=target.section,
                    parent_section=target.parent_section,
                    is_dynamic=True,
                    refresh_url=target.refresh_url,
                )
            )

        unknown = wanted - {t.section for t in flatten_site_map(self.site_map)}
        if unknown:
            logger.warning('selective_unknown_sections', sections=sorted(unknown))

        return targets

    async def scrape_page(self, target: CrawlTarget) -> ScrapedPage | FetchFailure:
        """
        Загружает и разбирает одну страницу.

        Returns:
            ScrapedPage или FetchFailure, если страницу загрузить не удалось
        """
        fetched = await self.fetcher.fetch(target.url)
        if isinstance(fetched, FetchFailure):
            return fetched

        soup = parse_html(fetched.html)
        category = classify(target.url, target.section)
        content = self.extractor.extract(soup, category, target.url, target.section)

        return ScrapedPage(
            url=target.url,
            title=page_title(soup, target.section),
            scraped_at=self._clock(),
            section=target.section,
            parent_section=target.parent_section,
            content=content,
        )

    async def _crawl(
        self,
        targets: list[CrawlTarget],
        delay: float,
        on_record: RecordCallback | None = None,
    ) -> CrawlResult:
        result = CrawlResult()
        result.stats['started_at'] = self._clock().isoformat()
        result.stats['total_urls'] = len(targets)

        for index, target in enumerate(targets):
            logger.info(
                'crawl_page',
                position=f'{index + 1}/{len(targets)}',
                url=target.url,
                section=target.section,
            )

            try:
                outcome = await self.scrape_page(target)
            except Exception as e:
                logger.error('crawl_page_error', url=target.url, section=target.section, error=str(e))
                result.add_error(target.url, target.section, str(e))
                outcome = None

            if isinstance(outcome, FetchFailure):
                logger.warning('crawl_page_skipped', section=target.section, reason=str(outcome))
                result.add_error(target.url, target.section, str(outcome))
            elif outcome is not None:
                result.add_record(outcome)
                if on_record is not None:
                    await on_record(outcome)

            if index < len(targets) - 1:
                await self._sleep(delay)

        result.stats['finished_at'] = self._clock().isoformat()
        result.stats['success_count'] = result.success_count
        result.stats['error_count'] = result.error_count

        logger.info(
            'crawl_finished',
            scraped=result.success_count,
            failed=result.error_count,
            total=len(targets),
        )
        return result

    async def crawl_all(
        self, site_map: tuple[SiteMapNode, ...] | list[SiteMapNode] | None = None
    ) -> CrawlResult:
        """
        Полный обход карты сайта.

        Args:
            site_map: Карта сайта (по умолчанию - заданная при создании)

        Returns:
            CrawlResult с записями в порядке обхода
        """
        targets = self.crawl_plan(site_map)
        logger.info('crawl_started', mode='full', urls=len(targets), delay=self.delay)
        return await self._crawl(targets, self.delay)

    async def crawl_sections(
        self,
        section_names: list[str],
        on_record: RecordCallback | None = None,
    ) -> CrawlResult:
        """
        Выборочный обход динамических секций.

        Args:
            section_names: Имена устаревших секций
            on_record: Вызывается после каждой успешной страницы
                (для записи в хранилище по одной секции)

        Returns:
            CrawlResult с обновлёнными записями
        """
        targets = self.selective_plan(section_names)
        logger.info(
            'crawl_started',
            mode='selective',
            sections=[t.section for t in targets],
            delay=self.selective_delay,
        )
        return await self._crawl(targets, self.selective_delay, on_record=on_record)
