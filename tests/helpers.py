"""
Вспомогательные классы и фабрики для тестов базы знаний.

Сеть не используется: страницы отдаёт httpx.MockTransport,
паузы между запросами заменены записывающей заглушкой.
"""

from datetime import UTC, datetime, timedelta

import httpx

from dts_assistant.knowledge.fetcher import PageFetcher
from dts_assistant.knowledge.models import (
    GeneralContent,
    KnowledgeBaseDocument,
    ScrapedPage,
    SiteMapNode,
)
from dts_assistant.knowledge.site_map import REQUIRED_SECTIONS

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

TEST_BASE_URL = 'https://dts.test/'


class RecordingSleep:
    """Заглушка asyncio.sleep: не ждёт, запоминает паузы"""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeSite:
    """
    Сайт в памяти: URL -> HTML, код ответа или исключение.

    Неизвестный URL отвечает 404.
    """

    def __init__(self, pages: dict[str, str | int | Exception] | None = None):
        self.pages = dict(pages or {})
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)

        page = self.pages.get(url)
        if page is None:
            return httpx.Response(404)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, int):
            return httpx.Response(page)
        return httpx.Response(200, html=page)

    def fetcher(self) -> PageFetcher:
        return PageFetcher(transport=httpx.MockTransport(self.handler))


class FixedClock:
    """Часы, которые двигаются только вручную"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def page(body: str, title: str = 'DTS Test Page') -> str:
    return f'<html><head><title>{title}</title></head><body>{body}</body></html>'


def make_record(
    section: str,
    scraped_at: datetime = NOW,
    url: str | None = None,
    parent_section: str | None = None,
) -> ScrapedPage:
    url = url or f'{TEST_BASE_URL}{section.lower().replace(" ", "-").replace("&", "and")}'
    return ScrapedPage(
        url=url,
        title=section,
        scraped_at=scraped_at,
        section=section,
        parent_section=parent_section,
        content=GeneralContent(section=section, url=url),
    )


def make_document(
    last_updated: datetime = NOW,
    sections: tuple[str, ...] | list[str] = REQUIRED_SECTIONS,
    scraped_at: dict[str, datetime] | None = None,
) -> KnowledgeBaseDocument:
    """
    Документ с записью на каждую секцию.

    Args:
        last_updated: Время документа
        sections: Секции, для которых создаются записи
        scraped_at: Время обхода отдельных секций (по умолчанию last_updated)
    """
    scraped_at = scraped_at or {}
    return KnowledgeBaseDocument(
        last_updated=last_updated,
        base_url=TEST_BASE_URL,
        sources=[make_record(section, scraped_at.get(section, last_updated)) for section in sections],
        sections=[SiteMapNode(title=section, url=f'{TEST_BASE_URL}{index}') for index, section in enumerate(sections)],
    )
