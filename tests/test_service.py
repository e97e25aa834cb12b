"""
Тесты сервиса базы знаний: ожидание первого обхода,
фоновое обновление и резервный текст.
"""

import asyncio
from datetime import timedelta

import pytest

from dts_assistant.knowledge import service as service_module
from dts_assistant.knowledge.faq import FALLBACK_KNOWLEDGE
from dts_assistant.knowledge.formatter import HEADER_TITLE, render
from dts_assistant.knowledge.freshness import FreshnessPolicy, RefreshAction
from dts_assistant.knowledge.models import SiteMapNode
from dts_assistant.knowledge.service import JobStatus, KnowledgeBaseService
from dts_assistant.knowledge.store import KnowledgeBaseStore
from dts_assistant.knowledge.updater import KnowledgeBaseUpdater

from helpers import NOW, TEST_BASE_URL, FakeSite, make_document, page

SECTIONS = ('Licensing', 'News & Advisories')

SITE_MAP = (
    SiteMapNode(title='Licensing', url='https://dts.test/services/licensing'),
    SiteMapNode(title='News & Advisories', url='https://dts.test/news', is_dynamic=True),
)

PAGES = {
    TEST_BASE_URL: page('<p>Welcome to Gilgit-Baltistan tourism.</p>'),
    'https://dts.test/services/licensing': page('<p>All operators need a valid license.</p>'),
    'https://dts.test/news': page('<article><h2>Road open</h2><p>KKH open again.</p></article>'),
}


class BlockingSleep:
    """Пауза, которая не заканчивается: обход зависает после первой страницы"""

    def __init__(self):
        self._never = asyncio.Event()

    async def __call__(self, seconds: float) -> None:
        await self._never.wait()


def _service(kb_path, site, clock, sleep, initial_crawl_wait=5.0) -> KnowledgeBaseService:
    updater = KnowledgeBaseUpdater(
        KnowledgeBaseStore(kb_path),
        fetcher_factory=site.fetcher,
        site_map=SITE_MAP,
        base_url=TEST_BASE_URL,
        sleep=sleep,
        clock=clock,
    )
    policy = FreshnessPolicy(required_sections=SECTIONS, site_map=SITE_MAP, clock=clock)
    return KnowledgeBaseService(updater, policy=policy, initial_crawl_wait=initial_crawl_wait)


class TestInitialCrawl:
    """
    Документа ещё нет
    """

    @pytest.mark.asyncio
    async def test_waits_for_first_crawl(self, kb_path, clock, recording_sleep):
        async with _service(kb_path, FakeSite(PAGES), clock, recording_sleep) as service:
            text = await service.get_formatted_knowledge_base()

        assert text.startswith(HEADER_TITLE)
        assert 'Sources: 3 websites' in text
        assert service.last_job.status == JobStatus.SUCCEEDED
        assert KnowledgeBaseStore(kb_path).exists()

    @pytest.mark.asyncio
    async def test_failed_crawl_returns_fallback(self, kb_path, clock, recording_sleep):
        async with _service(kb_path, FakeSite(), clock, recording_sleep) as service:
            text = await service.get_formatted_knowledge_base()

        assert text == FALLBACK_KNOWLEDGE
        assert service.last_job.status == JobStatus.FAILED
        assert not KnowledgeBaseStore(kb_path).exists()

    @pytest.mark.asyncio
    async def test_timeout_returns_fallback(self, kb_path, clock):
        service = _service(kb_path, FakeSite(PAGES), clock, BlockingSleep(), initial_crawl_wait=0.05)

        async with service:
            text = await service.get_formatted_knowledge_base()
            # обход продолжается в фоне
            assert service.last_job.is_active

        assert text == FALLBACK_KNOWLEDGE
        assert service.last_job.status == JobStatus.FAILED
        assert service.last_job.done.done()


class TestServing:
    """
    Документ уже есть
    """

    @pytest.mark.asyncio
    async def test_fresh_document_served_without_refresh(self, kb_path, clock, recording_sleep):
        store = KnowledgeBaseStore(kb_path)
        store.write(make_document(sections=SECTIONS))
        site = FakeSite(PAGES)

        async with _service(kb_path, site, clock, recording_sleep) as service:
            text = await service.get_formatted_knowledge_base()

        assert text == render(store.read())
        assert service.last_job is None
        assert site.requests == []

    @pytest.mark.asyncio
    async def test_stale_document_served_immediately(self, kb_path, clock, recording_sleep):
        store = KnowledgeBaseStore(kb_path)
        store.write(make_document(last_updated=NOW - timedelta(hours=5), sections=SECTIONS))
        expected = render(store.read())

        async with _service(kb_path, FakeSite(PAGES), clock, recording_sleep) as service:
            text = await service.get_formatted_knowledge_base()
            job = service.last_job

            # ответ не ждёт обновления
            assert text == expected
            assert job is not None
            assert job.status == JobStatus.QUEUED

            # повторный запрос не ставит второе задание
            await service.get_formatted_knowledge_base()
            assert service.last_job is job

            await job.wait(timeout=5)

        assert job.status == JobStatus.SUCCEEDED
        # новости старше 30 минут -> выборочное обновление
        assert job.result.action == RefreshAction.SELECTIVE
        assert store.read().last_updated == NOW

    @pytest.mark.asyncio
    async def test_new_job_after_previous_finished(self, kb_path, clock, recording_sleep):
        store = KnowledgeBaseStore(kb_path)
        store.write(make_document(last_updated=NOW - timedelta(hours=5), sections=SECTIONS))

        async with _service(kb_path, FakeSite(PAGES), clock, recording_sleep) as service:
            await service.get_formatted_knowledge_base()
            first = service.last_job
            await first.wait(timeout=5)

            clock.advance(timedelta(hours=5))
            await service.get_formatted_knowledge_base()

            assert service.last_job is not first
            await service.last_job.wait(timeout=5)

    @pytest.mark.asyncio
    async def test_stop_fails_queued_jobs(self, kb_path, clock):
        store = KnowledgeBaseStore(kb_path)
        store.write(make_document(last_updated=NOW - timedelta(hours=5), sections=SECTIONS))
        service = _service(kb_path, FakeSite(PAGES), clock, BlockingSleep())

        await service.get_formatted_knowledge_base()
        job = service.last_job
        await service.stop()

        assert job.status == JobStatus.FAILED
        assert job.done.done()
        assert not service.is_running


class TestProcessService:
    def test_single_instance(self, monkeypatch):
        monkeypatch.setattr(service_module, '_service', None)

        first = service_module.get_knowledge_base_service()

        assert service_module.get_knowledge_base_service() is first
