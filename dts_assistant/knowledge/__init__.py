"""
База знаний портала DTS Gilgit-Baltistan.

Содержит:
- site_map.py - карта сайта, обязательные и динамические секции
- fetcher.py - загрузка страниц (httpx)
- classifier.py - категория страницы по URL и имени секции
- extractor.py - извлечение структурированного содержимого (BeautifulSoup)
- crawler.py - оркестратор полного и выборочного обхода
- store.py - хранилище JSON-документа
- freshness.py - политика свежести
- updater.py - полное и выборочное обновление с записью в хранилище
- formatter.py - текст базы знаний для промпта
- health.py - отчёт о состоянии
- service.py - выдача текста чату с фоновым обновлением

Рекомендуемое использование:
    from dts_assistant.knowledge import get_formatted_knowledge_base

    text = await get_formatted_knowledge_base()
"""

from dts_assistant.knowledge.classifier import classify
from dts_assistant.knowledge.crawler import CrawlOrchestrator, CrawlResult
from dts_assistant.knowledge.errors import (
    CrawlError,
    KnowledgeBaseError,
    SelectiveUpdateError,
    StoreReadError,
    StoreWriteError,
)
from dts_assistant.knowledge.extractor import ContentExtractor, extract, parse_html
from dts_assistant.knowledge.faq import DEFAULT_FAQ, FALLBACK_KNOWLEDGE
from dts_assistant.knowledge.fetcher import FetchFailure, PageFetcher, RawPage
from dts_assistant.knowledge.formatter import render
from dts_assistant.knowledge.freshness import FreshnessDecision, FreshnessPolicy, RefreshAction
from dts_assistant.knowledge.health import HealthReport, HealthStatus, check_health
from dts_assistant.knowledge.models import (
    Category,
    KnowledgeBaseDocument,
    ScrapedPage,
    SiteMapNode,
)
from dts_assistant.knowledge.service import (
    KnowledgeBaseService,
    RefreshJob,
    get_formatted_knowledge_base,
    get_knowledge_base_service,
)
from dts_assistant.knowledge.site_map import DTS_SITE_MAP, REQUIRED_SECTIONS
from dts_assistant.knowledge.store import KnowledgeBaseStore
from dts_assistant.knowledge.updater import KnowledgeBaseUpdater, UpdateResult

__all__ = [
    # Models
    'Category',
    'KnowledgeBaseDocument',
    'ScrapedPage',
    'SiteMapNode',
    # Errors
    'CrawlError',
    'KnowledgeBaseError',
    'SelectiveUpdateError',
    'StoreReadError',
    'StoreWriteError',
    # Site map
    'DTS_SITE_MAP',
    'REQUIRED_SECTIONS',
    # Crawl
    'ContentExtractor',
    'CrawlOrchestrator',
    'CrawlResult',
    'FetchFailure',
    'PageFetcher',
    'RawPage',
    'classify',
    'extract',
    'parse_html',
    # Store & freshness
    'FreshnessDecision',
    'FreshnessPolicy',
    'KnowledgeBaseStore',
    'KnowledgeBaseUpdater',
    'RefreshAction',
    'UpdateResult',
    # Output
    'DEFAULT_FAQ',
    'FALLBACK_KNOWLEDGE',
    'HealthReport',
    'HealthStatus',
    'KnowledgeBaseService',
    'RefreshJob',
    'check_health',
    'get_formatted_knowledge_base',
    'get_knowledge_base_service',
    'render',
]
