"""
Конфигурация приложения.

Централизованное место для параметров:
- Site (базовый URL портала)
- Crawl (задержки между запросами, заголовки, таймауты)
- Freshness (пороги устаревания базы знаний)
- Storage (путь к JSON-документу)
- Service (ожидание первого обхода)

Использование:
    from dts_assistant.config import get_kb_config

    cfg = get_kb_config()
    print(cfg.crawl.delay_seconds)  # 2.0
"""

from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
import os
from pathlib import Path

# =============================================================================
# Lazy .env loading
# =============================================================================

_dotenv_loaded = False


def ensure_dotenv() -> None:
    """
    Загружает .env файл, если он ещё не загружен.

    Безопасно вызывать многократно.
    """
    global _dotenv_loaded
    if _dotenv_loaded:
        return

    from dotenv import load_dotenv

    load_dotenv()
    _dotenv_loaded = True


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    return float(raw)


def _env_optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return None
    return float(raw)


def _get_data_dir() -> Path:
    """Lazy getter для DATA_DIR."""
    return Path(os.getenv('DATA_DIR', 'data'))


DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) '
    'AppleWebKit/537.36 (KHTML, like Gecko) '
    'Chrome/120.0.0.0 Safari/537.36'
)


# =============================================================================
# Dataclass Configs
# =============================================================================


@dataclass(frozen=True)
class SiteConfig:
    """Конфигурация обходимого сайта."""

    base_url: str = 'https://dtsgb.gog.pk/'
    """Корень сайта, добавляется первым узлом полного обхода."""

    root_section: str = 'Main Website'
    """Имя секции для корня сайта."""


@dataclass(frozen=True)
class CrawlConfig:
    """Конфигурация обхода."""

    delay_seconds: float = 2.0
    """Пауза между запросами полного обхода."""

    selective_delay_seconds: float = 1.0
    """Пауза между запросами выборочного обхода."""

    request_timeout: float | None = None
    """Таймаут запроса; None - значение по умолчанию HTTP-клиента."""

    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class FreshnessConfig:
    """Пороги устаревания."""

    static_max_age: timedelta = timedelta(hours=4)
    """Возраст документа, после которого нужен полный обход."""

    dynamic_max_age: timedelta = timedelta(minutes=30)
    """Возраст динамической секции (новости, события) для выборочного обхода."""

    health_dynamic_max_age: timedelta = timedelta(hours=2)
    """Порог устаревания динамических секций в отчёте о здоровье."""

    health_full_update_age: timedelta = timedelta(hours=24)
    """Возраст, после которого отчёт рекомендует полный обход."""


@dataclass(frozen=True)
class StorageConfig:
    """Хранилище базы знаний."""

    knowledge_base_path: Path = field(
        default_factory=lambda: _get_data_dir() / 'knowledge-base.json'
    )


@dataclass(frozen=True)
class ServiceConfig:
    """Поведение сервиса для чата."""

    initial_crawl_wait_seconds: float = 25.0
    """Сколько ждать первого обхода, если документа ещё нет."""


@dataclass(frozen=True)
class KnowledgeBaseConfig:
    """
    Общая конфигурация базы знаний
    """

    site: SiteConfig = field(default_factory=SiteConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    freshness: FreshnessConfig = field(default_factory=FreshnessConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)

    @classmethod
    def from_env(cls) -> 'KnowledgeBaseConfig':
        """
        Создаёт конфигурацию из переменных окружения
        """
        ensure_dotenv()

        kb_path = os.getenv('KNOWLEDGE_BASE_PATH')
        storage = (
            StorageConfig(knowledge_base_path=Path(kb_path)) if kb_path else StorageConfig()
        )

        return cls(
            site=SiteConfig(base_url=os.getenv('DTS_BASE_URL', SiteConfig.base_url)),
            crawl=CrawlConfig(
                delay_seconds=_env_float('CRAWL_DELAY', CrawlConfig.delay_seconds),
                selective_delay_seconds=_env_float(
                    'CRAWL_SELECTIVE_DELAY', CrawlConfig.selective_delay_seconds
                ),
                request_timeout=_env_optional_float('CRAWL_REQUEST_TIMEOUT'),
                user_agent=os.getenv('CRAWL_USER_AGENT', DEFAULT_USER_AGENT),
            ),
            storage=storage,
            service=ServiceConfig(
                initial_crawl_wait_seconds=_env_float(
                    'KB_INITIAL_CRAWL_WAIT', ServiceConfig.initial_crawl_wait_seconds
                ),
            ),
        )


@lru_cache(maxsize=1)
def get_kb_config() -> KnowledgeBaseConfig:
    """
    Возвращает глобальную конфигурацию (кешируется)
    """
    return KnowledgeBaseConfig.from_env()


def reset_kb_config() -> None:
    """
    Сбрасывает кеш конфигурации (для тестов)
    """
    get_kb_config.cache_clear()
