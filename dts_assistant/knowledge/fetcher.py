"""
Загрузчик страниц на основе httpx.

Один GET на URL с заголовками настольного браузера: сервер портала
отклоняет запросы, похожие на ботов. Ошибка сети или не-2xx ответ
возвращаются как FetchFailure и никогда не выбрасываются наружу.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from dts_assistant.config import DEFAULT_USER_AGENT
from dts_assistant.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RawPage:
    """Успешно загруженная страница"""

    url: str
    html: str
    status_code: int = 200


@dataclass(frozen=True)
class FetchFailure:
    """Страницу загрузить не удалось: узел не даст записи"""

    url: str
    status_code: int | None = None
    error: str = ''

    def __str__(self) -> str:
        if self.status_code is not None:
            return f'{self.url}: HTTP {self.status_code}'
        return f'{self.url}: {self.error}'


FetchResult = RawPage | FetchFailure


class PageFetcher:
    """
    Асинхронный загрузчик HTML-страниц.

    Пример использования:

        async with PageFetcher() as fetcher:
            result = await fetcher.fetch('https://dtsgb.gog.pk/fees')
            if isinstance(result, FetchFailure):
                ...
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            user_agent: Заголовок User-Agent
            timeout: Таймаут запроса; None - таймаут httpx по умолчанию
            transport: Транспорт httpx (в тестах - httpx.MockTransport)
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache',
        }

    async def __aenter__(self) -> PageFetcher:
        """Входим в контекстный менеджер, создаём httpx клиент"""
        options: dict = {'headers': self.headers, 'follow_redirects': True}
        if self.timeout is not None:
            options['timeout'] = self.timeout
        if self.transport is not None:
            options['transport'] = self.transport
        self._client = httpx.AsyncClient(**options)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Закрываем httpx клиент"""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Получить HTTP клиент (проверяет, что клиент создан)"""
        if self._client is None:
            raise RuntimeError(
                'PageFetcher должен использоваться как контекстный менеджер: '
                'async with PageFetcher() as fetcher: ...'
            )
        return self._client

    async def fetch(self, url: str) -> FetchResult:
        """
        Загружает страницу.

        Args:
            url: URL страницы

        Returns:
            RawPage с HTML или FetchFailure с кодом ответа / текстом ошибки
        """
        logger.debug('page_fetch', url=url)

        try:
            response = await self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning('page_fetch_error', url=url, error=str(e) or type(e).__name__)
            return FetchFailure(url=url, error=str(e) or type(e).__name__)
        finally:
            # куки между запросами не сохраняем
            if self._client is not None:
                self._client.cookies.clear()

        if not response.is_success:
            logger.warning('page_fetch_failed', url=url, status=response.status_code)
            return FetchFailure(
                url=url,
                status_code=response.status_code,
                error=response.reason_phrase,
            )

        logger.debug('page_fetched', url=url, status=response.status_code, size=len(response.content))
        return RawPage(url=url, html=response.text, status_code=response.status_code)
