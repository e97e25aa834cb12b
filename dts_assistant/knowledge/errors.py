"""
Исключения пайплайна базы знаний.

Ошибка загрузки отдельной страницы исключением не является:
загрузчик возвращает FetchFailure (см. fetcher.py), обход продолжается.
"""

from typing import Any


class KnowledgeBaseError(Exception):
    """Базовое исключение пайплайна базы знаний"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoreReadError(KnowledgeBaseError):
    """Файл базы знаний отсутствует, не читается или не проходит валидацию"""


class StoreWriteError(KnowledgeBaseError):
    """Ошибка файловой системы при сохранении базы знаний"""


class CrawlError(KnowledgeBaseError):
    """Полный обход не дал ни одной записи; прежний документ сохраняется"""


class SelectiveUpdateError(KnowledgeBaseError):
    """Выборочное обновление не удалось; вызывающий переходит к полному обходу"""
