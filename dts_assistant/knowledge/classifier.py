"""
Классификатор содержимого: URL + имя секции -> категория.

Правила проверяются сверху вниз, побеждает первое совпавшее.
Порядок важен: например, "Expedition Fees" должна попасть в fees, а не в mountaineering,
а "Register for Licenses" - в authentication, а не в services.
Если ни одно правило не совпало, возвращается GENERAL.
"""

from dataclasses import dataclass
from urllib.parse import urlparse

from dts_assistant.knowledge.models import Category


@dataclass(frozen=True)
class ClassificationRule:
    """
    Правило: подстроки пути URL и подстроки имени секции (в нижнем регистре)
    """

    category: Category
    url_keywords: tuple[str, ...]
    section_keywords: tuple[str, ...]

    def matches(self, url_path: str, section: str) -> bool:
        return any(keyword in url_path for keyword in self.url_keywords) or any(
            keyword in section for keyword in self.section_keywords
        )


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(Category.AUTHENTICATION, ('auth',), ('login', 'register')),
    ClassificationRule(Category.SERVICES, ('services',), ('service', 'licensing')),
    ClassificationRule(Category.FEES, ('fees',), ('fee',)),
    ClassificationRule(Category.MOUNTAINEERING, ('mountaineering',), ('mountain', 'expedition')),
    ClassificationRule(Category.VISA, ('visa',), ('visa',)),
    ClassificationRule(Category.NEWS, ('news',), ('news', 'advisory')),
    ClassificationRule(Category.EVENTS, ('events',), ('event', 'trade')),
    ClassificationRule(Category.ADVENTURES, ('adventures',), ('adventure',)),
    ClassificationRule(Category.CONTACT, ('contact',), ('contact',)),
    ClassificationRule(Category.DESTINATIONS, ('destinations',), ('destination',)),
    ClassificationRule(Category.REGULATIONS, ('regulations',), ('regulation',)),
)


def _url_path(url: str) -> str:
    try:
        return urlparse(url).path.lower()
    except ValueError:
        return url.lower()


def classify(url: str, section: str | None = None) -> Category:
    """
    Определяет категорию страницы.

    Args:
        url: URL страницы (сопоставляется только путь)
        section: Имя секции карты сайта

    Returns:
        Категория; GENERAL, если ни одно правило не подошло
    """
    url_path = _url_path(url or '')
    section_lower = (section or '').lower()

    for rule in CLASSIFICATION_RULES:
        if rule.matches(url_path, section_lower):
            return rule.category

    return Category.GENERAL
