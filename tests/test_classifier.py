import pytest

from dts_assistant.knowledge.classifier import CLASSIFICATION_RULES, classify
from dts_assistant.knowledge.models import CONTENT_TYPES, Category
from dts_assistant.knowledge.site_map import DTS_SITE_MAP, flatten_site_map


class TestClassify:
    """
    Тесты классификатора страниц
    """

    @pytest.mark.parametrize(
        'url, section, expected',
        [
            ('https://app.dtsgb.gog.pk/auth/login', 'Login & Registration', Category.AUTHENTICATION),
            ('https://app.dtsgb.gog.pk/app', 'Register for Licenses', Category.AUTHENTICATION),
            ('https://dtsgb.gog.pk/services', 'Tourism Services', Category.SERVICES),
            ('https://dtsgb.gog.pk/services/licensing', 'Licensing', Category.SERVICES),
            ('https://dtsgb.gog.pk/fees', 'Fees & Expeditions', Category.FEES),
            ('https://dtsgb.gog.pk/fees#expeditions', 'Expedition Fees', Category.FEES),
            ('https://dtsgb.gog.pk/mountaineering', 'Mountaineering', Category.MOUNTAINEERING),
            ('https://dtsgb.gog.pk/visa', 'Visa Information', Category.VISA),
            ('https://dtsgb.gog.pk/news', 'News & Advisories', Category.NEWS),
            ('https://dtsgb.gog.pk/events', 'Events & Travel Trade', Category.EVENTS),
            ('https://dtsgb.gog.pk/adventures', None, Category.ADVENTURES),
            ('https://dtsgb.gog.pk/contact', 'Contact Support', Category.CONTACT),
            ('https://dtsgb.gog.pk/destinations', 'Explore Destinations', Category.DESTINATIONS),
            ('https://dtsgb.gog.pk/regulations', 'Regulations', Category.REGULATIONS),
            ('https://dtsgb.gog.pk/', 'Main Website', Category.GENERAL),
        ],
    )
    def test_known_pages(self, url, section, expected):
        """Страницы портала получают ожидаемые категории"""
        assert classify(url, section) == expected

    def test_first_matching_rule_wins(self):
        """
        "Mountain Adventures" совпадает и с альпинизмом, и с приключениями:
        правило альпинизма стоит раньше
        """
        assert classify('https://dtsgb.gog.pk/adventures', 'Mountain Adventures') == Category.MOUNTAINEERING

    def test_fees_before_mountaineering(self):
        """Сборы за экспедиции - это сборы"""
        assert classify('https://dtsgb.gog.pk/mountaineering/fees', 'Expedition Fees') == Category.FEES

    def test_host_is_ignored(self):
        """Совпадение по имени хоста не учитывается, только путь"""
        assert classify('https://news.example.com/', None) == Category.GENERAL

    def test_section_is_case_insensitive(self):
        assert classify('https://dtsgb.gog.pk/page', 'VISA Regulations') == Category.VISA

    @pytest.mark.parametrize(
        'url, section',
        [
            ('', None),
            ('', ''),
            ('not a url at all', 'unknown'),
            ('http://[::1', None),
            ('https://dtsgb.gog.pk/' + 'x' * 5000, '🏔️' * 10),
            ('mailto:info@dtsgb.gog.pk', 'Email'),
        ],
    )
    def test_total(self, url, section):
        """Классификатор всегда возвращает категорию и не падает"""
        assert classify(url, section) in set(Category)

    def test_site_map_is_covered(self):
        """Каждый узел карты сайта классифицируется"""
        for target in flatten_site_map(DTS_SITE_MAP):
            assert isinstance(classify(target.url, target.section), Category)


class TestRules:
    """
    Тесты списка правил
    """

    def test_rule_order(self):
        assert [rule.category for rule in CLASSIFICATION_RULES] == [
            Category.AUTHENTICATION,
            Category.SERVICES,
            Category.FEES,
            Category.MOUNTAINEERING,
            Category.VISA,
            Category.NEWS,
            Category.EVENTS,
            Category.ADVENTURES,
            Category.CONTACT,
            Category.DESTINATIONS,
            Category.REGULATIONS,
        ]

    def test_every_category_has_content_type(self):
        """Для каждой категории есть вариант содержимого с тем же type"""
        assert set(CONTENT_TYPES) == set(Category)
        for category, content_cls in CONTENT_TYPES.items():
            content = content_cls(url='https://dts.test/')
            assert content.type == category
