"""
Карта сайта DTS Gilgit-Baltistan.

Иерархия страниц задаётся вручную при развёртывании.
Секции с is_dynamic=True (новости, события, ближайшие экспедиции)
проверяются на устаревание по короткому порогу и обновляются выборочно.
"""

from dataclasses import dataclass

from dts_assistant.knowledge.models import SiteMapNode

# корень сайта; полный обход начинается с него
BASE_URL = 'https://dtsgb.gog.pk/'
ROOT_SECTION = 'Main Website'


def _node(
    title: str,
    url: str,
    *children: SiteMapNode,
    description: str | None = None,
    is_dynamic: bool = False,
    fetch_from: str | None = None,
) -> SiteMapNode:
    return SiteMapNode(
        title=title,
        url=url,
        description=description,
        is_dynamic=is_dynamic,
        fetch_from=fetch_from,
        children=children,
    )


DTS_SITE_MAP: tuple[SiteMapNode, ...] = (
    _node(
        'Login & Registration',
        'https://app.dtsgb.gog.pk/auth/login',
        _node('Create Account', 'https://app.dtsgb.gog.pk/auth/register'),
        _node('Register for Licenses', 'https://app.dtsgb.gog.pk/app'),
        description='Login portal for DTS GB users.',
    ),
    _node(
        'Tourism Services',
        'https://dtsgb.gog.pk/services',
        _node(
            'Licensing',
            'https://dtsgb.gog.pk/services/licensing',
            _node('Tour Operator License', 'https://app.dtsgb.gog.pk/app'),
            _node('Hotel/Camping License', 'https://app.dtsgb.gog.pk/app'),
            _node('Tour Guide License', 'https://app.dtsgb.gog.pk/app'),
        ),
        _node('Legislations', 'https://dtsgb.gog.pk/services/legislations'),
        _node('Grading', 'https://dtsgb.gog.pk/services/grading'),
        _node('Service Providers', 'https://dtsgb.gog.pk/services/service-providers'),
        _node('Downloads', 'https://dtsgb.gog.pk/services/downloads'),
    ),
    _node(
        'Fees & Expeditions',
        'https://dtsgb.gog.pk/fees',
        _node('General Fees', 'https://dtsgb.gog.pk/fees#'),
        _node('Expedition Fees', 'https://dtsgb.gog.pk/fees#expeditions'),
    ),
    _node(
        'Mountaineering',
        'https://dtsgb.gog.pk/mountaineering',
        _node('Historical Summits', 'https://dtsgb.gog.pk/mountaineering/historical-summits'),
        _node(
            'Upcoming Expeditions',
            'https://dtsgb.gog.pk/mountaineering/upcoming-expeditions',
            is_dynamic=True,
        ),
        _node('Successful Climbers', 'https://dtsgb.gog.pk/mountaineering/successful-climbers'),
        _node('Expedition Fees', 'https://dtsgb.gog.pk/fees#expeditions'),
    ),
    _node('Mountain Adventures', 'https://dtsgb.gog.pk/adventures'),
    _node(
        'Visa Information',
        'https://dtsgb.gog.pk/visa',
        _node('Apply for Tourist Visa', 'https://dtsgb.gog.pk/visa#apply'),
        _node('Tourist Visa Eligibility', 'https://dtsgb.gog.pk/visa#eligibility'),
        _node('Documents Required', 'https://dtsgb.gog.pk/visa#documents'),
        _node('Contact Support', 'https://dtsgb.gog.pk/contact'),
        _node('Explore Destinations', 'https://dtsgb.gog.pk/destinations'),
        _node('Visa Regulations', 'https://dtsgb.gog.pk/regulations'),
    ),
    _node(
        'News & Advisories',
        'https://dtsgb.gog.pk/news',
        description=(
            'Latest news and advisories related to tourism and expeditions in '
            'Gilgit-Baltistan. Content is updated regularly.'
        ),
        is_dynamic=True,
        fetch_from='https://dtsgb.gog.pk/news',
    ),
    _node(
        'Events & Travel Trade',
        'https://dtsgb.gog.pk/events',
        description='Upcoming tourism and travel trade events related to Gilgit-Baltistan.',
        is_dynamic=True,
        fetch_from='https://dtsgb.gog.pk/events',
    ),
)

# отсутствие любой из этих секций в документе всегда означает полный обход
REQUIRED_SECTIONS: tuple[str, ...] = (
    'Tourism Services',
    'Licensing',
    'Mountain Adventures',
    'Visa Information',
    'News & Advisories',
    'Events & Travel Trade',
    'Fees & Expeditions',
)


@dataclass(frozen=True)
class CrawlTarget:
    """
    Узел карты сайта, подготовленный к обходу
    """

    url: str
    section: str
    parent_section: str | None = None
    is_dynamic: bool = False
    refresh_url: str | None = None


def flatten_site_map(
    nodes: tuple[SiteMapNode, ...] | list[SiteMapNode],
    parent_section: str | None = None,
) -> list[CrawlTarget]:
    """
    Разворачивает дерево в список обхода: в глубину, родитель перед детьми.
    """
    targets: list[CrawlTarget] = []
    for node in nodes:
        targets.append(
            CrawlTarget(
                url=node.url,
                section=node.title,
                parent_section=parent_section,
                is_dynamic=node.is_dynamic,
                refresh_url=node.crawl_url,
            )
        )
        targets.extend(flatten_site_map(node.children, parent_section=node.title))
    return targets


def dynamic_sections(nodes: tuple[SiteMapNode, ...] | list[SiteMapNode]) -> list[str]:
    """
    Имена динамических секций в порядке обхода
    """
    names: list[str] = []
    for target in flatten_site_map(nodes):
        if target.is_dynamic and target.section not in names:
            names.append(target.section)
    return names
