"""
Извлечение структурированного содержимого из HTML страниц портала.

У сайта нет API, поэтому извлечение эвристическое и двухфазное:
1. Общие сигналы (не зависят от категории): заголовки, абзацы, списки с контекстом,
   таблицы, контакты, суммы сборов, процедуры и требования
2. Категорийная доработка: из общих сигналов выделяются структуры,
   важные для категории (таблицы сборов, вершины, поля форм входа, ...)

Отсутствующий сигнал даёт пустое поле, а не ошибку. В худшем случае
возвращается содержимое только с type, section и url.
"""

from dataclasses import dataclass, field
import re
from typing import Any, assert_never
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from dts_assistant.knowledge.models import (
    CONTENT_TYPES,
    Category,
    ContactInfo,
    ExpeditionRecord,
    FeeCategory,
    FeedItem,
    FeeInformation,
    FormField,
    HtmlForm,
    LicensingInfo,
    PageContent,
    PeakRecord,
    ProcessBlock,
    RequirementBlock,
    ServiceGroup,
    StructuredList,
    TableData,
)
from dts_assistant.knowledge.reference_data import (
    ACCOUNT_INFO,
    ADVENTURE_PEAKS,
    ADVENTURE_TREKS,
    DEFAULT_LICENSE_TYPES,
)
from dts_assistant.logging_config import get_logger

logger = get_logger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# элементы, которые удаляются до извлечения
NOISE_SELECTORS = ['script', 'style', 'noscript', '.advertisement', '.ads']

MIN_PARAGRAPH_LENGTH = 10
MIN_STEP_LENGTH = 10

PHONE_PATTERN = re.compile(r'(\+92[-\s]?\d{3,4}[-\s]?\d{6,7}|\d{3,4}[-\s]?\d{6,7})')
EMAIL_PATTERN = re.compile(r'([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})')
FEE_AMOUNT_PATTERN = re.compile(r'\b(?:rs\.?|pkr|rupees?)\s*\d[\d,]*', re.IGNORECASE)
NUMBERED_ITEM_PATTERN = re.compile(r'^\d+\.?\s')

# раздел "Process ..." в сплошном тексте и шаги вида "1 Submit online application"
PROCESS_SECTION_PATTERN = re.compile(
    r'process.*?(?=contact|find|follow|$)', re.IGNORECASE | re.DOTALL
)
STEP_PATTERN = re.compile(r'(\d+)[.)]?\s*([A-Z][^\d]*?)(?=\s*\d+[.)]?\s*[A-Z]|$)')

# опорные фразы процедуры лицензирования, если нумерованных шагов не нашлось
PROCESS_ANCHORS = (
    'Submit online application',
    'Pay applicable fees',
    'Site inspection',
    'Review and verification',
    'License issuance',
)

PROCESS_CONTEXT_KEYWORDS = ('process', 'step', 'procedure')
REQUIREMENT_CONTEXT_KEYWORDS = ('requirement', 'document', 'need', 'must')
IDENTITY_DOCUMENT_KEYWORDS = ('cnic', 'passport', 'certificate', 'license')
ADDRESS_KEYWORDS = (
    'address',
    'location',
    'office',
    'building',
    'secretariat',
    'gilgit',
    'baltistan',
)
FEE_KEYWORDS = ('fee', 'cost', 'charge')

FEED_ITEM_SELECTOR = 'article, .news-item, .event-item, .event, .post'


def clean_text(text: str | None) -> str:
    """
    Схлопывает пробелы и переносы в одиночные пробелы
    """
    if not text:
        return ''
    return ' '.join(text.split())


def element_text(element: Tag | None) -> str:
    if element is None:
        return ''
    return clean_text(element.get_text(' '))


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _mentions(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def parse_html(html: str | None) -> BeautifulSoup:
    """
    Разбирает HTML и удаляет скрипты, стили и рекламные блоки
    """
    soup = BeautifulSoup(html or '', 'html.parser')
    for selector in NOISE_SELECTORS:
        for element in soup.select(selector):
            element.decompose()
    return soup


def page_title(soup: BeautifulSoup, section: str | None = None) -> str:
    """
    Заголовок страницы: <title>, иначе имя секции, иначе "DTS Page"
    """
    title = element_text(soup.title)
    return title or section or 'DTS Page'


@dataclass
class GenericExtraction:
    """
    Результат первой (общей) фазы извлечения
    """

    headings: list[str] = field(default_factory=list)
    paragraphs: list[str] = field(default_factory=list)
    all_text: str = ''
    structured_lists: list[StructuredList] = field(default_factory=list)
    processes: list[ProcessBlock] = field(default_factory=list)
    requirements: list[RequirementBlock] = field(default_factory=list)
    contact_info: ContactInfo | None = None
    tables: list[TableData] = field(default_factory=list)
    fee_information: FeeInformation | None = None

    def as_fields(self) -> dict[str, Any]:
        return {
            'headings': self.headings,
            'paragraphs': self.paragraphs,
            'all_text': self.all_text,
            'structured_lists': self.structured_lists,
            'processes': self.processes,
            'requirements': self.requirements,
            'contact_info': self.contact_info,
            'tables': self.tables,
            'fee_information': self.fee_information,
        }


class ContentExtractor:
    """
    Извлекатель содержимого страницы.

    Особенности:
    - Контекст списка/таблицы: ближайший предшествующий заголовок или абзац
    - Процедуры ищутся и в списках, и в сплошном тексте
    - Категорийные поля строятся из результатов общей фазы
    """

    def extract(
        self,
        soup: BeautifulSoup,
        category: Category,
        url: str,
        section: str | None = None,
    ) -> PageContent:
        """
        Извлекает содержимое страницы.

        Args:
            soup: Разобранный HTML (см. parse_html)
            category: Категория страницы (от классификатора)
            url: URL страницы
            section: Имя секции карты сайта

        Returns:
            Содержимое варианта, соответствующего категории
        """
        content_cls = CONTENT_TYPES[category]
        base: dict[str, Any] = {'section': section or 'general', 'url': url}

        try:
            generic = self.extract_generic(soup)
            specific = self._extract_specific(soup, category, url, generic)
            return content_cls(**base, **generic.as_fields(), **specific)
        except Exception as e:
            logger.warning(
                'extraction_degraded',
                url=url,
                category=category.value,
                error=str(e),
                exc_info=True,
            )
            return content_cls(**base)

    # ------------------------------------------------------------------
    # Фаза 1: общие сигналы
    # ------------------------------------------------------------------

    def extract_generic(self, soup: BeautifulSoup) -> GenericExtraction:
        """
        Категорийно-независимое извлечение
        """
        result = GenericExtraction()

        result.headings = [
            text for text in (element_text(h) for h in soup.find_all(HEADING_TAGS)) if text
        ]
        result.paragraphs = [
            text
            for text in (element_text(p) for p in soup.find_all('p'))
            if len(text) > MIN_PARAGRAPH_LENGTH
        ]
        result.all_text = element_text(soup.body or soup)

        result.structured_lists = self._extract_lists(soup)
        result.processes = self._extract_processes(result.structured_lists, result.all_text)
        result.requirements = self._extract_requirements(result.structured_lists)
        result.contact_info = self._extract_contact_info(result.all_text, result.paragraphs)
        result.tables = self._extract_tables(soup)
        result.fee_information = self._extract_fee_information(result.all_text, result.tables)

        return result

    def _context_for(self, element: Tag, default: str) -> str:
        """
        Контекст элемента: заголовок перед ним на том же уровне,
        затем непосредственно предшествующий абзац, затем ближайший
        заголовок выше по документу
        """
        heading = element.find_previous_sibling(HEADING_TAGS)
        text = element_text(heading)
        if text:
            return text

        previous = element.find_previous_sibling(True)
        if previous is not None and previous.name == 'p':
            text = element_text(previous)
            if text:
                return text

        text = element_text(element.find_previous(HEADING_TAGS))
        return text or default

    def _extract_lists(self, soup: BeautifulSoup) -> list[StructuredList]:
        lists = []
        for list_element in soup.find_all(['ul', 'ol']):
            items = [text for text in (element_text(li) for li in list_element.find_all('li')) if text]
            if not items:
                continue
            lists.append(
                StructuredList(
                    items=items,
                    context=self._context_for(list_element, 'General List'),
                    list_type='ol' if list_element.name == 'ol' else 'ul',
                )
            )
        return lists

    def _extract_processes(
        self, lists: list[StructuredList], all_text: str
    ) -> list[ProcessBlock]:
        """
        Процедуры: нумерованные списки, списки с контекстом "process/step/procedure"
        и шаги, найденные в сплошном тексте
        """
        processes = [
            ProcessBlock(title=lst.context, steps=lst.items)
            for lst in lists
            if lst.list_type == 'ol'
            or any(NUMBERED_ITEM_PATTERN.match(item) for item in lst.items)
            or _mentions(lst.context, PROCESS_CONTEXT_KEYWORDS)
        ]

        text_steps = self._extract_text_steps(all_text)
        if text_steps:
            processes.append(ProcessBlock(title='Application Process', steps=text_steps))

        return processes

    def _extract_text_steps(self, all_text: str) -> list[str]:
        steps: list[str] = []

        process_section = PROCESS_SECTION_PATTERN.search(all_text)
        if process_section:
            for match in STEP_PATTERN.finditer(process_section.group(0)):
                step = match.group(2).strip()
                if len(step) > MIN_STEP_LENGTH:
                    steps.append(f'{match.group(1)}. {step}')

        if steps:
            return steps

        for index, anchor in enumerate(PROCESS_ANCHORS, start=1):
            if anchor not in all_text:
                continue
            match = re.search(rf'(\d+)?\s*{re.escape(anchor)}[^\d]*?(?=\d|$)', all_text, re.IGNORECASE)
            if match:
                text = re.sub(r'^\d+\s*', '', match.group(0).strip())
                steps.append(f'{index}. {text}')

        return steps

    def _extract_requirements(self, lists: list[StructuredList]) -> list[RequirementBlock]:
        return [
            RequirementBlock(category=lst.context, items=lst.items)
            for lst in lists
            if _mentions(lst.context, REQUIREMENT_CONTEXT_KEYWORDS)
            or any(_mentions(item, IDENTITY_DOCUMENT_KEYWORDS) for item in lst.items)
        ]

    def _extract_contact_info(self, all_text: str, paragraphs: list[str]) -> ContactInfo | None:
        phones = _unique([m.group(0) for m in PHONE_PATTERN.finditer(all_text)])
        emails = _unique([m.group(0) for m in EMAIL_PATTERN.finditer(all_text)])
        addresses = [p for p in paragraphs if _mentions(p, ADDRESS_KEYWORDS)]

        if not (phones or emails or addresses):
            return None
        return ContactInfo(phones=phones, emails=emails, addresses=addresses)

    def _extract_tables(self, soup: BeautifulSoup) -> list[TableData]:
        tables = []
        for table in soup.find_all('table'):
            rows_elements = table.find_all('tr')

            header_row = None
            thead = table.find('thead')
            if thead is not None:
                header_row = thead.find('tr')
            if header_row is None and rows_elements:
                header_row = rows_elements[0]

            headers: list[str] = []
            if header_row is not None:
                headers = [
                    text
                    for text in (element_text(cell) for cell in header_row.find_all(['th', 'td']))
                    if text
                ]

            rows = []
            for row in rows_elements:
                if row is header_row:
                    continue
                cells = [element_text(cell) for cell in row.find_all(['td', 'th'])]
                if any(cells):
                    rows.append(cells)

            if not rows:
                continue

            tables.append(
                TableData(
                    title=self._context_for(table, 'Table'),
                    headers=headers,
                    rows=rows,
                    has_headers=bool(headers),
                )
            )
        return tables

    def _extract_fee_information(
        self, all_text: str, tables: list[TableData]
    ) -> FeeInformation | None:
        if not _mentions(all_text, FEE_KEYWORDS):
            return None

        amounts = _unique([m.group(0) for m in FEE_AMOUNT_PATTERN.finditer(all_text)])
        fee_tables = [
            table
            for table in tables
            if 'fee' in table.title.lower()
            or any(_mentions(header, ('fee', 'cost')) for header in table.headers)
        ]
        return FeeInformation(amounts=amounts, tables=fee_tables)

    # ------------------------------------------------------------------
    # Фаза 2: категорийные поля
    # ------------------------------------------------------------------

    def _extract_specific(
        self,
        soup: BeautifulSoup,
        category: Category,
        url: str,
        generic: GenericExtraction,
    ) -> dict[str, Any]:
        match category:
            case Category.SERVICES:
                return self._services_fields(url, generic)
            case Category.FEES:
                return self._fees_fields(generic)
            case Category.VISA:
                return self._visa_fields(soup, generic)
            case Category.MOUNTAINEERING | Category.ADVENTURES:
                return self._summit_fields(soup, url)
            case Category.AUTHENTICATION:
                return self._authentication_fields(soup, url)
            case Category.NEWS | Category.EVENTS:
                return {'items': self._extract_feed_items(soup)}
            case (
                Category.CONTACT
                | Category.DESTINATIONS
                | Category.REGULATIONS
                | Category.GENERAL
            ):
                return {}
            case _:
                assert_never(category)

    def _services_fields(self, url: str, generic: GenericExtraction) -> dict[str, Any]:
        lists = generic.structured_lists
        fields: dict[str, Any] = {
            'service_types': [
                ServiceGroup(category=lst.context, services=lst.items)
                for lst in lists
                if _mentions(lst.context, ('service', 'license', 'type'))
            ]
        }

        if 'licensing' in url.lower():
            overview = next(
                (p for p in generic.paragraphs if _mentions(p, ('license', 'permit'))),
                None,
            )
            license_list = next(
                (lst for lst in lists if _mentions(lst.context, ('license', 'type'))),
                None,
            )
            fields['licensing'] = LicensingInfo(
                overview=overview,
                requirements=generic.requirements,
                processes=generic.processes,
                types=license_list.items if license_list else list(DEFAULT_LICENSE_TYPES),
            )

        return fields

    def _fees_fields(self, generic: GenericExtraction) -> dict[str, Any]:
        return {
            'fee_categories': [
                FeeCategory(category=lst.context, fees=lst.items)
                for lst in generic.structured_lists
                if _mentions(lst.context, FEE_KEYWORDS)
            ],
            'fee_structure': [
                table
                for table in generic.tables
                if 'fee' in table.title.lower()
                or any('fee' in header.lower() for header in table.headers)
            ],
        }

    def _visa_fields(self, soup: BeautifulSoup, generic: GenericExtraction) -> dict[str, Any]:
        visa_list = next(
            (
                lst
                for lst in generic.structured_lists
                if _mentions(lst.context, ('type', 'category'))
            ),
            None,
        )
        forms = [
            HtmlForm(
                action=form.get('action'),
                method=form.get('method'),
                fields=[
                    self._form_field(element)
                    for element in form.find_all(['input', 'select', 'textarea'])
                ],
            )
            for form in soup.find_all('form')
        ]
        return {
            'visa_types': visa_list.items if visa_list else [],
            'application_process': generic.processes,
            'forms': forms,
        }

    def _summit_fields(self, soup: BeautifulSoup, url: str) -> dict[str, Any]:
        peaks = []
        for element in soup.select('.peak, .mountain'):
            name = element_text(element.select_one('h1, h2, h3, .name'))
            if not name:
                continue
            peaks.append(
                PeakRecord(
                    name=name,
                    height=clean_text(' '.join(e.get_text(' ') for e in element.select('.height, .elevation'))),
                    description=clean_text(' '.join(e.get_text(' ') for e in element.select('p, .description'))),
                )
            )

        expeditions = []
        for element in soup.select('.expedition, .climb'):
            title = element_text(element.select_one('h1, h2, h3, .title'))
            if not title:
                continue
            expeditions.append(
                ExpeditionRecord(
                    title=title,
                    date=clean_text(' '.join(e.get_text(' ') for e in element.select('.date'))),
                    description=clean_text(' '.join(e.get_text(' ') for e in element.select('p, .description'))),
                )
            )

        fields: dict[str, Any] = {'peaks': peaks, 'expeditions': expeditions}

        # справочные вершины и маршруты - только для страницы приключений
        if 'adventures' in urlparse(url).path.lower():
            fields['comprehensive_peaks'] = [peak.model_copy() for peak in ADVENTURE_PEAKS]
            fields['comprehensive_treks'] = [trek.model_copy() for trek in ADVENTURE_TREKS]

        return fields

    def _authentication_fields(self, soup: BeautifulSoup, url: str) -> dict[str, Any]:
        buttons = []
        for element in soup.select('button, input[type=submit]'):
            text = element_text(element) or clean_text(element.get('value'))
            if text:
                buttons.append(text)

        return {
            'login_url': url,
            'account_info': ACCOUNT_INFO.model_copy(deep=True),
            'form_fields': [self._form_field(element) for element in soup.find_all('input')],
            'buttons': buttons,
        }

    def _form_field(self, element: Tag) -> FormField:
        if element.name in ('select', 'textarea'):
            field_type = element.name
        else:
            field_type = element.get('type') or 'text'
        return FormField(
            field_type=field_type,
            name=element.get('name') or '',
            placeholder=element.get('placeholder') or '',
            required=element.has_attr('required'),
        )

    def _extract_feed_items(self, soup: BeautifulSoup) -> list[FeedItem]:
        items = []
        taken: set[int] = set()

        for element in soup.select(FEED_ITEM_SELECTOR):
            # вложенные элементы ленты не дублируем
            if any(id(parent) in taken for parent in element.parents):
                continue

            title = element_text(element.select_one('h1, h2, h3, h4, .title'))
            if not title:
                continue
            taken.add(id(element))

            date_element = element.select_one('time, .date')
            date = element_text(date_element)
            if not date and date_element is not None:
                date = date_element.get('datetime') or ''

            link = element.select_one('a[href]')
            items.append(
                FeedItem(
                    title=title,
                    date=date,
                    summary=element_text(element.find('p')),
                    link=link.get('href') if link is not None else None,
                )
            )
        return items


_default_extractor = ContentExtractor()


def extract(
    soup: BeautifulSoup,
    category: Category,
    url: str,
    section: str | None = None,
) -> PageContent:
    """
    Извлекает содержимое страницы экстрактором по умолчанию
    """
    return _default_extractor.extract(soup, category, url, section)
