"""
- модели данных базы знаний

Определяет структуры для:
- Карты сайта (SiteMapNode)
- Содержимого страницы по категориям (PageContent и варианты)
- Записи обхода страницы (ScrapedPage)
- Документа базы знаний (KnowledgeBaseDocument)

На диске документ хранится в camelCase (lastUpdated, scrapedAt, feeStructure, ...),
в Python используются snake_case имена полей.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Category(StrEnum):
    """
    Категория содержимого страницы
    """

    AUTHENTICATION = 'authentication'
    SERVICES = 'services'
    FEES = 'fees'
    MOUNTAINEERING = 'mountaineering'
    VISA = 'visa'
    NEWS = 'news'
    EVENTS = 'events'
    ADVENTURES = 'adventures'
    CONTACT = 'contact'
    DESTINATIONS = 'destinations'
    REGULATIONS = 'regulations'
    GENERAL = 'general'


class CamelModel(BaseModel):
    """Базовая модель: camelCase в JSON, snake_case в коде"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


# ============================================================================
# Карта сайта
# ============================================================================


class SiteMapNode(CamelModel):
    """Узел карты сайта (неизменяемый, задаётся при развёртывании)"""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    description: str | None = None
    is_dynamic: bool = False
    fetch_from: str | None = Field(None, description='URL для повторного обхода динамической секции')
    children: tuple['SiteMapNode', ...] = ()

    @property
    def crawl_url(self) -> str:
        """URL, по которому секцию забирают при выборочном обходе"""
        return self.fetch_from or self.url


# ============================================================================
# Структурные фрагменты страницы
# ============================================================================


class StructuredList(CamelModel):
    """Список с контекстом (ближайший заголовок или абзац перед ним)"""

    items: list[str]
    context: str
    list_type: Literal['ul', 'ol'] = Field('ul', alias='type')


class ProcessBlock(CamelModel):
    """Последовательность шагов (процедура, порядок подачи)"""

    title: str
    steps: list[str]


class RequirementBlock(CamelModel):
    """Список требований или документов"""

    category: str
    items: list[str]


class ContactInfo(CamelModel):
    """Контактные данные, найденные в тексте страницы"""

    phones: list[str] = Field(default_factory=list)
    emails: list[str] = Field(default_factory=list)
    addresses: list[str] = Field(default_factory=list)


class TableData(CamelModel):
    """Таблица: заголовки и строки"""

    title: str
    headers: list[str]
    rows: list[list[str]]
    has_headers: bool = False


class FeeInformation(CamelModel):
    """Суммы сборов и таблицы со сборами"""

    amounts: list[str] = Field(default_factory=list)
    tables: list[TableData] = Field(default_factory=list)


class FormField(CamelModel):
    """Поле HTML-формы"""

    field_type: str = Field('text', alias='type')
    name: str = ''
    placeholder: str = ''
    required: bool = False


class HtmlForm(CamelModel):
    """HTML-форма со списком полей"""

    action: str | None = None
    method: str | None = None
    fields: list[FormField] = Field(default_factory=list)


class ServiceGroup(CamelModel):
    category: str
    services: list[str]


class LicensingInfo(CamelModel):
    """Сведения о лицензировании (страница Licensing)"""

    overview: str | None = None
    requirements: list[RequirementBlock] = Field(default_factory=list)
    processes: list[ProcessBlock] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)


class FeeCategory(CamelModel):
    category: str
    fees: list[str]


class PeakRecord(CamelModel):
    """Вершина, размеченная на странице (.peak, .mountain)"""

    name: str
    height: str = ''
    description: str = ''


class ExpeditionRecord(CamelModel):
    """Экспедиция, размеченная на странице (.expedition, .climb)"""

    title: str
    date: str = ''
    description: str = ''


class ReferencePeak(CamelModel):
    """Вершина из справочной таблицы"""

    name: str
    elevation: str
    base_camp: str
    first_ascent: str = ''
    difficulty: str


class ReferenceTrek(CamelModel):
    """Треккинговый маршрут из справочной таблицы"""

    name: str
    elevation: str
    route: str
    difficulty: str


class AccountInfo(CamelModel):
    """Кто и как может получить учётную запись портала"""

    account_types: list[str]
    eligibility: str
    requirements: list[str]
    process: str


class FeedItem(CamelModel):
    """Элемент ленты новостей или событий"""

    title: str
    date: str = ''
    summary: str = ''
    link: str | None = None


# ============================================================================
# Содержимое страницы по категориям
# ============================================================================


class PageContent(CamelModel):
    """
    Общая часть содержимого страницы (категорийно-независимое извлечение).

    Поле type всегда совпадает с категорией, по которой содержимое построено.
    """

    type: Category
    section: str = 'general'
    url: str
    headings: list[str] = Field(default_factory=list)
    paragraphs: list[str] = Field(default_factory=list)
    all_text: str = ''
    structured_lists: list[StructuredList] = Field(default_factory=list)
    processes: list[ProcessBlock] = Field(default_factory=list)
    requirements: list[RequirementBlock] = Field(default_factory=list)
    contact_info: ContactInfo | None = None
    tables: list[TableData] = Field(default_factory=list)
    fee_information: FeeInformation | None = None


class AuthenticationContent(PageContent):
    type: Literal['authentication'] = 'authentication'
    login_url: str = ''
    account_info: AccountInfo | None = None
    form_fields: list[FormField] = Field(default_factory=list)
    buttons: list[str] = Field(default_factory=list)


class ServicesContent(PageContent):
    type: Literal['services'] = 'services'
    service_types: list[ServiceGroup] = Field(default_factory=list)
    licensing: LicensingInfo | None = None


class FeesContent(PageContent):
    type: Literal['fees'] = 'fees'
    fee_categories: list[FeeCategory] = Field(default_factory=list)
    fee_structure: list[TableData] = Field(default_factory=list)


class VisaContent(PageContent):
    type: Literal['visa'] = 'visa'
    visa_types: list[str] = Field(default_factory=list)
    application_process: list[ProcessBlock] = Field(default_factory=list)
    forms: list[HtmlForm] = Field(default_factory=list)


class SummitContent(PageContent):
    """Общие поля горных категорий (альпинизм, приключения)"""

    peaks: list[PeakRecord] = Field(default_factory=list)
    expeditions: list[ExpeditionRecord] = Field(default_factory=list)
    comprehensive_peaks: list[ReferencePeak] | None = None
    comprehensive_treks: list[ReferenceTrek] | None = None


class MountaineeringContent(SummitContent):
    type: Literal['mountaineering'] = 'mountaineering'


class AdventuresContent(SummitContent):
    type: Literal['adventures'] = 'adventures'


class FeedContent(PageContent):
    """Общие поля лент (новости, события)"""

    items: list[FeedItem] = Field(default_factory=list)


class NewsContent(FeedContent):
    type: Literal['news'] = 'news'


class EventsContent(FeedContent):
    type: Literal['events'] = 'events'


class ContactContent(PageContent):
    type: Literal['contact'] = 'contact'


class DestinationsContent(PageContent):
    type: Literal['destinations'] = 'destinations'


class RegulationsContent(PageContent):
    type: Literal['regulations'] = 'regulations'


class GeneralContent(PageContent):
    type: Literal['general'] = 'general'


CategoryContent = Annotated[
    Union[
        AuthenticationContent,
        ServicesContent,
        FeesContent,
        MountaineeringContent,
        VisaContent,
        NewsContent,
        EventsContent,
        AdventuresContent,
        ContactContent,
        DestinationsContent,
        RegulationsContent,
        GeneralContent,
    ],
    Field(discriminator='type'),
]

# категория -> класс содержимого; полнота проверяется в тестах
CONTENT_TYPES: dict[Category, type[PageContent]] = {
    Category.AUTHENTICATION: AuthenticationContent,
    Category.SERVICES: ServicesContent,
    Category.FEES: FeesContent,
    Category.MOUNTAINEERING: MountaineeringContent,
    Category.VISA: VisaContent,
    Category.NEWS: NewsContent,
    Category.EVENTS: EventsContent,
    Category.ADVENTURES: AdventuresContent,
    Category.CONTACT: ContactContent,
    Category.DESTINATIONS: DestinationsContent,
    Category.REGULATIONS: RegulationsContent,
    Category.GENERAL: GeneralContent,
}


# ============================================================================
# Записи обхода и документ базы знаний
# ============================================================================


class ScrapedPage(CamelModel):
    """
    Результат обхода одного узла карты сайта.

    Создаётся при каждом обходе; при повторном обходе секции
    заменяет предыдущую запись целиком.
    """

    url: str
    title: str
    scraped_at: datetime
    section: str
    parent_section: str | None = None
    content: CategoryContent


class FaqEntry(CamelModel):
    question: str
    answer: str


class KnowledgeBaseDocument(CamelModel):
    """
    Документ базы знаний: единственный экземпляр, хранится одним JSON-файлом.

    Attributes:
        last_updated: Время последней успешной записи (не убывает)
        base_url: Корень обходимого сайта
        sources: Записи обхода, по одной на секцию
        sections: Снимок карты сайта на момент полного обхода
        faq: Частые вопросы
    """

    last_updated: datetime
    base_url: str
    sources: list[ScrapedPage] = Field(default_factory=list)
    sections: list[SiteMapNode] = Field(default_factory=list)
    faq: list[FaqEntry] = Field(default_factory=list)

    def source_for(self, section: str) -> ScrapedPage | None:
        """
        Запись обхода для секции (или None)
        """
        for source in self.sources:
            if source.section == section:
                return source
        return None

    def present_sections(self) -> set[str]:
        """
        Имена секций, для которых есть записи
        """
        return {source.section for source in self.sources}

    def replace_source(self, record: ScrapedPage) -> None:
        """
        Заменяет запись секции новой (или добавляет, если секции ещё нет).

        Запись встаёт на место первой существующей записи этой секции,
        остальные дубликаты удаляются.
        """
        replaced = False
        updated: list[ScrapedPage] = []
        for source in self.sources:
            if source.section != record.section:
                updated.append(source)
            elif not replaced:
                updated.append(record)
                replaced = True
        if not replaced:
            updated.append(record)
        self.sources = updated

    def touch(self, now: datetime) -> None:
        """
        Обновляет last_updated, не допуская движения назад
        """
        if now > self.last_updated:
            self.last_updated = now

    def to_json(self) -> str:
        """
        Сериализует в JSON (camelCase, без пустых необязательных полей)
        """
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> 'KnowledgeBaseDocument':
        """
        Десериализует из JSON
        """
        return cls.model_validate_json(data)
