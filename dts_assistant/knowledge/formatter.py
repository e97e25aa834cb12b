"""
Форматирование базы знаний в плоский текст для промпта языковой модели.

Формат:
    DTS GILGIT-BALTISTAN KNOWLEDGE BASE
    Last Updated: ...
    Sources: N websites

    === <title> (<url>) ===
    Section: ... / Parent: ...
    Scraped: ...
    <общие блоки>
    <блоки категории>

    FREQUENTLY ASKED QUESTIONS:
    Q: ...
    A: ...

Порядок записей и элементов сохраняется, ничего не сокращается.
Один и тот же документ всегда даёт один и тот же текст.
"""

from typing import assert_never

from dts_assistant.knowledge.models import (
    AdventuresContent,
    AuthenticationContent,
    CategoryContent,
    ContactContent,
    DestinationsContent,
    EventsContent,
    FaqEntry,
    FeedContent,
    FeesContent,
    GeneralContent,
    KnowledgeBaseDocument,
    MountaineeringContent,
    NewsContent,
    PageContent,
    ProcessBlock,
    RegulationsContent,
    ScrapedPage,
    ServicesContent,
    SummitContent,
    TableData,
    VisaContent,
)

HEADER_TITLE = 'DTS GILGIT-BALTISTAN KNOWLEDGE BASE'


def _bullets(items: list[str]) -> list[str]:
    return [f'• {item}' for item in items]


def _block(title: str, lines: list[str]) -> list[str]:
    """Блок с заголовком; пустой блок не выводится"""
    if not lines:
        return []
    return [f'{title}:', *lines, '']


def _table_lines(table: TableData) -> list[str]:
    lines = [f'[{table.title}]']
    if table.headers:
        lines.append(' | '.join(table.headers))
    lines.extend(' | '.join(row) for row in table.rows)
    return lines


def _tables_block(title: str, tables: list[TableData]) -> list[str]:
    lines: list[str] = []
    for table in tables:
        lines.extend(_table_lines(table))
    return _block(title, lines)


def _processes_block(title: str, processes: list[ProcessBlock]) -> list[str]:
    lines: list[str] = []
    for process in processes:
        lines.append(f'{process.title}:')
        lines.extend(f'  {index}. {step}' for index, step in enumerate(process.steps, start=1))
    return _block(title, lines)


def _common_lines(content: PageContent) -> list[str]:
    """Блоки общей фазы извлечения"""
    lines: list[str] = []

    lines += _block('HEADINGS', _bullets(content.headings))
    lines += _block('CONTENT', content.paragraphs)

    list_lines: list[str] = []
    for structured in content.structured_lists:
        list_lines.append(f'{structured.context}:')
        list_lines.extend(f'  • {item}' for item in structured.items)
    lines += _block('LISTS', list_lines)

    lines += _processes_block('PROCESSES', content.processes)

    requirement_lines: list[str] = []
    for requirement in content.requirements:
        requirement_lines.append(f'{requirement.category}:')
        requirement_lines.extend(f'  • {item}' for item in requirement.items)
    lines += _block('REQUIREMENTS', requirement_lines)

    lines += _tables_block('TABLES', content.tables)

    if content.contact_info is not None:
        contact = content.contact_info
        contact_lines = []
        if contact.phones:
            contact_lines.append(f'Phone: {", ".join(contact.phones)}')
        if contact.emails:
            contact_lines.append(f'Email: {", ".join(contact.emails)}')
        contact_lines.extend(f'Address: {address}' for address in contact.addresses)
        lines += _block('CONTACT INFO', contact_lines)

    if content.fee_information is not None:
        lines += _block('FEE AMOUNTS', _bullets(content.fee_information.amounts))

    return lines


# ============================================================================
# Шаблоны категорий
# ============================================================================


def _authentication_lines(content: AuthenticationContent) -> list[str]:
    lines = _block('LOGIN URL', [content.login_url] if content.login_url else [])

    if content.account_info is not None:
        info = content.account_info
        lines += _block(
            'ACCOUNT INFORMATION',
            [
                f'Account types: {", ".join(info.account_types)}',
                f'Eligibility: {info.eligibility}',
                f'Requirements: {", ".join(info.requirements)}',
                f'Process: {info.process}',
            ],
        )

    lines += _block(
        'LOGIN FORM FIELDS',
        [
            f'• {field.name or field.placeholder or "unnamed"} ({field.field_type})'
            + (' required' if field.required else '')
            for field in content.form_fields
        ],
    )
    lines += _block('BUTTONS', _bullets(content.buttons))
    return lines


def _services_lines(content: ServicesContent) -> list[str]:
    service_lines: list[str] = []
    for group in content.service_types:
        service_lines.append(f'{group.category}:')
        service_lines.extend(f'  • {service}' for service in group.services)
    lines = _block('SERVICE TYPES', service_lines)

    if content.licensing is not None:
        licensing = content.licensing
        licensing_lines = []
        if licensing.overview:
            licensing_lines.append(f'Overview: {licensing.overview}')
        if licensing.types:
            licensing_lines.append('License types:')
            licensing_lines.extend(f'  • {name}' for name in licensing.types)
        lines += _block('LICENSING', licensing_lines)

    return lines


def _fees_lines(content: FeesContent) -> list[str]:
    category_lines: list[str] = []
    for fee_category in content.fee_categories:
        category_lines.append(f'{fee_category.category}:')
        category_lines.extend(f'  • {fee}' for fee in fee_category.fees)

    lines = _block('FEE CATEGORIES', category_lines)
    lines += _tables_block('FEE STRUCTURE', content.fee_structure)
    return lines


def _visa_lines(content: VisaContent) -> list[str]:
    lines = _block('VISA TYPES', _bullets(content.visa_types))
    lines += _processes_block('APPLICATION PROCESS', content.application_process)

    form_lines: list[str] = []
    for form in content.forms:
        form_lines.append(f'Form {form.method or "GET"} {form.action or ""}'.rstrip())
        form_lines.extend(f'  • {field.name or "unnamed"} ({field.field_type})' for field in form.fields)
    lines += _block('FORMS', form_lines)
    return lines


def _summit_lines(content: SummitContent) -> list[str]:
    lines = _block(
        'PEAKS',
        [
            ' - '.join(part for part in (peak.name, peak.height, peak.description) if part)
            for peak in content.peaks
        ],
    )
    lines += _block(
        'EXPEDITIONS',
        [
            ' - '.join(part for part in (item.title, item.date, item.description) if part)
            for item in content.expeditions
        ],
    )

    if content.comprehensive_peaks:
        lines += _block(
            'MAJOR PEAKS',
            [
                f'• {peak.name}: {peak.elevation}, base camp {peak.base_camp}, '
                f'difficulty {peak.difficulty}'
                + (f', first ascent {peak.first_ascent}' if peak.first_ascent else '')
                for peak in content.comprehensive_peaks
            ],
        )
    if content.comprehensive_treks:
        lines += _block(
            'TREKKING ROUTES',
            [
                f'• {trek.name}: {trek.elevation}, route {trek.route}, difficulty {trek.difficulty}'
                for trek in content.comprehensive_treks
            ],
        )
    return lines


def _feed_lines(title: str, content: FeedContent) -> list[str]:
    lines: list[str] = []
    for item in content.items:
        lines.append(f'• {item.title}' + (f' ({item.date})' if item.date else ''))
        if item.summary:
            lines.append(f'  {item.summary}')
        if item.link:
            lines.append(f'  Link: {item.link}')
    return _block(title, lines)


def _category_lines(content: CategoryContent) -> list[str]:
    """Шаблон категории; новые варианты содержимого нужно добавить сюда"""
    match content:
        case AuthenticationContent():
            return _authentication_lines(content)
        case ServicesContent():
            return _services_lines(content)
        case FeesContent():
            return _fees_lines(content)
        case VisaContent():
            return _visa_lines(content)
        case MountaineeringContent() | AdventuresContent():
            return _summit_lines(content)
        case NewsContent():
            return _feed_lines('NEWS', content)
        case EventsContent():
            return _feed_lines('EVENTS', content)
        case ContactContent() | DestinationsContent() | RegulationsContent() | GeneralContent():
            return []
        case _:
            assert_never(content)


# ============================================================================
# Документ целиком
# ============================================================================


def render_record(record: ScrapedPage) -> str:
    """
    Текст одной записи обхода
    """
    section_line = f'Section: {record.section}'
    if record.parent_section:
        section_line += f' / Parent: {record.parent_section}'

    lines = [
        f'=== {record.title} ({record.url}) ===',
        section_line,
        f'Category: {record.content.type}',
        f'Scraped: {record.scraped_at.isoformat()}',
        '',
    ]
    lines += _common_lines(record.content)
    lines += _category_lines(record.content)
    return '\n'.join(lines)


def render_faq(faq: list[FaqEntry]) -> str:
    entries = '\n\n'.join(f'Q: {entry.question}\nA: {entry.answer}' for entry in faq)
    return f'FREQUENTLY ASKED QUESTIONS:\n{entries}\n'


def render(document: KnowledgeBaseDocument) -> str:
    """
    Преобразует документ базы знаний в текст для промпта.

    Args:
        document: Документ базы знаний

    Returns:
        Текст: заголовок, записи обхода в исходном порядке, FAQ
    """
    parts = [
        '\n'.join(
            [
                HEADER_TITLE,
                f'Last Updated: {document.last_updated.isoformat()}',
                f'Sources: {len(document.sources)} websites',
                '',
            ]
        )
    ]
    parts.extend(render_record(record) for record in document.sources)
    parts.append(render_faq(document.faq))
    return '\n'.join(parts)
