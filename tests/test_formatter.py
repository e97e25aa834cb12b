from dts_assistant.knowledge.faq import DEFAULT_FAQ
from dts_assistant.knowledge.formatter import HEADER_TITLE, render, render_record
from dts_assistant.knowledge.models import (
    AdventuresContent,
    AuthenticationContent,
    FeedItem,
    FeesContent,
    KnowledgeBaseDocument,
    NewsContent,
    ScrapedPage,
    StructuredList,
    TableData,
)
from dts_assistant.knowledge.reference_data import ACCOUNT_INFO, ADVENTURE_PEAKS, ADVENTURE_TREKS

from helpers import NOW, make_document


def _record(content, section: str, title: str | None = None) -> ScrapedPage:
    return ScrapedPage(
        url=content.url,
        title=title or section,
        scraped_at=NOW,
        section=section,
        content=content,
    )


FEES_RECORD = _record(
    FeesContent(
        section='Fees',
        url='https://x/fees',
        fee_structure=[
            TableData(title='Table', headers=['License Type', 'Fee'], rows=[['Tour Guide', '5000 PKR']])
        ],
    ),
    'Fees',
)


class TestRender:
    """
    Тесты форматирования документа
    """

    def test_deterministic(self):
        document = make_document()
        document.replace_source(FEES_RECORD)
        document.faq = list(DEFAULT_FAQ)

        assert render(document) == render(document)
        assert render(document) == render(KnowledgeBaseDocument.from_json(document.to_json()))

    def test_header(self):
        text = render(make_document(sections=['A', 'B']))
        lines = text.splitlines()

        assert lines[0] == HEADER_TITLE
        assert lines[1] == f'Last Updated: {NOW.isoformat()}'
        assert lines[2] == 'Sources: 2 websites'

    def test_records_in_document_order(self):
        text = render(make_document(sections=['Zeta', 'Alpha']))

        assert text.index('=== Zeta') < text.index('=== Alpha')

    def test_fee_table_line(self):
        document = make_document(sections=[])
        document.replace_source(FEES_RECORD)
        text = render(document)

        assert '=== Fees (https://x/fees) ===' in text
        assert 'FEE STRUCTURE:' in text
        assert 'License Type | Fee' in text
        assert 'Tour Guide | 5000 PKR' in text

    def test_faq_block(self):
        document = make_document(sections=[])
        document.faq = list(DEFAULT_FAQ)
        text = render(document)

        assert 'FREQUENTLY ASKED QUESTIONS:' in text
        assert f'Q: {DEFAULT_FAQ[0].question}\nA: {DEFAULT_FAQ[0].answer}' in text
        assert text.index('FREQUENTLY ASKED QUESTIONS:') > text.index('Sources:')


class TestCategoryTemplates:
    """
    Шаблоны отдельных категорий
    """

    def test_common_blocks(self):
        record = _record(
            FeesContent(
                section='Fees',
                url='https://x/fees',
                headings=['Fee Schedule'],
                paragraphs=['Fees are payable online.'],
                structured_lists=[StructuredList(items=['Peak royalty'], context='Expedition fees')],
            ),
            'Fees',
        )
        text = render_record(record)

        assert 'HEADINGS:\n• Fee Schedule' in text
        assert 'CONTENT:\nFees are payable online.' in text
        assert 'Expedition fees:\n  • Peak royalty' in text

    def test_empty_blocks_are_omitted(self):
        text = render_record(_record(FeesContent(section='Fees', url='https://x/fees'), 'Fees'))

        assert 'FEE STRUCTURE' not in text
        assert 'HEADINGS' not in text

    def test_authentication(self):
        record = _record(
            AuthenticationContent(
                section='Login',
                url='https://app.dtsgb.gog.pk/auth/login',
                login_url='https://app.dtsgb.gog.pk/auth/login',
                account_info=ACCOUNT_INFO,
                buttons=['Sign In'],
            ),
            'Login & Registration',
        )
        text = render_record(record)

        assert 'LOGIN URL:\nhttps://app.dtsgb.gog.pk/auth/login' in text
        assert f'Eligibility: {ACCOUNT_INFO.eligibility}' in text
        assert 'BUTTONS:\n• Sign In' in text

    def test_adventures_reference_data(self):
        record = _record(
            AdventuresContent(
                section='Adventures',
                url='https://dtsgb.gog.pk/adventures',
                comprehensive_peaks=list(ADVENTURE_PEAKS),
                comprehensive_treks=list(ADVENTURE_TREKS),
            ),
            'Adventures',
        )
        text = render_record(record)

        assert 'MAJOR PEAKS:' in text
        assert 'TREKKING ROUTES:' in text
        for peak in ADVENTURE_PEAKS:
            assert f'• {peak.name}: {peak.elevation}' in text
        for trek in ADVENTURE_TREKS:
            assert trek.route in text

    def test_news_items(self):
        record = _record(
            NewsContent(
                section='News & Advisories',
                url='https://dtsgb.gog.pk/news',
                items=[FeedItem(title='Road closed', date='1 Oct', summary='KKH closed near Chilas.')],
            ),
            'News & Advisories',
        )
        text = render_record(record)

        assert 'NEWS:\n• Road closed (1 Oct)\n  KKH closed near Chilas.' in text

    def test_parent_section(self):
        record = make_document(sections=['Licensing']).sources[0]
        record.parent_section = 'Tourism Services'

        assert 'Section: Licensing / Parent: Tourism Services' in render_record(record)
