import json
import os

import pytest

from dts_assistant.knowledge.errors import StoreReadError, StoreWriteError
from dts_assistant.knowledge.models import (
    FeeInformation,
    FeesContent,
    KnowledgeBaseDocument,
    ScrapedPage,
    TableData,
)
from dts_assistant.knowledge.store import KnowledgeBaseStore

from helpers import NOW, make_document


def _fees_record() -> ScrapedPage:
    table = TableData(title='Fee Schedule', headers=['License Type', 'Fee'], rows=[['Tour Guide', '5000 PKR']])
    return ScrapedPage(
        url='https://dts.test/fees',
        title='Fees',
        scraped_at=NOW,
        section='Fees & Expeditions',
        content=FeesContent(
            section='Fees & Expeditions',
            url='https://dts.test/fees',
            tables=[table],
            fee_information=FeeInformation(amounts=['Rs. 500'], tables=[table]),
            fee_structure=[table],
        ),
    )


class TestRoundTrip:
    """
    Тесты записи и чтения документа
    """

    def test_write_then_read(self, kb_path):
        store = KnowledgeBaseStore(kb_path)
        document = make_document()
        document.replace_source(_fees_record())

        store.write(document)
        loaded = store.read()

        assert loaded.model_dump() == document.model_dump()
        assert isinstance(loaded.source_for('Fees & Expeditions').content, FeesContent)

    def test_camel_case_on_disk(self, kb_path):
        store = KnowledgeBaseStore(kb_path)
        document = make_document()
        document.replace_source(_fees_record())
        store.write(document)

        data = json.loads(kb_path.read_text(encoding='utf-8'))

        assert 'lastUpdated' in data
        assert 'baseUrl' in data
        fees = next(s for s in data['sources'] if s['section'] == 'Fees & Expeditions')
        assert 'scrapedAt' in fees
        assert fees['content']['type'] == 'fees'
        assert fees['content']['feeStructure'][0]['headers'] == ['License Type', 'Fee']
        # пустые необязательные поля не записываются
        assert 'parentSection' not in fees

    def test_write_creates_directory(self, tmp_path):
        path = tmp_path / 'nested' / 'dir' / 'kb.json'
        KnowledgeBaseStore(path).write(make_document())
        assert path.is_file()

    def test_overwrite_leaves_no_temp_files(self, kb_path):
        store = KnowledgeBaseStore(kb_path)
        store.write(make_document())
        store.write(make_document(sections=['Licensing']))

        assert [p.name for p in kb_path.parent.iterdir()] == ['knowledge-base.json']
        assert store.read().present_sections() == {'Licensing'}


class TestReadFailures:
    """
    Отсутствующий или битый файл
    """

    def test_missing_file(self, kb_path):
        store = KnowledgeBaseStore(kb_path)

        assert not store.exists()
        with pytest.raises(StoreReadError):
            store.read()
        assert store.load() is None

    @pytest.mark.parametrize(
        'raw',
        [
            '',
            '{not json',
            '[]',
            '{"baseUrl": "https://dts.test/"}',
            '{"lastUpdated": "2026-10-18T12:00:00Z", "baseUrl": "x", "sources": [{"content": {"type": "unknown"}}]}',
        ],
    )
    def test_invalid_file(self, kb_path, raw):
        kb_path.parent.mkdir(parents=True)
        kb_path.write_text(raw, encoding='utf-8')
        store = KnowledgeBaseStore(kb_path)

        with pytest.raises(StoreReadError):
            store.read()
        assert store.load() is None


class TestWriteFailures:
    def test_failed_write_keeps_previous_document(self, kb_path, monkeypatch):
        store = KnowledgeBaseStore(kb_path)
        previous = make_document(sections=['Licensing'])
        store.write(previous)

        def broken_replace(src, dst):
            raise OSError('disk full')

        monkeypatch.setattr(os, 'replace', broken_replace)

        with pytest.raises(StoreWriteError):
            store.write(make_document())

        monkeypatch.undo()
        assert store.read().present_sections() == {'Licensing'}
        assert [p.name for p in kb_path.parent.iterdir()] == ['knowledge-base.json']


class TestDocument:
    """
    Тесты операций документа
    """

    def test_replace_source_keeps_position(self):
        document = make_document(sections=['A', 'B', 'C'])
        replacement = make_document(sections=['B'], last_updated=NOW.replace(hour=13)).sources[0]

        document.replace_source(replacement)

        assert [s.section for s in document.sources] == ['A', 'B', 'C']
        assert document.source_for('B').scraped_at == replacement.scraped_at

    def test_replace_source_removes_duplicates(self):
        document = make_document(sections=['A', 'B', 'A'])
        replacement = make_document(sections=['A']).sources[0]

        document.replace_source(replacement)

        assert [s.section for s in document.sources] == ['A', 'B']

    def test_replace_source_appends_new_section(self):
        document = make_document(sections=['A'])
        document.replace_source(make_document(sections=['Z']).sources[0])

        assert [s.section for s in document.sources] == ['A', 'Z']

    def test_touch_is_monotonic(self):
        document = make_document()
        document.touch(NOW.replace(hour=11))
        assert document.last_updated == NOW

        document.touch(NOW.replace(hour=13))
        assert document.last_updated == NOW.replace(hour=13)

    def test_from_json_accepts_camel_case(self):
        document = KnowledgeBaseDocument.from_json(
            '{"lastUpdated": "2026-10-18T12:00:00Z", "baseUrl": "https://dts.test/", "sources": [], "faq": []}'
        )
        assert document.last_updated == NOW
        assert document.base_url == 'https://dts.test/'
