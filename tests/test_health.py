"""
Тесты отчёта о состоянии базы знаний.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from dts_assistant.knowledge.health import HealthStatus, check_health
from dts_assistant.knowledge.service import JobStatus
from dts_assistant.knowledge.site_map import REQUIRED_SECTIONS
from dts_assistant.knowledge.store import KnowledgeBaseStore

from helpers import NOW, make_document


@pytest.fixture
def store(kb_path) -> KnowledgeBaseStore:
    return KnowledgeBaseStore(kb_path)


class TestCritical:
    def test_missing_file(self, store):
        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.CRITICAL
        assert report.exit_code == 2
        assert report.last_updated is None
        assert report.recommendations == ['Knowledge base file not found - run initial scraping']

    def test_unreadable_file(self, store, kb_path):
        kb_path.parent.mkdir(parents=True)
        kb_path.write_text('{broken', encoding='utf-8')

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.CRITICAL
        assert 'unreadable' in report.recommendations[0]

    def test_missing_required_sections(self, store):
        sections = [s for s in REQUIRED_SECTIONS if s not in ('Licensing', 'Visa Information')]
        store.write(make_document(last_updated=NOW - timedelta(minutes=5), sections=sections))

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.CRITICAL
        assert report.missing_sections == ['Licensing', 'Visa Information']
        assert 'Missing critical sections: Licensing, Visa Information' in report.recommendations


class TestWarning:
    def test_stale_dynamic_sections(self, store):
        store.write(
            make_document(
                last_updated=NOW - timedelta(hours=1),
                scraped_at={'News & Advisories': NOW - timedelta(hours=3)},
            )
        )

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.WARNING
        assert report.exit_code == 1
        assert report.stale_sections == ['News & Advisories']
        assert 'Run selective update for dynamic content' in report.recommendations

    def test_dynamic_under_two_hours_is_not_stale(self, store):
        """Порог отчёта мягче порога выборочного обхода"""
        store.write(
            make_document(
                last_updated=NOW - timedelta(hours=1),
                scraped_at={'News & Advisories': NOW - timedelta(minutes=90)},
            )
        )

        assert check_health(store, now=NOW).status == HealthStatus.HEALTHY

    def test_old_document(self, store):
        document = make_document(last_updated=NOW - timedelta(hours=5))
        for section in ('News & Advisories', 'Events & Travel Trade'):
            document.source_for(section).scraped_at = NOW - timedelta(minutes=10)
        store.write(document)

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.WARNING
        assert 'Knowledge base is older than 4 hours' in report.recommendations

    def test_day_old_document_recommends_full_update(self, store):
        store.write(make_document(last_updated=NOW - timedelta(hours=25)))

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.WARNING
        assert report.time_since_update == timedelta(hours=25)
        assert 'Consider running full knowledge base update' in report.recommendations


class TestHealthy:
    def test_fresh_document(self, store):
        store.write(make_document(last_updated=NOW - timedelta(minutes=20)))

        report = check_health(store, now=NOW)

        assert report.status == HealthStatus.HEALTHY
        assert report.exit_code == 0
        assert report.total_sources == len(REQUIRED_SECTIONS)
        assert report.recommendations == []

    def test_failed_background_refresh_reported(self, store):
        store.write(make_document(last_updated=NOW - timedelta(minutes=20)))
        last_job = SimpleNamespace(status=JobStatus.FAILED, error='Full crawl produced no records')

        report = check_health(store, now=NOW, last_job=last_job)

        assert report.last_refresh_status == 'failed'
        assert 'Last background refresh failed: Full crawl produced no records' in report.recommendations
