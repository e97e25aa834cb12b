"""
Общие фикстуры тестов базы знаний.
"""

import pytest

from helpers import FixedClock, RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def kb_path(tmp_path):
    return tmp_path / 'data' / 'knowledge-base.json'
