"""
测试公共 Fixtures
"""
import pytest

from fakes import RecordingSink


@pytest.fixture
def sink():
    return RecordingSink()
