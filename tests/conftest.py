"""Shared pytest configuration for modoc tests."""

import pytest
from modoc import RetrieverConfig
from modoc.locator import SourceLocator

from tests.helpers import FakeProvider

SOURCE_URL = "https://example.com/blob/main/%{path}#L%{line}"


@pytest.fixture
def provider():
    """Empty in-memory provider; tests add the modules they need."""
    return FakeProvider()


@pytest.fixture
def config():
    return RetrieverConfig(source_root="/src", source_url_pattern=SOURCE_URL)


@pytest.fixture
def locator():
    """Locator with no declarations, linking to lib/module.ex."""
    return SourceLocator(entries=(), source_path="lib/module.ex", url_pattern=SOURCE_URL)
