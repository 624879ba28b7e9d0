# FILE: tests/conftest.py
"""
Pytest configuration for the factory test suite.

Configures:
- settings cache reset around every test (FACTORY_* env changes take effect)
- shared compiler / parser fixtures
"""
import pytest

from config.settings import get_settings
from factory.ir.compiler import SpecificationCompiler
from factory.soc.parser import SOCParser


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def compiler():
    return SpecificationCompiler()


@pytest.fixture
def parser():
    return SOCParser(["backend/", "frontend/", "api/"])

