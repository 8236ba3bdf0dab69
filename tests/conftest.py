"""Shared test fixtures for swe_llm.

Every fixture builds fresh, isolated state: settings are explicit (no
environment or .env lookups) and each manager owns its own circuit and
identity maps.
"""

import pytest

from swe_llm.llm.config import CallerConfig
from swe_llm.llm.manager import ModelManager, ModelManagerConfig, reset_model_manager
from swe_llm.settings import Settings
from tests.helpers.llm import FakeClock, make_allowed_caller, make_byok_caller, make_test_settings


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Production settings with an allow-list and platform keys."""
    return make_test_settings()


@pytest.fixture
def mock_settings(test_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Make get_settings() return test settings everywhere."""
    from swe_llm import settings

    settings.get_settings.cache_clear()
    monkeypatch.setattr(settings, "get_settings", lambda: test_settings)
    for module in (
        "swe_llm.allowed_users",
        "swe_llm.logging_config",
        "swe_llm.llm.factory",
        "swe_llm.llm.key_vault",
        "swe_llm.llm.manager",
    ):
        monkeypatch.setattr(f"{module}.get_settings", lambda: test_settings)
    return test_settings


# =============================================================================
# CALLERS
# =============================================================================


@pytest.fixture
def byok_caller() -> CallerConfig:
    """Caller who is not allow-listed and supplies encrypted keys."""
    return make_byok_caller()


@pytest.fixture
def allowed_caller() -> CallerConfig:
    """Allow-listed caller running on platform credentials."""
    return make_allowed_caller()


# =============================================================================
# RESILIENCE CONTEXT
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(test_settings: Settings, clock: FakeClock) -> ModelManager:
    """Isolated model manager on a fake clock."""
    return ModelManager(ModelManagerConfig(), settings=test_settings, time_func=clock)


@pytest.fixture(autouse=True)
def _reset_default_manager():
    """Drop the process-wide default manager between tests."""
    reset_model_manager()
    yield
    reset_model_manager()
