import pytest

from examprep.settings import Settings

from helpers import FakeLLM


@pytest.fixture
def app_settings():
    return Settings(
        _env_file=None,
        llm_api_key="test-key",
        probe_on_startup=False,
        database_url=None,
        rate_limit_quota=100,
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()
