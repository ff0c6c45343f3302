import pytest
from typer.testing import CliRunner

from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.config import settings
from interviewer.infrastructure.resilience.api_retry import ApiRetryService

CONFIG_ENV_VARS = [
    "OPENAI_API_KEY", "GEMINI_API_KEY", "OPENAI_BASE_URL", "GEMINI_BASE_URL",
    "AI_DEFAULT_PROVIDER", "AI_DEFAULT_MODEL", "AI_MAX_RETRIES", "AI_REQUEST_TIMEOUT",
    "AI_DEFAULT_MAX_TOKENS", "AI_DEFAULT_TEMPERATURE", "AI_ENABLE_CACHING", "AI_ENABLE_METRICS",
    "AI_ENABLE_STREAMING", "AI_RATE_LIMIT_RPM", "AI_RATE_LIMIT_TPM", "AI_DAILY_TOKEN_LIMIT",
    "AI_COST_PER_TOKEN", "AI_MAX_COST_PER_DAY", "LOGGING_LEVEL", "LOGGING_FILE", "LOGGING_FORMAT",
]


class RecordingSleep:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keeps real environment variables, .env files and ~/.interviewer out of tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", True)
    monkeypatch.chdir(tmp_path)
    settings.clear_test_config()
    yield
    settings.clear_test_config()


@pytest.fixture
def mock_config():
    return AIConfig()


@pytest.fixture
def openai_config():
    return AIConfig(openai_api_key="sk-test", default_provider="openai", default_model="gpt-3.5-turbo")


@pytest.fixture
def gemini_config():
    return AIConfig(gemini_api_key="g-test", default_provider="gemini", default_model="gemini-1.5-flash")


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def retry_service(fake_sleep):
    """Three retries (four attempts) without real waiting."""
    return ApiRetryService(max_retries=3, sleep=fake_sleep)
