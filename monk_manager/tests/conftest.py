import logging

import httpx
import pytest

from monk_manager.domain.models import ModelConfig
from monk_manager.infrastructure.logging.logger import LOGGER_NAME
from monk_manager.providers.anthropic_client import AnthropicClient


@pytest.fixture
def model_config():
    return ModelConfig(
        provider="anthropic",
        model_name="m1",
        api_key="test-key",
        temperature=0.5,
        max_tokens=100,
    )


@pytest.fixture
def make_client(model_config):
    """Build an AnthropicClient whose HTTP traffic goes to `handler`."""

    def factory(handler, config=None):
        http = httpx.Client(transport=httpx.MockTransport(handler))
        return AnthropicClient(config or model_config, http_client=http)

    return factory



@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Empty cwd, no user config dir and no credential/config variables."""

    for var in ("ANTHROPIC_API_KEY", "MONK_CONFIG", "MONK_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logger() so they don't outlive capsys."""

    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
