"""Shared test fixtures for the MealAppeal test suite."""

import pytest
from structlog.testing import capture_logs
from unittest.mock import AsyncMock, MagicMock

from ai.models import ModelConfig, ModelFeatures, TokenPricing
from ai.registry import ModelRegistry
from config.constants import MODEL_OVERRIDE_KEYS, ImageDetail


@pytest.fixture(autouse=True)
def _clear_model_overrides(monkeypatch):
    """Keep OPENAI_MODEL_* from the developer's shell out of the tests."""
    for key in MODEL_OVERRIDE_KEYS.values():
        monkeypatch.delenv(key, raising=False)


def make_model(model_id: str, **kwargs) -> ModelConfig:
    """Build a ModelConfig with sensible test defaults."""
    defaults = {
        "display_name": model_id.upper(),
        "max_tokens": 500,
        "temperature": 0.3,
        "image_detail": ImageDetail.LOW,
        "cost_per_million_tokens": TokenPricing(input=1.0, output=2.0),
        "features": ModelFeatures(),
    }
    defaults.update(kwargs)
    return ModelConfig(model_id=model_id, **defaults)


# ── Small registry: A is live, B is deprecated in favor of A ──


@pytest.fixture
def model_a():
    return make_model("A", cost_per_million_tokens=TokenPricing(input=1, output=2))


@pytest.fixture
def model_b():
    return make_model("B", deprecated=True, fallback_model_id="A", deprecation_date="2024-01-01")


@pytest.fixture
def small_registry(model_a, model_b):
    return ModelRegistry([model_a, model_b], default_model_id="A")


# ── Log capture ──


@pytest.fixture
def captured_logs():
    """Structured log events emitted during the test."""
    with capture_logs() as logs:
        yield logs


def events(logs: list[dict], name: str) -> list[dict]:
    return [entry for entry in logs if entry["event"] == name]


# ── OpenAI client mock ──


def make_completion(content: str | None, prompt_tokens: int = 1200, completion_tokens: int = 300):
    """Mimic an OpenAI chat completion response."""
    response = MagicMock()
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response.choices = [choice]
    response.usage = MagicMock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return response


@pytest.fixture
def mock_openai():
    """Mock AsyncOpenAI client with chat.completions.create as AsyncMock."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=make_completion('{"foodName": "Caesar salad", "nutrition": {"calories": 420}}')
    )
    return client
