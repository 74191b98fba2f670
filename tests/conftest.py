"""Shared pytest fixtures."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from openai.types.chat import ChatCompletion

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, SearchConfig
from persona_debate.models import GenerationRequest, GenerationResult, SearchSource, TokenUsage
from persona_debate.personas import catalog
from persona_debate.providers.base import AIProvider
from persona_debate.providers.xai import XAIProvider, estimate_cost, needs_reasoning

# ~1000 chars: long enough to trigger voice enhancement
LONG_POST = "# Why This Matters Now\n\n" + "This is a substantive sentence about the topic. " * 20
SHORT_POST = "# Short Take\n\n" + "x" * 386   # exactly 400 chars


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="grok",
        model="grok-4-fast",
        reasoning_model="grok-4-fast-reasoning",
        api_key_env="TEST_XAI_API_KEY",
        timeout_sec=30,
        max_retries=3,
        max_tokens=2000,
    )


@pytest.fixture
def sample_search_config() -> SearchConfig:
    return SearchConfig()


@pytest.fixture
def sample_app_config(sample_model_config: ModelConfig, sample_search_config: SearchConfig) -> AppConfig:
    return AppConfig(
        model=sample_model_config,
        search=sample_search_config,
        defaults=DefaultsConfig(),
        available=True,
    )


@pytest.fixture
def liberal_expert():
    return catalog.get_persona("liberal_expert")


@pytest.fixture
def conservative_expert():
    return catalog.get_persona("conservative_expert")


@pytest.fixture
def liberal_grassroots():
    return catalog.get_persona("liberal_grassroots")


@pytest.fixture
def conservative_patriot():
    return catalog.get_persona("conservative_patriot")


def make_completion(content: str | None = "Generated post", usage=(120, 880, 1000), **extra) -> ChatCompletion:
    """Build a real ChatCompletion, with any extra body fields (search_results, citations...)."""
    data = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "grok-4-fast",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }
    if usage is not None:
        data["usage"] = {
            "prompt_tokens": usage[0],
            "completion_tokens": usage[1],
            "total_tokens": usage[2],
        }
    data.update(extra)
    return ChatCompletion.model_validate(data)


def make_status_error(status: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.x.ai/v1/chat/completions")
    response = httpx.Response(status, request=request)
    error_cls = openai.RateLimitError if status == 429 else openai.APIStatusError
    return error_cls(f"Error code: {status}", response=response, body=None)


@pytest.fixture
def xai_provider(sample_model_config: ModelConfig, sample_search_config: SearchConfig) -> XAIProvider:
    """XAIProvider with the SDK client, sleep and jitter replaced by test doubles."""
    provider = XAIProvider(
        sample_model_config,
        sample_search_config,
        api_key="xai-test-key",
        sleep=AsyncMock(),
        rand=lambda: 0.0,
    )
    provider._client = MagicMock()
    provider._client.chat.completions.create = AsyncMock(return_value=make_completion())
    return provider


class MockProvider(AIProvider):
    """Test double AIProvider.

    ``generate`` is an AsyncMock; every GenerationRequest it received is in
    ``generate.call_args_list``.
    """

    def __init__(
        self,
        content: str = LONG_POST,
        usage: TokenUsage | None = None,
        sources: list[SearchSource] | None = None,
        provider_name: str = "mock",
    ) -> None:
        self._name = provider_name
        self._content = content
        self._usage = usage or TokenUsage(prompt_tokens=200, completion_tokens=800, total_tokens=1000)
        self._sources = sources or []
        # Shadow the class method with an AsyncMock at the instance level.
        self.generate = AsyncMock(side_effect=self._respond)  # type: ignore[assignment]

    async def _respond(self, request: GenerationRequest) -> GenerationResult:
        return GenerationResult(
            content=self._content,
            model=request.model or self.model_string(),
            usage=self._usage,
            sources=list(self._sources) if request.use_search else [],
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-fast"

    async def generate(self, request: GenerationRequest) -> GenerationResult:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return await self._respond(request)

    def select_model(self, topic: str, context: str | None = None) -> str:
        return "mock-reasoning" if needs_reasoning(topic, context) else "mock-fast"

    def estimate_cost(self, usage: TokenUsage | None, source_count: int = 0) -> float:
        return estimate_cost(usage, source_count)

    def requests(self) -> list[GenerationRequest]:
        return [c.args[0] for c in self.generate.call_args_list]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
