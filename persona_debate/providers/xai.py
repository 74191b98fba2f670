"""xAI Grok provider using openai SDK (OpenAI-compatible API), with live X search."""

import asyncio
import logging
import math
import os
import random
import string
import time
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

import openai
from openai import AsyncOpenAI

from config.config_loader import ModelConfig, SearchConfig
from persona_debate.models import GenerationRequest, GenerationResult, SearchSource, TokenUsage
from persona_debate.providers.base import (
    AIProvider,
    ConfigurationError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)
from persona_debate.providers.retry import call_with_retry

logger = logging.getLogger(__name__)

INPUT_COST_PER_TOKEN = 0.20 / 1_000_000    # $0.20 per 1M input tokens
OUTPUT_COST_PER_TOKEN = 0.50 / 1_000_000   # $0.50 per 1M output tokens
SEARCH_COST_PER_SOURCE = 0.025             # $25 per 1,000 sources

REASONING_KEYWORDS = (
    "analyze", "complex", "systematic", "constitutional",
    "policy", "economic", "historical", "legal", "impact",
    "comprehensive", "evaluate", "compare", "explain",
)
# Longer topic+context text goes to the reasoning model regardless of keywords
_REASONING_LENGTH_THRESHOLD = 100


def estimate_cost(usage: TokenUsage | None, source_count: int = 0) -> float:
    """Estimated USD cost for token usage plus cited search sources."""
    prompt_tokens = usage.prompt_tokens if usage else 0
    completion_tokens = usage.completion_tokens if usage else 0
    return (
        prompt_tokens * INPUT_COST_PER_TOKEN
        + completion_tokens * OUTPUT_COST_PER_TOKEN
        + source_count * SEARCH_COST_PER_SOURCE
    )


def needs_reasoning(topic: str, context: str | None = None) -> bool:
    combined = f"{topic} {context or ''}".lower()
    return (
        any(keyword in combined for keyword in REASONING_KEYWORDS)
        or len(combined) > _REASONING_LENGTH_THRESHOLD
    )


def _request_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"req_{math.floor(time.time() * 1000)}_{suffix}"


def _first_field(item: Any, *names: str) -> str:
    """First non-empty field among *names*, for dict or attribute-style items."""
    for name in names:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value:
            return str(value)
    return ""


def _parse_sources(response: Any) -> list[SearchSource] | None:
    """Search sources from the response body, or None if it carries none.

    Accepts ``search_results`` / ``sources`` objects and plain ``citations`` URLs.
    """
    raw = getattr(response, "search_results", None) or getattr(response, "sources", None)
    if raw:
        return [
            SearchSource(
                url=_first_field(item, "url", "link"),
                title=_first_field(item, "title", "name"),
                snippet=_first_field(item, "snippet", "description", "text"),
            )
            for item in raw
        ]
    citations = getattr(response, "citations", None)
    if citations:
        return [
            SearchSource(url=c) if isinstance(c, str) else SearchSource(url=_first_field(c, "url", "link"))
            for c in citations
        ]
    return None


class XAIProvider(AIProvider):
    """xAI Grok provider via OpenAI-compatible API.

    Holds only configuration and the SDK client, so one instance can serve
    any number of concurrent ``generate`` calls.
    """

    def __init__(
        self,
        config: ModelConfig,
        search: SearchConfig | None = None,
        api_key: str | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self._config = config
        self._search = search or SearchConfig()
        self._sleep = sleep
        self._rand = rand
        key = (api_key if api_key is not None else os.environ.get(config.api_key_env, "")).strip()
        if not key:
            raise ConfigurationError(config.name, f"Missing API key: {config.api_key_env}")
        if not config.base_url:
            raise ConfigurationError(config.name, "base_url is required for xAI provider")
        # SDK retries are disabled; call_with_retry owns the retry policy.
        self._client = AsyncOpenAI(api_key=key, base_url=config.base_url, max_retries=0)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    @property
    def reasoning_model(self) -> str:
        return self._config.reasoning_model

    def select_model(self, topic: str, context: str | None = None) -> str:
        return self._config.reasoning_model if needs_reasoning(topic, context) else self._config.model

    def estimate_cost(self, usage: TokenUsage | None, source_count: int = 0) -> float:
        return estimate_cost(usage, source_count)

    def build_request_kwargs(self, request: GenerationRequest) -> dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``."""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        kwargs: dict[str, Any] = {
            "model": request.model or self._config.model,
            "messages": messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": request.top_p,
        }
        if request.stop:
            kwargs["stop"] = list(request.stop)
        if request.use_search:
            kwargs["extra_body"] = {"search_parameters": self._search.to_parameters()}
        return kwargs

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        kwargs = self.build_request_kwargs(request)
        model = kwargs["model"]
        logger.debug("xAI request: model=%s search=%s temperature=%.2f", model, request.use_search, request.temperature)

        start = time.monotonic()
        result = await call_with_retry(
            lambda: self._send(kwargs, request.use_search),
            self._config.max_retries,
            sleep=self._sleep,
            rand=self._rand,
            label=f"xAI {model}",
        )
        latency = time.monotonic() - start

        logger.info(
            "xAI %s: %.2fs, %s tokens, %d sources",
            model,
            latency,
            result.usage.total_tokens,
            len(result.sources),
        )
        return result

    async def generate_with_search(self, request: GenerationRequest) -> GenerationResult:
        return await self.generate(replace(request, use_search=True))

    async def _send(self, kwargs: dict[str, Any], use_search: bool) -> GenerationResult:
        """One attempt: call the API under the timeout and parse the response."""
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    **kwargs,
                    extra_headers={"X-Request-ID": _request_id()},
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderTimeoutError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except openai.APITimeoutError as exc:
            raise ProviderTimeoutError(self._config.name, f"Request timed out: {exc}") from exc
        except openai.APIStatusError as exc:
            if exc.status_code == 429:
                raise RateLimitError(self._config.name, f"Rate limited: {exc}") from exc
            raise ProviderError(
                self._config.name, f"API request failed ({exc.status_code}): {exc}", status_code=exc.status_code
            ) from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        return self._parse_response(response, kwargs["model"], use_search)

    def _parse_response(self, response: Any, model: str, use_search: bool) -> GenerationResult:
        choice = response.choices[0] if response.choices else None
        if choice is None:
            raise ProviderError(self._config.name, "Invalid response: no choices returned")

        usage = TokenUsage()
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        result = GenerationResult(
            content=choice.message.content or "",
            model=model,
            usage=usage,
        )

        if use_search:
            sources = _parse_sources(response)
            if sources is not None:
                result.sources = sources
                result.search_cost = len(sources) * SEARCH_COST_PER_SOURCE

        return result
