"""Tests for persona_debate/voice.py."""

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from persona_debate.personas import catalog
from persona_debate.providers.base import ProviderError
from persona_debate.voice import (
    ENHANCE_MAX_TOKENS,
    REASON_UNUSABLE_OUTPUT,
    REASON_UPSTREAM_ERROR,
    SAMPLE_LENGTH,
    VoiceEnhancer,
    add_quick_voice_touches,
    build_enhancement_prompt,
    enhancement_temperature,
)
from tests.conftest import MockProvider

ORIGINAL = ("A" * SAMPLE_LENGTH) + ("B" * 400)
REWRITE = "Growing up in Oakland, I learned that " + "we fight together. " * 5


@pytest.fixture
def provider() -> MockProvider:
    return MockProvider(content=REWRITE)


async def test_enhance_replaces_prefix_and_keeps_remainder(provider, liberal_grassroots):
    result = await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_grassroots, 0.6)
    assert result.enhanced is True
    assert result.reason is None
    assert result.content == REWRITE + "B" * 400


async def test_enhance_request_parameters(provider, liberal_grassroots):
    await VoiceEnhancer(provider, model="grok-4-fast").enhance(ORIGINAL, liberal_grassroots, 0.6)
    request = provider.requests()[0]
    assert request.model == "grok-4-fast"
    assert request.max_tokens == ENHANCE_MAX_TOKENS
    assert request.temperature == pytest.approx(0.86)
    assert request.use_search is False
    assert "A" * SAMPLE_LENGTH in request.prompt
    assert "B" not in request.prompt
    assert "Alex Rivera" in request.system_prompt


async def test_enhance_defaults_to_provider_model(provider, liberal_grassroots):
    await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_grassroots, 0.6)
    assert provider.requests()[0].model == "mock-fast"


async def test_enhance_upstream_error_returns_original(provider, liberal_expert, caplog):
    provider.generate = AsyncMock(side_effect=ProviderError("mock", "boom", status_code=500))
    with caplog.at_level("WARNING"):
        result = await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_expert, 0.9)
    assert result.content is ORIGINAL
    assert result.enhanced is False
    assert result.reason == REASON_UPSTREAM_ERROR
    assert "Voice enhancement failed" in caplog.text


async def test_enhance_unexpected_error_returns_original(provider, liberal_expert):
    provider.generate = AsyncMock(side_effect=RuntimeError("unexpected"))
    result = await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_expert, 0.9)
    assert result.content == ORIGINAL
    assert result.reason == REASON_UPSTREAM_ERROR


@pytest.mark.parametrize("output", ["", "   ", "Too short to use.", "x" * 50])
async def test_enhance_unusable_output_returns_original(liberal_expert, output):
    provider = MockProvider(content=output)
    result = await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_expert, 0.9)
    assert result.content == ORIGINAL
    assert result.enhanced is False
    assert result.reason == REASON_UNUSABLE_OUTPUT


async def test_enhance_content_shorter_than_sample(liberal_expert):
    provider = MockProvider(content=REWRITE)
    result = await VoiceEnhancer(provider).enhance("Short original.", liberal_expert, 0.9)
    assert result.content == REWRITE


def test_enhancement_temperature_range():
    assert enhancement_temperature(0.0) == pytest.approx(0.8)
    assert enhancement_temperature(1.0) == pytest.approx(0.9)


def test_expert_prompt_mentions_credentials(liberal_expert):
    prompt = build_enhancement_prompt("sample", liberal_expert)
    assert "elite liberal expert" in prompt
    assert "credentials" in prompt
    assert liberal_expert.signature_phrases[0] in prompt


def test_grassroots_prompt_mentions_personal_touches(conservative_patriot):
    prompt = build_enhancement_prompt("sample", conservative_patriot)
    assert "passionate conservative grassroots advocate" in prompt
    assert "personal touches" in prompt
    assert "Jordan Hale" in prompt


def test_enhancement_temperature_clamps_bias():
    assert enhancement_temperature(3.0) == pytest.approx(0.9)
    assert enhancement_temperature(-2.0) == pytest.approx(0.8)


async def test_enhance_out_of_range_bias_keeps_temperature_in_range(provider, liberal_grassroots):
    await VoiceEnhancer(provider).enhance(ORIGINAL, liberal_grassroots, 7.5)
    assert provider.requests()[0].temperature == pytest.approx(0.9)


# --- quick voice touches ---

def test_quick_touches_add_opening_and_closing(liberal_grassroots):
    result = add_quick_voice_touches("Rent is too high.", liberal_grassroots)
    assert result.startswith(liberal_grassroots.signature_opening + "\n\nRent is too high.")
    assert result.endswith("\n\n" + liberal_grassroots.signature_closing)


def test_quick_touches_skip_existing_opening(conservative_patriot):
    content = f"{conservative_patriot.signature_opening}\n\nTaxes are theft."
    result = add_quick_voice_touches(content, conservative_patriot)
    assert result.count(conservative_patriot.signature_opening) == 1
    assert result.startswith(content)


def test_quick_touches_skip_when_post_starts_with_signature_phrase(conservative_patriot):
    content = "Folks, let's cut through the BS: the border matters."
    result = add_quick_voice_touches(content, conservative_patriot)
    assert result.startswith(content)
    assert conservative_patriot.signature_opening not in result


def test_quick_touches_skip_existing_closing(liberal_expert):
    content = f"The data clearly shows it works.\n\n{liberal_expert.signature_closing[:20]} and more."
    result = add_quick_voice_touches(content, liberal_expert)
    assert result.endswith(" and more.")
    assert liberal_expert.signature_closing not in result


def test_quick_touches_idempotent(conservative_expert):
    once = add_quick_voice_touches("Federalism matters.", conservative_expert)
    assert add_quick_voice_touches(once, conservative_expert) == once


def test_quick_touches_no_text_configured(liberal_expert):
    bare = replace(liberal_expert, signature_opening="", signature_closing="")
    assert add_quick_voice_touches("Unchanged.", bare) == "Unchanged."


def test_every_builtin_persona_has_opening_and_closing():
    for persona in catalog.all_personas():
        assert persona.signature_opening
        assert persona.signature_closing
