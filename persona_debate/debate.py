"""Debate orchestration: validate the pairing, run both personas in parallel, assemble the result."""

import asyncio
import logging
import math
import re
import time
from collections.abc import Coroutine
from datetime import datetime, timezone
from typing import Any

from config.config_loader import AppConfig, load_config
from persona_debate.models import (
    CostAnalysis,
    DebateConfig,
    DebateParticipant,
    DebateResult,
    GenerationMetadata,
    GenerationRequest,
    PersonaCombination,
    PersonaCost,
    PersonaProfile,
    PersonaResponse,
    clamp_bias,
)
from persona_debate.personas import PersonaCatalog, catalog as default_catalog
from persona_debate.providers.base import AIProvider
from persona_debate.providers.xai import XAIProvider
from persona_debate.voice import VoiceEnhancer

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"
PERSONA_MAX_TOKENS = 2000
# Enhancement runs only when content is longer than this AND bias exceeds ENHANCE_MIN_BIAS
ENHANCE_MIN_CONTENT_LENGTH = 500
ENHANCE_MIN_BIAS = 0.3

_HEADING_MARKER = re.compile(r"^#+\s*")


class PersonaValidationError(ValueError):
    """Unknown persona id or a same-leaning pairing. Raised before any API call."""


def persona_temperature(persona: PersonaProfile, bias_level: float) -> float:
    """0.65-0.90 for experts, 0.70-0.95 for grassroots personas."""
    base = 0.65 if persona.is_expert else 0.7
    return base + clamp_bias(bias_level) * 0.25


def extract_title(content: str) -> str:
    """First non-blank line with leading markdown heading markers removed."""
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped:
            return _HEADING_MARKER.sub("", stripped) or UNTITLED
    return UNTITLED


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _expert_template(persona: PersonaProfile, topic: str) -> str:
    return f"""Write a comprehensive blog post about: {topic}

REQUIREMENTS FOR EXPERT COMMENTARY:
1. Lead with authoritative expertise and credentialed perspective
2. Write 900-1400 words with sophisticated but accessible analysis
3. Include specific policy recommendations with precedent/evidence
4. Reference 3-4 high-credibility sources (academic, institutional, legal)
5. Address counterarguments with intellectual rigor
6. Demonstrate deep knowledge of subject matter and historical context
7. End with specific legislative or policy recommendations
8. Use media-ready sound bites and quotable passages
9. Reference your own expertise, publications, or media appearances naturally

STRUCTURE FOR {persona.character_name.upper()}:
- Authoritative Hook (establish credentials and stakes)
- Expert Analysis (demonstrate deep knowledge with data/precedent)
- Policy Framework (systematic breakdown of the issue)
- Evidence & International Comparison (what works elsewhere)
- Counter-argument Demolition (intellectual takedown of opposition)
- Specific Recommendations (actionable policy solutions)
- Call to Leadership (appeal to policymakers and informed citizens)"""


def _grassroots_template(persona: PersonaProfile, topic: str) -> str:
    return f"""Write a comprehensive blog post about: {topic}

REQUIREMENTS FOR GRASSROOTS ADVOCACY:
1. Start with compelling personal or community story
2. Write 800-1200 words with authentic voice and passion
3. Include specific policy proposals with real-world examples
4. Reference 2-3 credible sources that resonate with your base
5. Lead with human stories and moral imperative
6. Address counterarguments with facts while maintaining fire
7. End with organizing calls and hope through collective action
8. Use rhetorical questions and direct address ('you', 'we', 'us')
9. Include cultural references or current events when relevant

STRUCTURE FOR {persona.character_name.upper()}:
- Personal Hook (story, shocking stat, or moral question)
- The Human Stakes (who gets hurt, what we lose if we don't act)
- Evidence & Analysis (data + systemic framing)
- What Works (examples of victories and proven solutions)
- Addressing Opposition (respectful but firm fact-checking)
- The Path Forward (specific actions + organizing)
- Rally Cry (inspire collective action and hope)"""


def _search_block(persona: PersonaProfile) -> str:
    influences = ", ".join(persona.key_influences[:3])
    sources = ", ".join(persona.preferred_sources[:3])
    return f"""

X/TWITTER LIVE DATA INTEGRATION FOR {persona.character_name.upper()}:
- PRIORITIZE recent X/Twitter posts and real-time discussions (use search to find current voices)
- Reference trending hashtags, viral posts, and breaking commentary from: {influences}
- Cite verified accounts and authoritative sources: {sources}
- Include specific examples of grassroots organizing or expert commentary from X
- Reference community notes, fact-checking threads, and counter-narratives
- Show the pulse of current social media discourse on this topic
- Weave in actual quotes or paraphrases from recent posts (with context)
- Use X data to demonstrate momentum, opposition, or emerging viewpoints
- Reference specific accounts, threads, or viral moments when relevant
- Make it clear when information comes from live social media discourse

SEARCH STRATEGY:
- Focus on posts with high engagement (10+ favorites, 100+ views)
- Look for recent posts (within the last week) for currency
- Find both grassroots voices and verified expert accounts
- Capture the authentic tone and language of current X discourse"""


def build_persona_prompt(
    persona: PersonaProfile,
    topic: str,
    context: str | None = None,
    use_search: bool = True,
) -> str:
    """Blog-post prompt for *persona*, templated by expertise level."""
    prompt = _expert_template(persona, topic) if persona.is_expert else _grassroots_template(persona, topic)
    if context:
        prompt += f"\n\nADDITIONAL CONTEXT: {context}"
    if use_search:
        prompt += _search_block(persona)
    return prompt


async def _run_both(
    first: Coroutine[Any, Any, PersonaResponse],
    second: Coroutine[Any, Any, PersonaResponse],
) -> tuple[PersonaResponse, PersonaResponse]:
    """Run both pipelines concurrently; the first failure cancels the sibling and is re-raised."""
    tasks = [asyncio.create_task(first), asyncio.create_task(second)]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    # Retrieve every exception, not just the one raised.
    errors = [task.exception() for task in tasks if task in done]
    for error in errors:
        if error is not None:
            raise error

    return tasks[0].result(), tasks[1].result()


class DebateGenerator:
    """Turns a DebateConfig into a DebateResult with one post per persona."""

    def __init__(
        self,
        provider: AIProvider,
        catalog: PersonaCatalog | None = None,
        enhancer: VoiceEnhancer | None = None,
    ) -> None:
        self._provider = provider
        self._catalog = catalog or default_catalog
        self._enhancer = enhancer or VoiceEnhancer(provider)

    def get_available_personas(self) -> list[dict]:
        return self._catalog.get_display_info()

    def get_valid_combinations(self) -> list[PersonaCombination]:
        return self._catalog.get_valid_combinations()

    def validate_persona_selection(self, persona1_id: object, persona2_id: object) -> bool:
        """Case-insensitive pairing check that never raises."""
        if not isinstance(persona1_id, str) or not isinstance(persona2_id, str):
            return False
        return self._catalog.validate_pair(persona1_id, persona2_id)

    def _resolve_pair(self, config: DebateConfig) -> tuple[PersonaProfile, PersonaProfile]:
        persona1 = self._catalog.get_persona(config.persona1_id)
        persona2 = self._catalog.get_persona(config.persona2_id)
        unknown = [
            pid for pid, p in ((config.persona1_id, persona1), (config.persona2_id, persona2)) if p is None
        ]
        if unknown:
            raise PersonaValidationError(f"Invalid persona IDs provided: {', '.join(unknown)}")
        if not self._catalog.validate_pair(config.persona1_id, config.persona2_id):
            raise PersonaValidationError(
                "Invalid persona selection: personas must be from opposing political sides"
            )
        return persona1, persona2

    async def generate_debate(self, config: DebateConfig) -> DebateResult:
        """Generate both sides of the debate.

        Raises:
            PersonaValidationError: Unknown ids or same-leaning pair; no API call is made.
            ProviderError: Either persona's primary generation failed.
        """
        start = time.monotonic()
        persona1, persona2 = self._resolve_pair(config)
        bias = config.bias_levels

        logger.info(
            "Starting debate generation: topic=%r, %s vs %s, search=%s",
            config.topic,
            persona1.display_name,
            persona2.display_name,
            config.use_search,
        )

        response1, response2 = await _run_both(
            self._generate_persona_response(persona1, config.topic, config.context, config.use_search, bias.persona1),
            self._generate_persona_response(persona2, config.topic, config.context, config.use_search, bias.persona2),
        )

        elapsed = time.monotonic() - start
        cost1 = self._persona_cost(response1)
        cost2 = self._persona_cost(response2)
        total_cost = cost1.estimated_cost + cost2.estimated_cost

        result = DebateResult(
            debate_id=f"{math.floor(time.time() * 1000)}_{persona1.persona_id}_{persona2.persona_id}",
            topic=config.topic,
            context=config.context,
            persona1=DebateParticipant(id=persona1.persona_id, info=persona1, content=response1),
            persona2=DebateParticipant(id=persona2.persona_id, info=persona2, content=response2),
            generation_metadata=GenerationMetadata(
                generation_time_seconds=elapsed,
                search_enabled=config.use_search,
                bias_levels=bias,
                models_used={"persona1": response1.model_used, "persona2": response2.model_used},
            ),
            cost_analysis=CostAnalysis(
                total_estimated_cost=total_cost,
                cost_breakdown={"persona1": cost1, "persona2": cost2},
            ),
            timestamp=_utc_timestamp(),
        )

        logger.info("Debate generation completed in %.2fs", elapsed)
        logger.info("Total estimated cost: $%.4f", total_cost)
        return result

    def _persona_cost(self, response: PersonaResponse) -> PersonaCost:
        source_count = len(response.sources_used or [])
        return PersonaCost(
            estimated_cost=self._provider.estimate_cost(response.token_usage, source_count),
            token_usage=response.token_usage,
            source_count=source_count,
        )

    async def _generate_persona_response(
        self,
        persona: PersonaProfile,
        topic: str,
        context: str | None,
        use_search: bool,
        bias_level: float,
    ) -> PersonaResponse:
        logger.info("%s generating blog post on: %s", persona.character_name, topic)

        model = self._provider.select_model(topic, context)
        generation = await self._provider.generate(
            GenerationRequest(
                prompt=build_persona_prompt(persona, topic, context, use_search),
                system_prompt=persona.system_prompt,
                model=model,
                temperature=persona_temperature(persona, bias_level),
                max_tokens=PERSONA_MAX_TOKENS,
                use_search=use_search,
            )
        )

        content = generation.content
        voice_enhanced = False
        if len(content) > ENHANCE_MIN_CONTENT_LENGTH and bias_level > ENHANCE_MIN_BIAS:
            enhancement = await self._enhancer.enhance(content, persona, bias_level)
            content = enhancement.content
            voice_enhanced = enhancement.enhanced
            if not enhancement.enhanced:
                logger.info("Using original content for %s (%s)", persona.persona_id, enhancement.reason)

        sources_used = [s.url for s in generation.sources] if generation.sources else None

        logger.info(
            "%s done: %d chars, model %s, voice enhanced=%s",
            persona.character_name,
            len(content),
            model,
            voice_enhanced,
        )

        return PersonaResponse(
            perspective=persona.leaning,
            persona=persona.identity(),
            topic=topic,
            context=context,
            content=content,
            title=extract_title(content),
            model_used=model,
            token_usage=generation.usage,
            sources_used=sources_used,
            timestamp=_utc_timestamp(),
            bias_level=bias_level,
            voice_enhanced=voice_enhanced,
        )


def create_debate_generator(
    app_config: AppConfig | None = None,
    api_key: str | None = None,
) -> DebateGenerator:
    """Build a DebateGenerator backed by the xAI provider.

    Raises:
        ConfigurationError: No API key available.
    """
    config = app_config or load_config()
    provider = XAIProvider(config.model, config.search, api_key=api_key)
    return DebateGenerator(provider, enhancer=VoiceEnhancer(provider, model=config.model.model))
