"""Voice enhancement: rewrite the opening of generated content in the persona's voice."""

import logging

from persona_debate.models import EnhancementResult, GenerationRequest, PersonaProfile, clamp_bias
from persona_debate.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

SAMPLE_LENGTH = 600
ENHANCE_MAX_TOKENS = 800
# Rewrites at or below this many characters (after strip) are discarded
MIN_ENHANCED_LENGTH = 50

REASON_UPSTREAM_ERROR = "upstream_error"
REASON_UNUSABLE_OUTPUT = "unusable_output"

# Prefix lengths used to detect an opening or closing already in the post
_OPENING_MATCH_CHARS = 10
_CLOSING_MATCH_CHARS = 20


def enhancement_temperature(bias_level: float) -> float:
    return 0.8 + clamp_bias(bias_level) * 0.1


def _signature_phrases(persona: PersonaProfile) -> str:
    return '" or "'.join(persona.signature_phrases[:2])


def build_enhancement_prompt(sample: str, persona: PersonaProfile) -> str:
    phrases = _signature_phrases(persona)
    leaning = persona.leaning.value
    if persona.is_expert:
        return f"""Rewrite this excerpt to sound more authentically like {persona.character_name}, an elite {leaning} expert. Add:

- 1-2 references to your credentials or media appearances ("As I testified before Congress..." or "In my recent MSNBC appearance...")
- Sophisticated language with academic authority
- A reference to research, legal precedent, or policy expertise
- Signature phrases like "{phrases}"
- Maintain the intellectual gravitas expected from a top-tier expert

Keep the same length and main points. Don't lose the facts or policy substance.

Original excerpt:
{sample}

Enhanced version with {persona.character_name}'s expert voice:"""

    return f"""Rewrite this excerpt to sound more authentically like {persona.character_name}, a passionate {leaning} grassroots advocate. Add:

- 1-2 personal touches ("Growing up in..." or "My friend always says...")
- More emotional urgency and passion
- A cultural reference or real-world example if it fits naturally
- Signature phrases like "{phrases}"
- Direct, accessible language that connects with regular people

Keep the same length and main points. Don't lose the facts or policy substance.

Original excerpt:
{sample}

Enhanced version with {persona.character_name}'s authentic voice:"""


def add_quick_voice_touches(content: str, persona: PersonaProfile) -> str:
    """Frame *content* with the persona's signature opening and closing, without an API call.

    The opening is skipped when the post already starts with it or with the
    persona's first signature phrase; the closing is skipped when it already
    appears anywhere in the post.
    """
    opening = persona.signature_opening
    if opening:
        starts = [opening[:_OPENING_MATCH_CHARS]]
        if persona.signature_phrases:
            starts.append(persona.signature_phrases[0][:_OPENING_MATCH_CHARS])
        if not content.startswith(tuple(starts)):
            content = f"{opening}\n\n{content}"

    closing = persona.signature_closing
    if closing and closing[:_CLOSING_MATCH_CHARS] not in content:
        content = f"{content}\n\n{closing}"

    return content


def build_enhancement_system_prompt(persona: PersonaProfile) -> str:
    return (
        f"You are a voice coach helping make {persona.character_name}'s writing more authentic "
        "and engaging while keeping it factual and substantive.\n\n"
        f"{persona.character_name} is {persona.background}. "
        f"Their writing style is: {persona.writing_style}.\n\n"
        "Enhance the voice to match their personality while maintaining all factual content "
        "and policy substance."
    )


class VoiceEnhancer:
    """Rewrites the first SAMPLE_LENGTH characters of a post in the persona's voice.

    Never raises: any failure yields the original content with
    ``enhanced=False`` and a reason code.
    """

    def __init__(self, provider: AIProvider, model: str | None = None) -> None:
        self._provider = provider
        self._model = model

    async def enhance(
        self,
        content: str,
        persona: PersonaProfile,
        bias_level: float,
    ) -> EnhancementResult:
        sample = content[:SAMPLE_LENGTH]
        request = GenerationRequest(
            prompt=build_enhancement_prompt(sample, persona),
            system_prompt=build_enhancement_system_prompt(persona),
            model=self._model or self._provider.model_string(),
            temperature=enhancement_temperature(bias_level),
            max_tokens=ENHANCE_MAX_TOKENS,
            use_search=False,
        )

        try:
            response = await self._provider.generate(request)
        except ProviderError as exc:
            logger.warning("Voice enhancement failed for %s: %s", persona.character_name, exc)
            return EnhancementResult(content=content, enhanced=False, reason=REASON_UPSTREAM_ERROR)
        except Exception as exc:
            logger.warning("Voice enhancement unexpected failure for %s: %s", persona.character_name, exc)
            return EnhancementResult(content=content, enhanced=False, reason=REASON_UPSTREAM_ERROR)

        excerpt = response.content or ""
        if len(excerpt.strip()) <= MIN_ENHANCED_LENGTH:
            logger.warning(
                "Voice enhancement for %s returned unusable output (%d chars), keeping original",
                persona.character_name,
                len(excerpt.strip()),
            )
            return EnhancementResult(content=content, enhanced=False, reason=REASON_UNUSABLE_OUTPUT)

        logger.debug("Voice enhanced %s: %d -> %d chars", persona.persona_id, len(sample), len(excerpt))
        return EnhancementResult(content=excerpt + content[SAMPLE_LENGTH:], enhanced=True)
