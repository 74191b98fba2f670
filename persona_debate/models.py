"""Dataclasses for the persona debate pipeline. No I/O, no deps.

``to_dict`` methods produce the camelCase JSON shapes returned to callers.
"""

from dataclasses import dataclass, field
from enum import Enum


class PoliticalLeaning(str, Enum):
    LIBERAL = "liberal"
    CONSERVATIVE = "conservative"


class ExpertiseLevel(str, Enum):
    GRASSROOTS = "grassroots"
    EXPERT = "expert"


DEFAULT_BIAS_LEVEL = 0.5


def clamp_bias(value: float) -> float:
    """Clamp a bias level into [0.0, 1.0]."""
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class PersonaProfile:
    persona_id: str
    display_name: str
    description: str
    leaning: PoliticalLeaning
    expertise_level: ExpertiseLevel
    character_name: str
    background: str
    writing_style: str
    key_influences: tuple[str, ...]
    signature_phrases: tuple[str, ...]
    preferred_sources: tuple[str, ...]
    social_media_handle: str
    system_prompt: str
    signature_opening: str = ""
    signature_closing: str = ""

    @property
    def is_expert(self) -> bool:
        return self.expertise_level is ExpertiseLevel.EXPERT

    def identity(self) -> dict:
        """Trimmed identity embedded in each PersonaResponse."""
        return {
            "id": self.persona_id,
            "characterName": self.character_name,
            "displayName": self.display_name,
            "expertiseLevel": self.expertise_level.value,
            "socialMediaHandle": self.social_media_handle,
        }

    def display_info(self, max_influences: int = 3) -> dict:
        """Client-safe projection: no system prompt, influences truncated."""
        return {
            "id": self.persona_id,
            "displayName": self.display_name,
            "description": self.description,
            "politicalLeaning": self.leaning.value,
            "expertiseLevel": self.expertise_level.value,
            "characterName": self.character_name,
            "socialMediaHandle": self.social_media_handle,
            "keyInfluences": list(self.key_influences[:max_influences]),
        }


@dataclass(frozen=True)
class PersonaCombination:
    id: str
    display_name: str
    persona1: PersonaProfile
    persona2: PersonaProfile
    matchup: str               # e.g. "liberal vs conservative"


@dataclass
class BiasLevels:
    persona1: float = DEFAULT_BIAS_LEVEL
    persona2: float = DEFAULT_BIAS_LEVEL

    def __post_init__(self) -> None:
        self.persona1 = clamp_bias(self.persona1)
        self.persona2 = clamp_bias(self.persona2)

    def to_dict(self) -> dict:
        return {"persona1": self.persona1, "persona2": self.persona2}


@dataclass
class DebateConfig:
    topic: str
    persona1_id: str
    persona2_id: str
    context: str | None = None
    use_search: bool = True
    bias_levels: BiasLevels = field(default_factory=BiasLevels)


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass
class SearchSource:
    url: str
    title: str = ""
    snippet: str = ""


@dataclass
class GenerationRequest:
    prompt: str
    system_prompt: str = ""
    model: str | None = None   # None -> provider's fast model
    temperature: float = 0.7
    max_tokens: int = 2000
    top_p: float = 1.0
    stop: list[str] = field(default_factory=list)
    use_search: bool = False


@dataclass
class GenerationResult:
    content: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    sources: list[SearchSource] = field(default_factory=list)
    search_cost: float | None = None


@dataclass
class EnhancementResult:
    content: str
    enhanced: bool
    reason: str | None = None  # None, "upstream_error" or "unusable_output"


@dataclass
class PersonaResponse:
    perspective: PoliticalLeaning
    persona: dict              # PersonaProfile.identity()
    topic: str
    context: str | None
    content: str
    title: str
    model_used: str
    token_usage: TokenUsage
    sources_used: list[str] | None
    timestamp: str             # ISO-8601
    bias_level: float
    voice_enhanced: bool

    def to_dict(self) -> dict:
        return {
            "perspective": self.perspective.value,
            "persona": dict(self.persona),
            "topic": self.topic,
            "context": self.context,
            "content": self.content,
            "title": self.title,
            "modelUsed": self.model_used,
            "tokenUsage": self.token_usage.to_dict(),
            "sourcesUsed": list(self.sources_used) if self.sources_used is not None else None,
            "timestamp": self.timestamp,
            "biasLevel": self.bias_level,
            "voiceEnhanced": self.voice_enhanced,
        }


@dataclass
class DebateParticipant:
    id: str
    info: PersonaProfile
    content: PersonaResponse

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "info": self.info.display_info(),
            "content": self.content.to_dict(),
        }


@dataclass
class GenerationMetadata:
    generation_time_seconds: float
    search_enabled: bool
    bias_levels: BiasLevels
    models_used: dict[str, str]

    def to_dict(self) -> dict:
        return {
            "generationTimeSeconds": self.generation_time_seconds,
            "searchEnabled": self.search_enabled,
            "biasLevels": self.bias_levels.to_dict(),
            "modelsUsed": dict(self.models_used),
        }


@dataclass
class PersonaCost:
    estimated_cost: float
    token_usage: TokenUsage
    source_count: int = 0

    def to_dict(self) -> dict:
        return {
            "estimatedCost": self.estimated_cost,
            "tokenUsage": self.token_usage.to_dict(),
            "sourceCount": self.source_count,
        }


@dataclass
class CostAnalysis:
    total_estimated_cost: float
    cost_breakdown: dict[str, PersonaCost]

    def to_dict(self) -> dict:
        return {
            "totalEstimatedCost": self.total_estimated_cost,
            "costBreakdown": {k: v.to_dict() for k, v in self.cost_breakdown.items()},
        }


@dataclass
class DebateResult:
    debate_id: str
    topic: str
    context: str | None
    persona1: DebateParticipant
    persona2: DebateParticipant
    generation_metadata: GenerationMetadata
    cost_analysis: CostAnalysis
    timestamp: str

    @property
    def responses(self) -> tuple[PersonaResponse, PersonaResponse]:
        return self.persona1.content, self.persona2.content

    def to_dict(self) -> dict:
        return {
            "debateId": self.debate_id,
            "topic": self.topic,
            "context": self.context,
            "personas": {
                "persona1": self.persona1.to_dict(),
                "persona2": self.persona2.to_dict(),
            },
            "generationMetadata": self.generation_metadata.to_dict(),
            "costAnalysis": self.cost_analysis.to_dict(),
            "timestamp": self.timestamp,
        }
