"""Abstract base for generation providers and the provider error taxonomy."""

from abc import ABC, abstractmethod

from persona_debate.models import GenerationRequest, GenerationResult, TokenUsage


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.status_code = status_code
        super().__init__(f"[{provider_name}] {message}")


class RateLimitError(ProviderError):
    """Upstream answered 429; the only failure the retry loop retries."""

    def __init__(self, provider_name: str, message: str) -> None:
        super().__init__(provider_name, message, status_code=429)


class ProviderTimeoutError(ProviderError):
    """A single request exceeded its timeout."""


class ConfigurationError(ProviderError):
    """Provider cannot be constructed, e.g. the API key is missing."""


class AIProvider(ABC):
    """Abstract base for all generation providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'grok')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the default ("fast") model identifier."""
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate content for the given request.

        Args:
            request: Prompt, system prompt, sampling and search options.

        Returns:
            GenerationResult with content, token usage and any search sources.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...

    @abstractmethod
    def select_model(self, topic: str, context: str | None = None) -> str:
        """Pick the model for a topic; must be a pure function of its inputs."""
        ...

    @abstractmethod
    def estimate_cost(self, usage: TokenUsage | None, source_count: int = 0) -> float:
        """Estimated USD cost of one generation."""
        ...
