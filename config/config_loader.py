"""Load settings.yaml into typed dataclasses. Applies XAI_* environment overrides."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

DEFAULT_BASE_URL = "https://api.x.ai/v1"


@dataclass
class ModelConfig:
    name: str
    model: str                 # default "fast" model
    reasoning_model: str
    api_key_env: str
    timeout_sec: float
    max_retries: int
    max_tokens: int
    base_url: str = DEFAULT_BASE_URL


@dataclass
class SearchConfig:
    domains: list[str] = field(default_factory=lambda: ["x.com", "twitter.com"])
    post_favorite_count: int = 10
    post_view_count: int = 100
    time_range: str = "week"
    max_sources: int = 20

    def to_parameters(self) -> dict:
        """Return the search_parameters block sent upstream."""
        return {
            "domains": list(self.domains),
            "post_favorite_count": self.post_favorite_count,
            "post_view_count": self.post_view_count,
            "time_range": self.time_range,
            "max_sources": self.max_sources,
        }


@dataclass
class DefaultsConfig:
    use_search: bool = True
    bias_level: float = 0.5


@dataclass
class AppConfig:
    model: ModelConfig
    search: SearchConfig
    defaults: DefaultsConfig
    available: bool = False    # True when the API key env var is set


def _env_override(name: str, current, cast):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return current
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
    logger.debug("Config override from %s: %r", name, value)
    return value


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs a warning for a missing API key but does not raise; the provider
    refuses to start without one.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    model_raw = raw["xai"]
    model_cfg = ModelConfig(
        name=str(model_raw.get("name", "grok")),
        model=str(model_raw["model"]),
        reasoning_model=str(model_raw["reasoning_model"]),
        api_key_env=str(model_raw["api_key_env"]),
        timeout_sec=float(model_raw["timeout_sec"]),
        max_retries=int(model_raw["max_retries"]),
        max_tokens=int(model_raw["max_tokens"]),
        base_url=str(model_raw.get("base_url") or DEFAULT_BASE_URL),
    )
    model_cfg.base_url = _env_override("XAI_BASE_URL", model_cfg.base_url, str)
    model_cfg.timeout_sec = _env_override("XAI_TIMEOUT_SEC", model_cfg.timeout_sec, float)
    model_cfg.max_retries = _env_override("XAI_MAX_RETRIES", model_cfg.max_retries, int)

    search_raw = raw.get("search", {})
    search = SearchConfig(
        domains=list(search_raw.get("domains", ["x.com", "twitter.com"])),
        post_favorite_count=int(search_raw.get("post_favorite_count", 10)),
        post_view_count=int(search_raw.get("post_view_count", 100)),
        time_range=str(search_raw.get("time_range", "week")),
        max_sources=int(search_raw.get("max_sources", 20)),
    )

    defaults_raw = raw.get("defaults", {})
    defaults = DefaultsConfig(
        use_search=bool(defaults_raw.get("use_search", True)),
        bias_level=float(defaults_raw.get("bias_level", 0.5)),
    )

    available = bool(os.environ.get(model_cfg.api_key_env, "").strip())
    if available:
        logger.info("Provider available: %s", model_cfg.name)
    else:
        logger.warning(
            "No API key for %s; set %s in .env",
            model_cfg.name,
            model_cfg.api_key_env,
        )

    return AppConfig(
        model=model_cfg,
        search=search,
        defaults=defaults,
        available=available,
    )
