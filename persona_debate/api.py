"""JSON-in/JSON-out operations behind the HTTP layer.

Each handler returns ``(status_code, body)`` so any web framework can wrap it.
Failures come back as ``{"error", "stage", "details"}``.
"""

import logging
from typing import Any

from config.config_loader import AppConfig
from persona_debate.debate import DebateGenerator, PersonaValidationError, create_debate_generator
from persona_debate.models import BiasLevels, DebateConfig
from persona_debate.personas import catalog
from persona_debate.providers.base import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


class RequestValidationError(ValueError):
    """Malformed request payload."""


def _error(status: int, error: str, stage: str, details: str) -> tuple[int, dict]:
    return status, {"error": error, "stage": stage, "details": details}


def _optional_str(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RequestValidationError(f"'{key}' must be a string")
    return value or None


def _bias_value(raw: dict, key: str) -> float:
    value = raw.get(key, 0.5)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RequestValidationError(f"biasLevels.{key} must be a number")
    return float(value)


def parse_debate_config(payload: Any) -> DebateConfig:
    """Build a DebateConfig from the request JSON.

    Raises:
        RequestValidationError: Missing fields or wrong types.
    """
    if not isinstance(payload, dict):
        raise RequestValidationError("Request body must be a JSON object")

    required: dict[str, str] = {}
    for key in ("topic", "persona1Id", "persona2Id"):
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            raise RequestValidationError(f"'{key}' must be a string")
        required[key] = (value or "").strip()

    missing = [k for k, v in required.items() if not v]
    if missing:
        raise RequestValidationError(f"Missing required fields: {', '.join(missing)}")

    use_search = payload.get("useSearch", payload.get("useTwitterSearch", True))
    if not isinstance(use_search, bool):
        raise RequestValidationError("'useSearch' must be a boolean")

    bias_raw = payload.get("biasLevels") or {}
    if not isinstance(bias_raw, dict):
        raise RequestValidationError("'biasLevels' must be an object")

    return DebateConfig(
        topic=required["topic"],
        persona1_id=required["persona1Id"].lower(),
        persona2_id=required["persona2Id"].lower(),
        context=_optional_str(payload, "context"),
        use_search=use_search,
        bias_levels=BiasLevels(
            persona1=_bias_value(bias_raw, "persona1"),
            persona2=_bias_value(bias_raw, "persona2"),
        ),
    )


async def handle_generate_debate(
    payload: Any,
    generator: DebateGenerator | None = None,
    app_config: AppConfig | None = None,
) -> tuple[int, dict]:
    """Generate a debate from a DebateConfig-shaped JSON object."""
    try:
        config = parse_debate_config(payload)
    except RequestValidationError as exc:
        return _error(400, "Invalid request", "validation", str(exc))

    validate = generator.validate_persona_selection if generator else catalog.validate_pair
    if not validate(config.persona1_id, config.persona2_id):
        return _error(
            400,
            "Invalid persona combination. Personas must be from opposing political sides.",
            "validation",
            f"{config.persona1_id} vs {config.persona2_id}",
        )

    try:
        generator = generator or create_debate_generator(app_config)
    except ConfigurationError as exc:
        logger.error("Debate generator not configured: %s", exc)
        return _error(400, "XAI API key not configured", "configuration", str(exc))

    try:
        result = await generator.generate_debate(config)
    except PersonaValidationError as exc:
        return _error(400, "Invalid persona combination", "validation", str(exc))
    except ProviderError as exc:
        logger.error("Debate generation failed: %s", exc)
        return _error(502, "Failed to generate debate", "generation", str(exc))
    except Exception as exc:
        logger.exception("Unexpected debate generation error")
        return _error(500, "Failed to generate debate", "generation", str(exc))

    return 200, result.to_dict()


def handle_list_personas() -> tuple[int, dict]:
    """Persona display info plus every valid matchup as ``[id1, id2]``."""
    return 200, {
        "personas": catalog.get_display_info(),
        "validCombinations": [
            [combo.persona1.persona_id, combo.persona2.persona_id]
            for combo in catalog.get_valid_combinations()
        ],
    }
