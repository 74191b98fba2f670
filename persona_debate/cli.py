"""Click CLI: generate a persona debate or list the persona catalog."""

import asyncio
import json
import logging
import sys
from typing import NoReturn

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from config.config_loader import load_config
from persona_debate.api import handle_list_personas
from persona_debate.debate import PersonaValidationError, create_debate_generator
from persona_debate.models import BiasLevels, DebateConfig
from persona_debate.output import print_debate, print_personas
from persona_debate.personas import catalog
from persona_debate.providers.base import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    sys.exit(1)


@click.group()
def main() -> None:
    """Persona Debate -- two opposing personas write on the same topic."""
    # Model output may contain characters the Windows console codepage can't render.
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")
    load_dotenv()


@main.command()
@click.argument("topic")
@click.option("--persona1", "persona1_id", required=True, help="First persona id, e.g. liberal_expert")
@click.option("--persona2", "persona2_id", required=True, help="Second persona id, from the opposing side")
@click.option("--context", default=None, help="Extra context appended to both prompts")
@click.option("--search/--no-search", "use_search", default=None,
              help="Ground posts in live X search (default: from config)")
@click.option("--bias1", default=None, type=click.FloatRange(0.0, 1.0), help="Bias level for persona 1 (0-1)")
@click.option("--bias2", default=None, type=click.FloatRange(0.0, 1.0), help="Bias level for persona 2 (0-1)")
@click.option("--json", "as_json", is_flag=True, help="Print the raw result JSON")
@click.option("--preview", is_flag=True, help="Show only the first words of each post")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def generate(
    topic: str,
    persona1_id: str,
    persona2_id: str,
    context: str | None,
    use_search: bool | None,
    bias1: float | None,
    bias2: float | None,
    as_json: bool,
    preview: bool,
    verbose: bool,
) -> None:
    """Generate a debate on TOPIC.

    \b
    Examples:
      persona-debate generate "Climate change policy" --persona1 liberal_expert --persona2 conservative_expert
      persona-debate generate "Minimum wage" --persona1 liberal_grassroots --persona2 conservative_patriot --no-search
    """
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        _fail(f"Config error: {exc}")

    if not catalog.validate_pair(persona1_id, persona2_id):
        _fail(
            f"Invalid persona combination {persona1_id} vs {persona2_id}. "
            "Personas must exist and be from opposing political sides."
        )

    default_bias = config.defaults.bias_level
    debate_config = DebateConfig(
        topic=topic,
        persona1_id=persona1_id,
        persona2_id=persona2_id,
        context=context,
        use_search=config.defaults.use_search if use_search is None else use_search,
        bias_levels=BiasLevels(
            persona1=default_bias if bias1 is None else bias1,
            persona2=default_bias if bias2 is None else bias2,
        ),
    )

    try:
        generator = create_debate_generator(config)
    except ConfigurationError as exc:
        _fail(f"{exc}. Set {config.model.api_key_env} in .env.")

    try:
        with console.status("Generating both sides of the debate..."):
            result = asyncio.run(generator.generate_debate(debate_config))
    except PersonaValidationError as exc:
        _fail(str(exc))
    except ProviderError as exc:
        _fail(f"Debate generation failed: {exc}")

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_debate(result, full=not preview)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print personas and matchups as JSON")
def personas(as_json: bool) -> None:
    """List available personas and valid matchups."""
    if as_json:
        _, body = handle_list_personas()
        click.echo(json.dumps(body, indent=2, ensure_ascii=False))
        return
    print_personas(catalog.get_display_info(), catalog.get_valid_combinations())


if __name__ == "__main__":
    main()
