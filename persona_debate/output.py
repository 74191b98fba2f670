"""Rich console output for debate results and the persona catalog."""

import logging

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from persona_debate.models import DebateParticipant, DebateResult, PersonaCombination

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_LEANING_STYLES = {"liberal": "blue", "conservative": "red"}


def _content_preview(content: str, words: int = 50) -> str:
    """Return first N words of a post."""
    all_words = content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _participant_subtitle(participant: DebateParticipant) -> str:
    response = participant.content
    parts = [
        response.model_used,
        f"{response.token_usage.total_tokens} tokens",
        f"bias {response.bias_level:.2f}",
    ]
    if response.voice_enhanced:
        parts.append("voice enhanced")
    if response.sources_used:
        parts.append(f"{len(response.sources_used)} sources")
    return " | ".join(parts)


def print_personas(personas: list[dict], combinations: list[PersonaCombination]) -> None:
    """Print the persona table and the valid matchups."""
    table = Table(title="Debate Personas")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Leaning")
    table.add_column("Level")
    table.add_column("Influences", style="dim")
    for info in personas:
        style = _LEANING_STYLES.get(info["politicalLeaning"], "")
        table.add_row(
            info["id"],
            info["displayName"],
            Text(info["politicalLeaning"], style=style),
            info["expertiseLevel"],
            ", ".join(info["keyInfluences"]),
        )
    console.print(table)

    console.print(Rule("[bold cyan]Valid Matchups[/bold cyan]"))
    for combo in combinations:
        console.print(f"  {combo.persona1.persona_id} vs {combo.persona2.persona_id} [dim]({combo.matchup})[/dim]")


def print_debate(result: DebateResult, full: bool = True) -> None:
    """Print both posts; ``full=False`` shows only a preview of each."""
    console.print(Rule(f"[bold cyan]Debate:[/bold cyan] {escape(result.topic)}"))
    meta = result.generation_metadata
    console.print(
        Text(
            f"Duration: {meta.generation_time_seconds:.1f}s | "
            f"Search: {'on' if meta.search_enabled else 'off'} | "
            f"Estimated cost: ${result.cost_analysis.total_estimated_cost:.4f} | "
            f"ID: {result.debate_id}",
            style="dim",
        )
    )

    for participant in (result.persona1, result.persona2):
        response = participant.content
        style = _LEANING_STYLES.get(response.perspective.value, "dim")
        body = Markdown(response.content) if full else _content_preview(response.content)
        console.print(
            Panel(
                body,
                title=f"[bold]{escape(participant.info.display_name)}[/bold] ({response.perspective.value})",
                subtitle=_participant_subtitle(participant),
                border_style=style,
            )
        )
        if full and response.sources_used:
            for url in response.sources_used:
                console.print(f"  [dim]- {escape(url)}[/dim]")

    logger.debug("Rendered debate %s", result.debate_id)
