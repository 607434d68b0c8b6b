"""
Command-line interface for studying a checkpoint.
"""

import logging
from typing import Dict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sukhan.models import (
    DictionaryEntry,
    PronunciationDisplay,
    QuizCheckpoint,
    Rating,
    StudySession,
)
from sukhan.session_manager import CheckpointSessionManager

logger = logging.getLogger(__name__)
console = Console()

RATING_MAP = {
    1: Rating.Again,
    2: Rating.Hard,
    3: Rating.Good,
    4: Rating.Easy,
}


def _get_user_rating() -> Rating:
    """
    Prompt until the user enters a rating between 1 and 4.

    Returns:
        Rating: The rating matching the entered number.
    """
    while True:
        rating_str = console.input(
            "[bold]Rating (1:Again, 2:Hard, 3:Good, 4:Easy): [/bold]"
        )
        try:
            return RATING_MAP[int(rating_str)]
        except (ValueError, KeyError):
            console.print(
                "[bold red]Invalid rating. Please enter a number between 1 and 4.[/bold red]"
            )


def _format_front(entry: DictionaryEntry, display: PronunciationDisplay) -> str:
    lines = [f"[bold]{entry.tajik}[/bold]"]
    if display in (PronunciationDisplay.Both, PronunciationDisplay.Latin) and entry.pronunciation_latin:
        lines.append(entry.pronunciation_latin)
    if display in (PronunciationDisplay.Both, PronunciationDisplay.Cyrillic) and entry.pronunciation_cyrillic:
        lines.append(f"[dim]{entry.pronunciation_cyrillic}[/dim]")
    return "\n".join(lines)


def _format_back(entry: DictionaryEntry) -> str:
    lines = [f"[bold]English:[/bold] {entry.english}"]
    if entry.russian:
        lines.append(f"[bold]Russian:[/bold] {entry.russian}")
    return "\n".join(lines)


def run_card_session(
    manager: CheckpointSessionManager,
    session: StudySession,
    display: PronunciationDisplay = PronunciationDisplay.Both,
) -> None:
    """
    Show each word of a lesson or review, collect a rating for it, then mark
    the checkpoint complete.
    """
    total = len(session.items)
    if total == 0:
        console.print("[bold yellow]No words to study in this checkpoint.[/bold yellow]")

    for position, item in enumerate(session.items, start=1):
        console.rule(f"[bold]Word {position} of {total}[/bold]")
        console.print(Panel(_format_front(item.entry, display), title="Tajik", border_style="green"))
        console.input("[italic]Press Enter to see the translation...[/italic]")
        console.print(Panel(_format_back(item.entry), title="Translation", border_style="blue"))

        rating = _get_user_rating()
        state = manager.rate(item.ref, rating)
        console.print(
            f"[green]Rated.[/green] Next review in [bold]{state.interval} days[/bold] on {state.next_review}."
        )
        console.print("")

    manager.complete_session(session)
    console.print(f"[bold cyan]Checkpoint '{session.checkpoint.id}' complete. Well done![/bold cyan]")


def _get_translation_choice(word: str, count: int) -> int:
    while True:
        choice_str = console.input(f"[bold]Translation for '{word}' (1-{count}): [/bold]")
        try:
            choice = int(choice_str)
        except ValueError:
            console.print("[bold red]Invalid input. Please enter a number.[/bold red]")
            continue
        if 1 <= choice <= count:
            return choice - 1
        console.print(f"[bold red]Please enter a number between 1 and {count}.[/bold red]")


def run_quiz_session(manager: CheckpointSessionManager, session: StudySession) -> None:
    """Ask the user to match each quiz word to a translation, then grade it."""
    if not isinstance(session.checkpoint, QuizCheckpoint):
        raise ValueError("run_quiz_session requires a quiz session.")

    table = Table(title="Translations")
    table.add_column("#", style="cyan")
    table.add_column("English", style="magenta")
    for number, translation in enumerate(session.translations, start=1):
        table.add_row(str(number), translation)
    console.print(table)

    answers: Dict[int, int] = {}
    for position, item in enumerate(session.items):
        answers[position] = _get_translation_choice(item.entry.tajik, len(session.translations))

    result = manager.submit_quiz(session, answers)
    console.print(
        f"[bold cyan]Quiz finished: {result.correct} of {result.total} correct.[/bold cyan]"
    )
