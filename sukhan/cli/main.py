"""
CLI entry point for sukhan.
"""

# Standard library imports
import random
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.table import Table

# Local application imports
from sukhan.checkpoints import quiz_id
from sukhan.curriculum import load_curriculum, load_dictionary
from sukhan.db.store import DuckDBStore
from sukhan.exceptions import (
    CheckpointLockedError,
    CheckpointNotFoundError,
    CurriculumError,
    StorageError,
)
from sukhan.models import (
    CheckpointStatus,
    Curriculum,
    Dictionary,
    LessonCheckpoint,
    PronunciationDisplay,
    QuizCheckpoint,
)
from sukhan.progress import CompletionLedger
from sukhan.selector import ReviewSetSelector
from sukhan.session_manager import CheckpointSessionManager
from sukhan.settings import SettingsStore
from sukhan.unlock import UnlockEvaluator
from sukhan.word_scheduler import WordScheduler
from sukhan.cli.study_ui import run_card_session, run_quiz_session


console = Console()

app = typer.Typer(
    name="sukhan",
    help="Sukhan: vocabulary units, reviews and quizzes.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Option helpers (paths come from flags or SUKHAN_* env vars, no defaults)
# ---------------------------------------------------------------------------

_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB progress store. Falls back to SUKHAN_DB env var.",
    envvar="SUKHAN_DB",
)

_curriculum_option = typer.Option(  # noqa: B008
    None,
    "--curriculum",
    help="Curriculum YAML/JSON file. Falls back to SUKHAN_CURRICULUM env var.",
    envvar="SUKHAN_CURRICULUM",
)

_dictionary_option = typer.Option(  # noqa: B008
    None,
    "--dictionary",
    help="Dictionary YAML/JSON file. Falls back to SUKHAN_DICTIONARY env var.",
    envvar="SUKHAN_DICTIONARY",
)

STATUS_STYLES = {
    CheckpointStatus.Locked: "[dim]locked[/dim]",
    CheckpointStatus.Unlocked: "[yellow]unlocked[/yellow]",
    CheckpointStatus.Completed: "[green]completed[/green]",
}


def _require_path(value: Optional[Path], flag: str, envvar: str) -> Path:
    """Return the given path or exit when neither the flag nor its env var is set."""
    if value is not None:
        return value
    console.print(
        f"[bold red]Error: {flag} is required "
        f"(or set the {envvar} environment variable).[/bold red]"
    )
    raise typer.Exit(code=1)


def _load_curriculum_or_exit(curriculum: Optional[Path]) -> Curriculum:
    path = _require_path(curriculum, "--curriculum", "SUKHAN_CURRICULUM")
    try:
        return load_curriculum(path)
    except CurriculumError as e:
        console.print(f"[bold red]Error loading curriculum: {e}[/bold red]")
        raise typer.Exit(code=1) from e


def _load_dictionary_or_exit(dictionary: Optional[Path]) -> Dictionary:
    path = _require_path(dictionary, "--dictionary", "SUKHAN_DICTIONARY")
    try:
        return load_dictionary(path)
    except CurriculumError as e:
        console.print(f"[bold red]Error loading dictionary: {e}[/bold red]")
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Progress views
# ---------------------------------------------------------------------------


@app.command()
def units(
    db: Optional[Path] = _db_option,
    curriculum: Optional[Path] = _curriculum_option,
):
    """List the units of the curriculum with lesson progress."""
    db_path = _require_path(db, "--db", "SUKHAN_DB")
    curriculum_data = _load_curriculum_or_exit(curriculum)
    try:
        with DuckDBStore(db_path) as store:
            ledger = CompletionLedger(store)
            table = Table(title="Units")
            table.add_column("Unit", style="cyan")
            table.add_column("Title")
            table.add_column("Lessons", style="magenta")
            table.add_column("Quiz")
            for unit in curriculum_data.units:
                done = ledger.get_unit_progress(unit.lessons)
                quiz_done = ledger.is_quiz_complete(quiz_id(unit.id))
                table.add_row(
                    unit.id,
                    unit.title,
                    f"{done}/{len(unit.lessons)}",
                    "[green]passed[/green]" if quiz_done else "-",
                )
            console.print(table)
    except StorageError as e:
        console.print(f"[bold]A storage error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e


@app.command()
def path(
    unit_id: str = typer.Argument(..., help="The id of the unit."),  # noqa: B008
    db: Optional[Path] = _db_option,
    curriculum: Optional[Path] = _curriculum_option,
):
    """Show a unit's checkpoints in order with their lock state."""
    db_path = _require_path(db, "--db", "SUKHAN_DB")
    curriculum_data = _load_curriculum_or_exit(curriculum)
    unit = curriculum_data.get_unit(unit_id)
    if unit is None:
        console.print(f"[bold red]Error: Unit '{unit_id}' not found.[/bold red]")
        raise typer.Exit(code=1)

    try:
        with DuckDBStore(db_path) as store:
            evaluator = UnlockEvaluator(CompletionLedger(store))
            table = Table(title=f"{unit.title} ({unit.id})")
            table.add_column("#", style="cyan")
            table.add_column("Checkpoint")
            table.add_column("Type")
            table.add_column("Status")
            for number, (checkpoint, status) in enumerate(
                evaluator.get_unit_path(unit), start=1
            ):
                if isinstance(checkpoint, LessonCheckpoint):
                    label = f"{checkpoint.id}: {checkpoint.title}"
                else:
                    label = checkpoint.id
                table.add_row(str(number), label, checkpoint.kind, STATUS_STYLES[status])
            console.print(table)
    except StorageError as e:
        console.print(f"[bold]A storage error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Study
# ---------------------------------------------------------------------------


@app.command()
def study(
    unit_id: str = typer.Argument(..., help="The id of the unit."),  # noqa: B008
    checkpoint_id: str = typer.Argument(  # noqa: B008
        ..., help="Lesson, review or quiz id (see `sukhan path`)."
    ),
    db: Optional[Path] = _db_option,
    curriculum: Optional[Path] = _curriculum_option,
    dictionary: Optional[Path] = _dictionary_option,
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for word sampling and shuffling."
    ),
):
    """Study a lesson, review or quiz checkpoint."""
    db_path = _require_path(db, "--db", "SUKHAN_DB")
    curriculum_data = _load_curriculum_or_exit(curriculum)
    dictionary_data = _load_dictionary_or_exit(dictionary)

    try:
        with DuckDBStore(db_path) as store:
            word_scheduler = WordScheduler(store)
            manager = CheckpointSessionManager(
                curriculum=curriculum_data,
                dictionary=dictionary_data,
                ledger=CompletionLedger(store),
                word_scheduler=word_scheduler,
                selector=ReviewSetSelector(word_scheduler, rng=random.Random(seed)),
            )
            session = manager.start_session(unit_id, checkpoint_id)
            if isinstance(session.checkpoint, QuizCheckpoint):
                run_quiz_session(manager, session)
            else:
                display = SettingsStore(store).get_pronunciation_display()
                run_card_session(manager, session, display=display)
    except (CheckpointNotFoundError, CheckpointLockedError) as e:
        console.print(f"[bold]Error: {e}[/bold]")
        raise typer.Exit(code=1) from e
    except StorageError as e:
        console.print(f"[bold]A storage error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Settings and reset
# ---------------------------------------------------------------------------


@app.command()
def settings(
    db: Optional[Path] = _db_option,
    pronunciation: Optional[PronunciationDisplay] = typer.Option(  # noqa: B008
        None,
        "--pronunciation",
        help="Which pronunciation lines to show on word cards.",
        case_sensitive=False,
    ),
):
    """Show or change learner settings."""
    db_path = _require_path(db, "--db", "SUKHAN_DB")
    try:
        with DuckDBStore(db_path) as store:
            settings_store = SettingsStore(store)
            if pronunciation is not None:
                settings_store.set_pronunciation_display(pronunciation)
                console.print("[green]Settings updated.[/green]")
            current = settings_store.get_settings()
            console.print(
                f"Pronunciation display: [bold]{current.pronunciation_display.value}[/bold]"
            )
    except StorageError as e:
        console.print(f"[bold]A storage error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e


@app.command()
def reset(
    db: Optional[Path] = _db_option,
    words: bool = typer.Option(
        False, "--words", help="Also erase per-word review history."
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
):
    """Erase lesson, review and quiz completion (and optionally word history)."""
    db_path = _require_path(db, "--db", "SUKHAN_DB")
    if not yes:
        confirmed = typer.confirm(
            "Are you sure you want to erase all progress?"
        )
        if not confirmed:
            console.print("Reset cancelled.")
            raise typer.Exit()

    try:
        with DuckDBStore(db_path) as store:
            CompletionLedger(store).reset_progress()
            if words:
                WordScheduler(store).reset_word_progress()
    except StorageError as e:
        console.print(f"[bold]A storage error occurred: {e}[/bold]")
        raise typer.Exit(code=1) from e

    message = "Progress and word history erased." if words else "Progress erased."
    console.print(f"[bold green]{message}[/bold green]")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Console script entry point.

    Unexpected exceptions are reported on the console and end the process
    with exit status 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
