import sys
import pytest
from pathlib import Path
from typing import Generator
from datetime import date

from sukhan.db import DuckDBStore
from sukhan.models import Lesson, Unit, WordRef, Dictionary, DictionaryEntry, Curriculum
from sukhan.progress import CompletionLedger
from sukhan.word_scheduler import WordScheduler


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Temporarily change the process working directory to the test's tmpdir and prepend that tmpdir to sys.path.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    sys.path.insert(0, str(tmpdir))
    with tmpdir.as_cwd():
        yield


# --- Store Fixtures ---
@pytest.fixture
def db_path_memory() -> str:
    return ":memory:"


@pytest.fixture
def db_path_file(tmp_path: Path) -> Path:
    """
    Provide the filesystem path for a temporary test store file.
    """
    return tmp_path / "test_sukhan.db"


@pytest.fixture(params=["memory", "file"])
def store(
    request, db_path_memory: str, db_path_file: Path
) -> Generator[DuckDBStore, None, None]:
    """
    Provide a DuckDBStore instance for tests, either in-memory or file-backed, and ensure proper teardown.

    Parameters:
        request: pytest `FixtureRequest` providing `param` which must be either `"memory"` or `"file"`.
    """
    if request.param == "memory":
        store_inst = DuckDBStore(db_path_memory)
    else:
        store_inst = DuckDBStore(db_path_file)
    try:
        yield store_inst
    finally:
        store_inst.close_connection()
        if request.param == "file" and db_path_file.exists():
            try:
                db_path_file.unlink()
            except OSError as e:
                import logging

                logging.warning(
                    f"Error removing temporary store file in test fixture teardown: {e}"
                )


@pytest.fixture
def memory_store() -> Generator[DuckDBStore, None, None]:
    store_inst = DuckDBStore(":memory:")
    try:
        yield store_inst
    finally:
        store_inst.close_connection()


@pytest.fixture
def today() -> date:
    return date(2024, 3, 1)


@pytest.fixture
def ledger(memory_store: DuckDBStore) -> CompletionLedger:
    return CompletionLedger(memory_store)


@pytest.fixture
def word_scheduler(memory_store: DuckDBStore, today: date) -> WordScheduler:
    return WordScheduler(memory_store, clock=lambda: today)


# --- Curriculum Fixtures ---


def make_lesson(lesson_id: str, category: str, indices) -> Lesson:
    return Lesson(
        id=lesson_id,
        title=f"Lesson {lesson_id}",
        words=[WordRef(category=category, index=i) for i in indices],
    )


@pytest.fixture
def three_lesson_unit() -> Unit:
    """
    Unit "1" with three lessons of four words each (greetings 0-3, food 0-3, colors 0-3).
    """
    return Unit(
        id="1",
        title="Basics",
        lessons=[
            make_lesson("lesson-1-1", "greetings", range(4)),
            make_lesson("lesson-1-2", "food", range(4)),
            make_lesson("lesson-1-3", "colors", range(4)),
        ],
    )


@pytest.fixture
def four_lesson_unit() -> Unit:
    return Unit(
        id="2",
        title="Everyday",
        lessons=[
            make_lesson("lesson-2-1", "people", range(3)),
            make_lesson("lesson-2-2", "weather", range(3)),
            make_lesson("lesson-2-3", "time", range(3)),
            make_lesson("lesson-2-4", "verbs", range(3)),
        ],
    )


@pytest.fixture
def sample_dictionary() -> Dictionary:
    """
    Dictionary with four entries in each of the categories used by the sample units.
    """
    categories = {}
    for category in ("greetings", "food", "colors", "people", "weather", "time", "verbs"):
        categories[category] = [
            DictionaryEntry(
                tajik=f"{category}-tj-{i}",
                english=f"{category}-en-{i}",
                russian=f"{category}-ru-{i}",
                pronunciation_latin=f"{category}-lat-{i}",
                pronunciation_cyrillic=f"{category}-cyr-{i}",
            )
            for i in range(4)
        ]
    return Dictionary(categories=categories)


@pytest.fixture
def sample_curriculum(three_lesson_unit: Unit, four_lesson_unit: Unit) -> Curriculum:
    return Curriculum(units=[three_lesson_unit, four_lesson_unit])
