"""
Loads the read-only reference data: the unit/lesson curriculum and the
category -> word list dictionary. Both files may be YAML or JSON.
"""

import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from .exceptions import CurriculumError
from .models import Curriculum, Dictionary

logger = logging.getLogger(__name__)


def _read_mapping(file_path: Path) -> dict:
    """
    Read a YAML/JSON file whose top level must be a mapping.

    Raises:
        CurriculumError: If the file is missing, unreadable, has invalid
            syntax, or its top level is not a mapping.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
        raw: Any = yaml.safe_load(content)
    except FileNotFoundError:
        raise CurriculumError(file_path, "File not found.") from None
    except IOError as e:
        raise CurriculumError(file_path, f"Could not read file: {e}") from e
    except yaml.YAMLError as e:
        raise CurriculumError(file_path, f"Invalid YAML syntax: {e}") from e

    if not isinstance(raw, dict):
        raise CurriculumError(file_path, "Top level must be a mapping.")
    return raw


def _validation_message(e: ValidationError) -> str:
    error_details = e.errors()[0]
    field = ".".join(map(str, error_details["loc"]))
    return f"Validation error in field '{field}': {error_details['msg']}"


def load_curriculum(file_path: Union[str, Path]) -> Curriculum:
    """
    Parse a curriculum file of the form
    `{units: [{id, title, lessons: [{id, title, words: [{category, index}]}]}]}`.
    """
    file_path = Path(file_path)
    raw = _read_mapping(file_path)
    try:
        curriculum = Curriculum.model_validate(raw)
    except ValidationError as e:
        raise CurriculumError(file_path, _validation_message(e)) from e

    lesson_count = sum(len(unit.lessons) for unit in curriculum.units)
    logger.info(
        f"Loaded curriculum from {file_path}: {len(curriculum.units)} units, {lesson_count} lessons."
    )
    return curriculum


def load_dictionary(file_path: Union[str, Path]) -> Dictionary:
    """
    Parse a dictionary file mapping each category to its ordered word list.
    """
    file_path = Path(file_path)
    raw = _read_mapping(file_path)
    try:
        dictionary = Dictionary.model_validate({"categories": raw})
    except ValidationError as e:
        raise CurriculumError(file_path, _validation_message(e)) from e

    word_count = sum(len(words) for words in dictionary.categories.values())
    logger.info(
        f"Loaded dictionary from {file_path}: {len(dictionary.categories)} categories, {word_count} words."
    )
    return dictionary
