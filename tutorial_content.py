"""
Tutorial content: the ordered sections of the BlockPipe tour.

Content is a YAML document. The top level is either a mapping of
section-id -> record (display order = key order) or a list of records.
Each record has exactly four string fields:

    title:        section heading
    content:      narrative shown above the editor
    startingCode: code the editor opens with
    expect:       exact output that counts as solved
"""
import logging
import os
from typing import Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "tutorial.yml")


class TutorialContentError(Exception):
    pass


class TutorialSection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    title: StrictStr
    narrative: StrictStr = Field(alias="content")
    starting_code: StrictStr = Field(alias="startingCode")
    expected_output: StrictStr = Field(alias="expect")


def _records(data):
    """Yield (label, record) pairs in document order."""
    if isinstance(data, dict):
        yield from ((str(key), value) for key, value in data.items())
    elif isinstance(data, list):
        yield from ((f"#{i + 1}", value) for i, value in enumerate(data))
    else:
        raise TutorialContentError(
            f"Tutorial content must be a mapping or a list, got {type(data).__name__}")


def parse_sections(data) -> Tuple[TutorialSection, ...]:
    sections = []
    for label, record in _records(data):
        if not isinstance(record, dict):
            raise TutorialContentError(f"Section {label}: expected a mapping, got {type(record).__name__}")
        try:
            sections.append(TutorialSection.model_validate(record))
        except ValidationError as e:
            raise TutorialContentError(f"Section {label}: {e}") from e
    if not sections:
        raise TutorialContentError("Tutorial content has no sections")
    return tuple(sections)


def load_sections(path=DEFAULT_CONTENT_PATH) -> Tuple[TutorialSection, ...]:
    """Load and validate every section; any bad record aborts the load."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise TutorialContentError(f"Cannot read tutorial content {path}: {e}") from e
    except yaml.YAMLError as e:
        raise TutorialContentError(f"Invalid YAML in {path}: {e}") from e

    sections = parse_sections(data)
    logger.info(f"Loaded {len(sections)} tutorial sections from {path}")
    return sections
