"""Question definitions and per-question answer state.

Questions arrive from the host as loosely-typed mappings (the ``ask_user``
tool arguments). ``parse_questions`` turns a batch into validated, immutable
``Question`` objects or rejects the whole batch with a ``ConfigurationError``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from askuser.exceptions import (
    DuplicateOptionError,
    DuplicateQuestionError,
    InvalidQuestionError,
    OptionCountError,
)

MIN_OPTIONS = 2
MAX_OPTIONS = 4

# panel id of the review tab; no question may use it as its text
REVIEW_TAB = "review"


class Option(BaseModel):
    """A single selectable choice."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Display text for this option")
    value: str = Field(description="Value returned when this option is selected")
    description: Optional[str] = Field(None, description="Additional context for this option")


class Question(BaseModel):
    """A multiple-choice prompt. The question text is its identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str = Field(min_length=1)
    header: str = ""
    options: tuple[Option, ...] = ()
    multi_select: bool = Field(False, alias="multiSelect")
    allow_other: bool = Field(True, alias="allowOther")
    required: bool = False

    @property
    def id(self) -> str:
        return self.question

    def option_values(self) -> list[str]:
        return [o.value for o in self.options]

    def find_option(self, value: str) -> Option | None:
        for option in self.options:
            if option.value == value:
                return option
        return None

    def tab_label(self, width: int = 12) -> str:
        if self.header:
            return self.header
        if len(self.question) <= width:
            return self.question
        return self.question[: max(width - 1, 1)] + "…"


@dataclass(frozen=True)
class QuestionDefaults:
    """Values applied to fields a question mapping leaves out."""

    multi_select: bool = False
    allow_other: bool = True
    required: bool = False


@dataclass(frozen=True)
class SelectionState:
    """The answer to one question.

    ``selected`` keeps insertion order and never holds duplicates.
    ``other_text`` survives toggling Other off.
    """

    selected: tuple[str, ...] = ()
    other_text: str = ""
    is_other_selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": list(self.selected),
            "other_text": self.other_text,
            "is_other_selected": self.is_other_selected,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SelectionState:
        selected = tuple(dict.fromkeys(str(v) for v in data.get("selected", ())))
        return cls(
            selected=selected,
            other_text=str(data.get("other_text", "")),
            is_other_selected=bool(data.get("is_other_selected", False)),
        )


EMPTY_SELECTION = SelectionState()


# ── Ingestion ────────────────────────────────────────────────

_DEFAULTED_FIELDS = (
    ("multi_select", "multiSelect"),
    ("allow_other", "allowOther"),
    ("required", "required"),
)


def _apply_defaults(item: Mapping[str, Any], defaults: QuestionDefaults) -> dict[str, Any]:
    data = dict(item)
    for name, alias in _DEFAULTED_FIELDS:
        if name not in data and alias not in data:
            data[name] = getattr(defaults, name)
    return data


def _format_validation_error(index: int, exc: ValidationError) -> list[str]:
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        where = f"questions[{index}].{loc}" if loc else f"questions[{index}]"
        lines.append(f"{where}: {err.get('msg', 'invalid value')}")
    return lines


def validate_batch(questions: list[Question]) -> None:
    """Reject duplicate or reserved ids, bad option counts and duplicate option values."""
    seen: set[str] = set()
    for q in questions:
        if q.question == REVIEW_TAB:
            raise InvalidQuestionError(f"Question text {REVIEW_TAB!r} is reserved for the review panel")
        count = len(q.options)
        if count < MIN_OPTIONS or count > MAX_OPTIONS:
            raise OptionCountError(q.question, count)
        values = q.option_values()
        if len(set(values)) != len(values):
            dupe = next(v for v in values if values.count(v) > 1)
            raise DuplicateOptionError(q.question, dupe)
        if q.question in seen:
            raise DuplicateQuestionError(q.question)
        seen.add(q.question)


def parse_questions(
    raw: Any,
    defaults: QuestionDefaults | None = None,
) -> list[Question]:
    """Parse a question batch from tool arguments.

    Accepts a list of question mappings, a mapping with a ``questions`` key,
    or either of those as a JSON string. Items may themselves be JSON strings.

    Raises:
        ConfigurationError: the batch is malformed; nothing is partially applied.
    """
    defaults = defaults or QuestionDefaults()

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidQuestionError(f"Question batch is not valid JSON: {e}") from e

    if isinstance(raw, Mapping):
        if "questions" not in raw:
            raise InvalidQuestionError("Question batch has no 'questions' field")
        raw = raw["questions"]

    if not isinstance(raw, (list, tuple)):
        raise InvalidQuestionError(
            f"Questions must be an array, got {type(raw).__name__}"
        )

    questions: list[Question] = []
    errors: list[str] = []
    for i, item in enumerate(raw):
        if isinstance(item, Question):
            questions.append(item)
            continue
        if isinstance(item, str):
            try:
                item = json.loads(item)
            except json.JSONDecodeError:
                errors.append(f"questions[{i}]: not a JSON object")
                continue
        if not isinstance(item, Mapping):
            errors.append(f"questions[{i}]: expected an object, got {type(item).__name__}")
            continue
        try:
            questions.append(Question.model_validate(_apply_defaults(item, defaults)))
        except ValidationError as e:
            errors.extend(_format_validation_error(i, e))

    if errors:
        raise InvalidQuestionError(
            "Invalid question batch:\n" + "\n".join(f"  - {e}" for e in errors),
            errors=errors,
        )

    validate_batch(questions)
    return questions
