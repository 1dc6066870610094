"""Events the rendering layer dispatches into a session."""

from __future__ import annotations

from dataclasses import dataclass

from askuser.core.flow import Direction
from askuser.core.keyboard import Key


@dataclass(frozen=True)
class SelectOption:
    qid: str
    value: str


@dataclass(frozen=True)
class ToggleOther:
    qid: str


@dataclass(frozen=True)
class ChangeOtherText:
    qid: str
    text: str


@dataclass(frozen=True)
class ChangeTab:
    target: str


@dataclass(frozen=True)
class CycleTab:
    direction: Direction = "next"


@dataclass(frozen=True)
class Advance:
    """The panel's proceed control (Next on a question, Submit on review)."""


@dataclass(frozen=True)
class KeyPress:
    key: Key | str
    text_field_focused: bool = False


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Edit:
    pass


Event = SelectOption | ToggleOther | ChangeOtherText | ChangeTab | CycleTab | Advance | KeyPress | Submit | Edit
