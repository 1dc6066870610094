"""Keyboard navigation for a question panel.

``navigate`` is a pure function from (focus, item count, key, text-field
focus) to an action. ``KeyboardNavigationController`` keeps the focused
index for the active panel and resolves activations to panel targets.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Literal


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    SPACE = "space"
    TAB = "tab"
    SHIFT_TAB = "s-tab"


class ActionKind(str, Enum):
    NONE = "none"
    MOVE = "move"
    ACTIVATE = "activate"
    TAB_NEXT = "tab_next"
    TAB_PREV = "tab_prev"


@dataclass(frozen=True)
class NavigationAction:
    kind: ActionKind
    index: int | None = None


NO_ACTION = NavigationAction(ActionKind.NONE)


def navigate(
    current_focus: int,
    total_items: int,
    key: Key | str,
    is_text_field_focused: bool = False,
) -> NavigationAction:
    try:
        key = Key(key)
    except ValueError:
        return NO_ACTION

    # Tab always moves between questions, even out of a text field
    if key is Key.TAB:
        return NavigationAction(ActionKind.TAB_NEXT)
    if key is Key.SHIFT_TAB:
        return NavigationAction(ActionKind.TAB_PREV)

    if is_text_field_focused:
        return NO_ACTION

    if key is Key.LEFT:
        return NavigationAction(ActionKind.TAB_PREV)
    if key is Key.RIGHT:
        return NavigationAction(ActionKind.TAB_NEXT)

    if total_items <= 0:
        return NO_ACTION
    if key is Key.DOWN:
        return NavigationAction(ActionKind.MOVE, (current_focus + 1) % total_items)
    if key is Key.UP:
        return NavigationAction(ActionKind.MOVE, (current_focus - 1) % total_items)
    if key in (Key.ENTER, Key.SPACE):
        return NavigationAction(ActionKind.ACTIVATE, current_focus)
    return NO_ACTION


@dataclass(frozen=True)
class ActivationTarget:
    kind: Literal["option", "other", "advance"]
    value: str | None = None


@dataclass(frozen=True)
class PanelLayout:
    """Focusable items of a question panel: options, Other, then the proceed control."""

    option_values: tuple[str, ...] = ()
    has_other: bool = False
    has_next: bool = False

    @property
    def total_items(self) -> int:
        return len(self.option_values) + int(self.has_other) + int(self.has_next)

    @property
    def other_index(self) -> int:
        return len(self.option_values) if self.has_other else -1

    @property
    def next_index(self) -> int:
        return len(self.option_values) + int(self.has_other) if self.has_next else -1

    def resolve(self, index: int) -> ActivationTarget | None:
        if 0 <= index < len(self.option_values):
            return ActivationTarget("option", self.option_values[index])
        if index == self.other_index:
            return ActivationTarget("other")
        if index == self.next_index:
            return ActivationTarget("advance")
        return None


EMPTY_LAYOUT = PanelLayout()


class KeyboardNavigationController:
    def __init__(self) -> None:
        self.focused_index = 0
        self.enabled = False
        self.layout = EMPTY_LAYOUT
        self._panel_key: Hashable = None

    @property
    def total_items(self) -> int:
        return self.layout.total_items

    def sync(self, panel_key: Hashable, layout: PanelLayout, enabled: bool) -> None:
        """Point the controller at the active panel; entering a new panel resets focus."""
        if panel_key != self._panel_key:
            self.focused_index = 0
            self._panel_key = panel_key
        self.layout = layout
        self.enabled = enabled

    def focus(self, index: int) -> None:
        if 0 <= index < self.total_items:
            self.focused_index = index

    def handle_key(self, key: Key | str, text_field_focused: bool = False) -> NavigationAction:
        if not self.enabled:
            return NO_ACTION
        action = navigate(self.focused_index, self.total_items, key, text_field_focused)
        if action.kind is ActionKind.MOVE and action.index is not None:
            self.focused_index = action.index
        return action

    def target(self, index: int | None = None) -> ActivationTarget | None:
        return self.layout.resolve(self.focused_index if index is None else index)
