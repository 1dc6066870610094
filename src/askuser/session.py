"""A running question session.

The session owns the flow controller (and through it the AnswerStore), the
keyboard controller and the view mode. The rendering layer only reads
``snapshot()`` and feeds events to ``dispatch()``.

There are two variants:

* ``MultiQuestionSession`` - tabbed questions plus a review panel; a
  single-select pick auto-advances to the next tab, and submission is an
  explicit action on the review panel.
* ``SingleQuestionSession`` - one question, no tabs; a single-select pick
  submits straight away.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from askuser.core.answers import AnswerStore, has_valid_answer
from askuser.core.events import (
    Advance,
    ChangeOtherText,
    ChangeTab,
    CycleTab,
    Edit,
    Event,
    KeyPress,
    SelectOption,
    Submit,
    ToggleOther,
)
from askuser.core.flow import REVIEW_TAB, QuestionFlowController
from askuser.core.formatter import ResponseFormatter
from askuser.core.keyboard import (
    ActionKind,
    Key,
    KeyboardNavigationController,
    NavigationAction,
    PanelLayout,
    navigate,
)
from askuser.core.validation import SubmissionValidator
from askuser.core.view import ViewController, ViewMode
from askuser.exceptions import InvalidQuestionError
from askuser.io import ResponseSink
from askuser.models import EMPTY_SELECTION, Question, QuestionDefaults, SelectionState, parse_questions

if TYPE_CHECKING:
    from askuser.config import Config

logger = logging.getLogger(__name__)

_ANSWER_EVENTS = (SelectOption, ToggleOther, ChangeOtherText, KeyPress, Advance)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only projection of a session, recomputed after every event."""

    variant: str
    mode: ViewMode
    submitting: bool
    questions: tuple[Question, ...]
    active_tab: str
    answered_questions: frozenset[str]
    answers: Mapping[str, SelectionState]
    focused_index: int
    total_items: int
    keyboard_enabled: bool
    can_submit: bool
    unanswered_required: tuple[str, ...]
    preview: str
    last_error: str | None = None
    layout: PanelLayout = field(default_factory=PanelLayout)

    @property
    def active_question(self) -> Question | None:
        for q in self.questions:
            if q.id == self.active_tab:
                return q
        return None

    def selection(self, qid: str) -> SelectionState:
        return self.answers.get(qid, EMPTY_SELECTION)


class _Session(ABC):
    variant = ""

    def __init__(
        self,
        sink: ResponseSink,
        questions: Any = None,
        *,
        defaults: QuestionDefaults | None = None,
        on_change: Callable[[SessionSnapshot], None] | None = None,
    ):
        self._sink = sink
        self._defaults = defaults
        self._on_change = on_change
        self.validator = SubmissionValidator()
        self.formatter = ResponseFormatter()
        self.view = ViewController()
        self.keyboard = KeyboardNavigationController()
        self.flow = self._new_flow([])
        if questions is not None:
            self.on_questions_received(questions)
        else:
            self._sync_keyboard()

    @property
    def store(self) -> AnswerStore:
        return self.flow.store

    @property
    def questions(self) -> tuple[Question, ...]:
        return self.flow.questions

    @property
    def mode(self) -> ViewMode:
        return self.view.mode

    # ── Ingestion ────────────────────────────────────────────

    def on_questions_received(self, raw: Any) -> list[Question]:
        """Replace the question set, discarding every prior answer.

        Raises ConfigurationError before touching any state if the batch is invalid.
        """
        questions = parse_questions(raw, self._defaults)
        self._check_batch(questions)
        self.flow = self._new_flow(questions)
        self.view.reset()
        self._sync_keyboard()
        logger.info(
            "questions_received",
            extra={"data": {"variant": self.variant, "questions": len(questions)}},
        )
        self._notify()
        return questions

    def _check_batch(self, questions: list[Question]) -> None:
        pass

    def _new_flow(self, questions: list[Question]) -> QuestionFlowController:
        return QuestionFlowController(questions)

    # ── Events ───────────────────────────────────────────────

    async def dispatch(self, event: Event) -> None:
        if isinstance(event, Edit):
            self.view.edit()
        elif not self.view.editing:
            # the Ready view only responds to Edit
            logger.debug("event ignored in ready mode: %r", event)
        elif self.view.submitting and isinstance(event, _ANSWER_EVENTS):
            # answers stay frozen until the pending delivery settles
            logger.debug("event ignored while submitting: %r", event)
        elif isinstance(event, SelectOption):
            await self._select(event.qid, event.value)
        elif isinstance(event, ToggleOther):
            self.flow.toggle_other(event.qid)
        elif isinstance(event, ChangeOtherText):
            self.flow.change_other_text(event.qid, event.text)
        elif isinstance(event, ChangeTab):
            self._change_tab(event.target)
        elif isinstance(event, CycleTab):
            self._cycle_tab(event.direction)
        elif isinstance(event, Advance):
            await self._advance()
        elif isinstance(event, KeyPress):
            await self._key(event.key, event.text_field_focused)
        elif isinstance(event, Submit):
            await self._submit()
        else:
            logger.warning("unknown event: %r", event)
        self._sync_keyboard()
        self._notify()

    async def submit(self) -> bool:
        ok = await self._submit()
        self._sync_keyboard()
        self._notify()
        return ok

    async def _submit(self) -> bool:
        if not self.can_submit():
            logger.debug("submit blocked: required questions unanswered")
            return False
        return await self.view.deliver(self._sink, self.build_response(), len(self.questions))

    async def _select(self, qid: str, value: str) -> None:
        self.flow.select_option(qid, value)

    def _change_tab(self, target: str) -> None:
        self.flow.change_tab(target)

    def _cycle_tab(self, direction: str) -> None:
        self.flow.cycle_tab(direction)  # type: ignore[arg-type]

    @abstractmethod
    async def _advance(self) -> None:
        """Move past the active panel, submitting where the variant does."""

    async def _key(self, key: Key | str, text_field_focused: bool) -> NavigationAction:
        action = self.keyboard.handle_key(key, text_field_focused)
        await self._apply(action)
        return action

    async def _apply(self, action: NavigationAction) -> None:
        if action.kind is ActionKind.TAB_NEXT:
            self._cycle_tab("next")
        elif action.kind is ActionKind.TAB_PREV:
            self._cycle_tab("prev")
        elif action.kind is ActionKind.ACTIVATE and action.index is not None:
            target = self.keyboard.target(action.index)
            question = self.flow.active_question
            if target is None or question is None:
                return
            if target.kind == "option" and target.value is not None:
                await self._select(question.id, target.value)
            elif target.kind == "other":
                self.flow.toggle_other(question.id)
            elif target.kind == "advance":
                await self._advance()

    # ── Derivations ──────────────────────────────────────────

    @abstractmethod
    def can_submit(self) -> bool:
        """True when a submit would be accepted."""

    def unanswered_required(self) -> list[Question]:
        return self.validator.unanswered_required(self.questions, self.store)

    @abstractmethod
    def build_response(self) -> str:
        """The text a submit would deliver right now."""

    def _layout(self, question: Question) -> PanelLayout:
        return PanelLayout(
            option_values=tuple(question.option_values()),
            has_other=question.allow_other,
            has_next=True,
        )

    def _sync_keyboard(self) -> None:
        question = self.flow.active_question
        if question is None:
            self.keyboard.sync(None, PanelLayout(), enabled=False)
            return
        self.keyboard.sync(
            (question.id, len(question.options)),
            self._layout(question),
            enabled=self.view.editing,
        )

    def snapshot(self) -> SessionSnapshot:
        state = self.flow.state
        return SessionSnapshot(
            variant=self.variant,
            mode=self.view.mode,
            submitting=self.view.submitting,
            questions=state.questions,
            active_tab=state.active_tab,
            answered_questions=frozenset(state.answered_questions),
            answers=self.store.snapshot(),
            focused_index=self.keyboard.focused_index,
            total_items=self.keyboard.total_items,
            keyboard_enabled=self.keyboard.enabled,
            can_submit=self.can_submit(),
            unanswered_required=tuple(q.id for q in self.unanswered_required()),
            preview=self.build_response(),
            last_error=str(self.view.last_error) if self.view.last_error else None,
            layout=self.keyboard.layout,
        )

    def _notify(self) -> None:
        if self._on_change:
            self._on_change(self.snapshot())


class MultiQuestionSession(_Session):
    """Tabbed questions with a review panel gating submission."""

    variant = "multi"

    async def _advance(self) -> None:
        if self.flow.active_question is not None:
            self.flow.advance()
        else:
            await self._submit()

    async def _key(self, key: Key | str, text_field_focused: bool) -> NavigationAction:
        if self.flow.active_question is not None:
            return await super()._key(key, text_field_focused)

        # Review panel: tab-level keys plus Enter-to-submit
        action = navigate(0, 0, key, text_field_focused)
        await self._apply(action)
        if not text_field_focused and key == Key.ENTER and self.can_submit():
            await self._submit()
        return action

    def can_submit(self) -> bool:
        return self.validator.can_submit(self.questions, self.store)

    def build_response(self) -> str:
        return self.formatter.format_response(self.questions, self.store)


class SingleQuestionSession(_Session):
    """One question, no tabs. A single-select pick submits immediately."""

    variant = "single"

    @property
    def question(self) -> Question | None:
        return self.questions[0] if self.questions else None

    def _check_batch(self, questions: list[Question]) -> None:
        if len(questions) != 1:
            raise InvalidQuestionError(
                f"Single-question session needs exactly one question, got {len(questions)}"
            )

    def _new_flow(self, questions: list[Question]) -> QuestionFlowController:
        return QuestionFlowController(questions, auto_advance=False)

    async def _select(self, qid: str, value: str) -> None:
        self.flow.select_option(qid, value)
        question = self.flow.question(qid)
        if question is None or question.multi_select or question.find_option(value) is None:
            return
        if self.store.is_answered(qid):
            await self._submit()

    def _change_tab(self, target: str) -> None:
        pass

    def _cycle_tab(self, direction: str) -> None:
        pass

    async def _advance(self) -> None:
        await self._submit()

    def can_submit(self) -> bool:
        q = self.question
        return q is not None and has_valid_answer(self.store.get(q.id))

    def unanswered_required(self) -> list[Question]:
        q = self.question
        if q is None or self.can_submit():
            return []
        return [q]

    def build_response(self) -> str:
        q = self.question
        if q is None:
            return ""
        return self.formatter.format_selection(q, self.store.get(q.id))


Session = MultiQuestionSession | SingleQuestionSession


def create_session(
    raw_questions: Any,
    sink: ResponseSink,
    config: Config | None = None,
    *,
    force_multi: bool = False,
    on_change: Callable[[SessionSnapshot], None] | None = None,
) -> Session:
    """Parse a batch and start the matching session variant."""
    defaults = config.defaults if config else None
    single_enabled = config.single_question_variant if config else True
    questions = parse_questions(raw_questions, defaults)
    if len(questions) == 1 and single_enabled and not force_multi:
        return SingleQuestionSession(sink, questions, defaults=defaults, on_change=on_change)
    return MultiQuestionSession(sink, questions, defaults=defaults, on_change=on_change)


__all__ = [
    "REVIEW_TAB",
    "SessionSnapshot",
    "MultiQuestionSession",
    "SingleQuestionSession",
    "Session",
    "create_session",
]
