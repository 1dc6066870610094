"""Question flow state machine.

Owns the question list and the active panel. Every mutation goes through
one of the event methods below; unknown question ids and option values
are ignored rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal

from askuser.core.answers import AnswerStore
from askuser.log import log_flow_event
from askuser.models import REVIEW_TAB, Question, SelectionState, validate_batch

Direction = Literal["next", "prev"]


@dataclass
class FlowState:
    questions: tuple[Question, ...] = ()
    active_tab: str = REVIEW_TAB
    answered_questions: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {
            "questions": [q.model_dump(mode="json", by_alias=True) for q in self.questions],
            "active_tab": self.active_tab,
            # keep question order rather than set order
            "answered_questions": [
                q.id for q in self.questions if q.id in self.answered_questions
            ],
        }


class QuestionFlowController:
    def __init__(
        self,
        questions: list[Question] | tuple[Question, ...],
        store: AnswerStore | None = None,
        auto_advance: bool = True,
    ):
        questions = tuple(questions)
        validate_batch(list(questions))
        self.store = store if store is not None else AnswerStore()
        self.auto_advance = auto_advance
        self._by_id = {q.id: q for q in questions}
        self.state = FlowState(
            questions=questions,
            active_tab=questions[0].id if questions else REVIEW_TAB,
            answered_questions=self.store.answered_questions(self._by_id),
        )

    @property
    def questions(self) -> tuple[Question, ...]:
        return self.state.questions

    @property
    def active_tab(self) -> str:
        return self.state.active_tab

    @property
    def active_question(self) -> Question | None:
        return self._by_id.get(self.state.active_tab)

    def question(self, qid: str) -> Question | None:
        return self._by_id.get(qid)

    def tabs(self) -> list[str]:
        return [q.id for q in self.questions] + [REVIEW_TAB]

    def next_tab(self, tab: str, direction: Direction = "next") -> str:
        tabs = self.tabs()
        try:
            index = tabs.index(tab)
        except ValueError:
            return tabs[0]
        step = 1 if direction == "next" else -1
        return tabs[(index + step) % len(tabs)]

    # ── Events ───────────────────────────────────────────────

    def select_option(self, qid: str, value: str) -> bool:
        """Pick an option. Returns True when the pick auto-advanced."""
        q = self._by_id.get(qid)
        if q is None or q.find_option(value) is None:
            log_flow_event("select_option_ignored", qid, value=value)
            return False

        current = self.store.get(qid)
        if q.multi_select:
            if value in current.selected:
                selected = tuple(v for v in current.selected if v != value)
            else:
                selected = current.selected + (value,)
            self._write(qid, replace(current, selected=selected))
            log_flow_event("select_option", qid, value=value, selected=list(selected))
            return False

        self._write(qid, replace(current, selected=(value,), is_other_selected=False))
        log_flow_event("select_option", qid, value=value)

        # A pick on a panel that is not active never moves the tab
        if not self.auto_advance or self.state.active_tab != qid:
            return False
        self.state.active_tab = self.next_tab(qid)
        log_flow_event("auto_advance", qid, active_tab=self.state.active_tab)
        return True

    def toggle_other(self, qid: str) -> None:
        q = self._by_id.get(qid)
        if q is None or not q.allow_other:
            log_flow_event("toggle_other_ignored", qid)
            return

        current = self.store.get(qid)
        is_other = not current.is_other_selected
        if q.multi_select or not is_other:
            updated = replace(current, is_other_selected=is_other)
        else:
            updated = replace(current, selected=(), is_other_selected=True)
        # other_text is kept as-is in every branch
        self._write(qid, updated)
        log_flow_event("toggle_other", qid, is_other_selected=is_other)

    def change_other_text(self, qid: str, text: str) -> None:
        if qid not in self._by_id:
            log_flow_event("change_other_text_ignored", qid)
            return
        self._write(qid, replace(self.store.get(qid), other_text=text))

    def change_tab(self, target: str) -> None:
        if target != REVIEW_TAB and target not in self._by_id:
            log_flow_event("change_tab_ignored", None, target=target)
            return
        self.state.active_tab = target
        log_flow_event("change_tab", None, active_tab=target)

    def cycle_tab(self, direction: Direction) -> None:
        self.change_tab(self.next_tab(self.state.active_tab, direction))

    def advance(self) -> None:
        """The explicit proceed action of a question panel."""
        if self.active_question is None:
            return
        self.change_tab(self.next_tab(self.state.active_tab))

    def _write(self, qid: str, selection: SelectionState) -> None:
        self.store.set_selection(qid, selection)
        if self.store.is_answered(qid):
            self.state.answered_questions.add(qid)
        else:
            self.state.answered_questions.discard(qid)
