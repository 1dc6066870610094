"""Rendering of answers into the text handed back to the host conversation."""

from __future__ import annotations

from collections.abc import Sequence

from askuser.core.answers import AnswerStore
from askuser.models import Question, SelectionState

NOT_ANSWERED = "Not answered"


class ResponseFormatter:
    def selection_parts(
        self,
        question: Question,
        selection: SelectionState,
        other_prefix: str = "Other: ",
    ) -> list[str]:
        """Option labels in pick order, then the trimmed Other text."""
        parts: list[str] = []
        for value in selection.selected:
            option = question.find_option(value)
            if option:
                parts.append(option.label)
        other = selection.other_text.strip()
        if selection.is_other_selected and other:
            parts.append(f"{other_prefix}{other}")
        return parts

    def format_selection(self, question: Question, selection: SelectionState) -> str:
        return ", ".join(self.selection_parts(question, selection))

    def format_response(self, questions: Sequence[Question], store: AnswerStore) -> str:
        """One ``<question> -> <selections>`` line per answered question.

        Unanswered questions are left out entirely.
        """
        lines = []
        for q in questions:
            rendered = self.format_selection(q, store.get(q.id))
            if rendered:
                lines.append(f"{q.question} -> {rendered}")
        return "\n".join(lines)

    def describe(self, question: Question, selection: SelectionState | None) -> str:
        """Review-panel text for one answer."""
        if selection is None:
            return NOT_ANSWERED
        parts = self.selection_parts(question, selection, other_prefix="")
        return ", ".join(parts) if parts else NOT_ANSWERED

    def summarize(self, questions: Sequence[Question]) -> str:
        headers = ", ".join(q.header or q.question for q in questions)
        return f"Asking user {len(questions)} question(s): {headers}"
