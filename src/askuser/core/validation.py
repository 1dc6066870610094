from __future__ import annotations

from collections.abc import Sequence

from askuser.core.answers import AnswerStore
from askuser.models import Question


class SubmissionValidator:
    """Gate for the submit action: every required question must be answered."""

    def unanswered_required(self, questions: Sequence[Question], store: AnswerStore) -> list[Question]:
        return [q for q in questions if q.required and not store.is_answered(q.id)]

    def can_submit(self, questions: Sequence[Question], store: AnswerStore) -> bool:
        return not self.unanswered_required(questions, store)
