"""Answer storage: question id -> SelectionState."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from askuser.models import EMPTY_SELECTION, SelectionState


def has_valid_answer(selection: SelectionState | None) -> bool:
    if selection is None:
        return False
    return bool(selection.selected) or (
        selection.is_other_selected and bool(selection.other_text.strip())
    )


class AnswerStore:
    """Pure storage plus answered-ness derivation.

    Callers enforce the single/multi-select invariants before writing.
    An absent entry is the untouched, empty state.
    """

    def __init__(self, entries: Mapping[str, SelectionState] | None = None):
        self._entries: dict[str, SelectionState] = dict(entries or {})

    def set_selection(self, qid: str, selection: SelectionState) -> None:
        self._entries[qid] = selection

    def get(self, qid: str) -> SelectionState:
        return self._entries.get(qid, EMPTY_SELECTION)

    def has_entry(self, qid: str) -> bool:
        return qid in self._entries

    def is_answered(self, qid: str) -> bool:
        return has_valid_answer(self._entries.get(qid))

    def answered_questions(self, qids: Iterable[str] | None = None) -> set[str]:
        candidates = self._entries if qids is None else qids
        return {qid for qid in candidates if self.is_answered(qid)}

    def snapshot(self) -> dict[str, SelectionState]:
        # SelectionState is frozen, so a shallow copy is a full snapshot
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnswerStore):
            return NotImplemented
        return self._entries == other._entries

    def to_dict(self) -> dict[str, Any]:
        return {qid: s.to_dict() for qid, s in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> AnswerStore:
        return cls({qid: SelectionState.from_dict(s) for qid, s in data.items()})
