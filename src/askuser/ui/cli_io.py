"""Line-oriented presenter: numbered options and typed commands.

Used when stdin/stdout are not a terminal that can host the full-screen UI.
Every line the operator types becomes one or more session events.
"""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console as RichConsole

from askuser.config import Config
from askuser.core.events import (
    Advance,
    ChangeOtherText,
    ChangeTab,
    CycleTab,
    Edit,
    Event,
    SelectOption,
    Submit,
    ToggleOther,
)
from askuser.core.flow import REVIEW_TAB
from askuser.core.view import ViewMode
from askuser.io import CollectingSink
from askuser.models import Question
from askuser.session import SessionSnapshot, create_session
from askuser.ui.console import Console

COMMANDS = {
    "/next": "next tab (same as an empty line)",
    "/prev": "previous tab",
    "/review": "jump to the review panel",
    "/submit": "submit the answers",
    "/quit": "leave without submitting",
}


class LineUserIO:
    """Renders questions as numbered lists and reads answers line by line."""

    def __init__(
        self,
        console: RichConsole | None = None,
        config: Config | None = None,
        input_fn: Callable[[str], str] = input,
        force_multi: bool = False,
    ):
        self._config = config or Config()
        self._console = Console(
            console,
            tab_label_width=self._config.tab_label_width,
            ready_hint="Enter to finish, /edit to change your answers",
        )
        self._input = input_fn
        self._force_multi = force_multi

    async def present(self, questions: list[Question]) -> str:
        sink = CollectingSink()
        session = create_session(questions, sink, self._config, force_multi=self._force_multi)

        while True:
            snap = session.snapshot()
            self._console.show(snap)

            if snap.mode is ViewMode.READY:
                raw = self._read("  Enter=finish, /edit=change: ")
                if raw is None or raw.strip().lower() != "/edit":
                    return sink.last
                await session.dispatch(Edit())
                continue

            raw = self._read(self._prompt(snap))
            if raw is None or raw.strip().lower() == "/quit":
                return ""
            for event in self._parse(snap, raw.strip()):
                await session.dispatch(event)

    def _read(self, prompt: str) -> str | None:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            return None

    def _prompt(self, snap: SessionSnapshot) -> str:
        question = snap.active_question
        if question is None:
            return "  Enter=submit, /prev, number of a tab: "
        multi_hint = " (comma-separated)" if question.multi_select else ""
        return f"  Answer{multi_hint} (number, text, Enter=next, /review, /submit): "

    def _parse(self, snap: SessionSnapshot, raw: str) -> list[Event]:
        """Translate one input line into session events."""
        lowered = raw.lower()
        if not raw or lowered == "/next":
            return [Advance()]
        if lowered == "/prev":
            return [CycleTab("prev")]
        if lowered == "/review":
            return [ChangeTab(REVIEW_TAB)]
        if lowered == "/submit":
            return [Submit()]
        if lowered.startswith("/"):
            self._console.print_info("Commands: " + ", ".join(COMMANDS))
            return []

        question = snap.active_question
        if question is None:
            # on review, a number jumps back to that question
            if raw.isdigit() and 1 <= int(raw) <= len(snap.questions):
                return [ChangeTab(snap.questions[int(raw) - 1].id)]
            return []

        parts = [p.strip() for p in raw.split(",")] if question.multi_select else [raw]
        events: list[Event] = []
        free_text = ""
        for part in parts:
            if not part:
                continue
            if part.isdigit():
                events.extend(self._pick(snap, question, int(part) - 1))
            else:
                free_text = part
        if free_text:
            events.extend(self._other_text(snap, question, free_text))
        return events

    def _pick(self, snap: SessionSnapshot, question: Question, idx: int) -> list[Event]:
        if 0 <= idx < len(question.options):
            return [SelectOption(question.id, question.options[idx].value)]
        if question.allow_other and idx == len(question.options):
            events: list[Event] = []
            if not snap.selection(question.id).is_other_selected:
                events.append(ToggleOther(question.id))
            text = self._read("  Your answer: ")
            if text is not None:
                events.append(ChangeOtherText(question.id, text))
            return events
        self._console.print_info(f"No option {idx + 1}")
        return []

    def _other_text(self, snap: SessionSnapshot, question: Question, text: str) -> list[Event]:
        if not question.allow_other:
            self._console.print_info("This question has no free-text answer")
            return []
        events: list[Event] = []
        if not snap.selection(question.id).is_other_selected:
            events.append(ToggleOther(question.id))
        events.append(ChangeOtherText(question.id, text))
        return events

