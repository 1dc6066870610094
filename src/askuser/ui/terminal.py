"""Inline terminal presenter built on prompt_toolkit.

Rich renders the current snapshot to ANSI, prompt_toolkit shows it and
owns the keyboard. Arrow keys, Enter and Space become ``KeyPress`` events;
typing into the Other field becomes ``ChangeOtherText``.
"""

from __future__ import annotations

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.filters import Condition, has_focus
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import ConditionalContainer, HSplit, Layout, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl

from askuser.config import Config
from askuser.core.events import ChangeOtherText, Edit, Event, KeyPress
from askuser.core.keyboard import Key
from askuser.core.view import ViewMode
from askuser.io import CollectingSink
from askuser.models import Question
from askuser.session import Session, create_session
from askuser.ui.console import Console

NAV_KEYS = (Key.UP, Key.DOWN, Key.LEFT, Key.RIGHT, Key.ENTER, Key.SPACE)


class TerminalUserIO:
    """Interactive question panel driven by arrow keys."""

    def __init__(self, config: Config | None = None, force_multi: bool = False):
        self._config = config or Config()
        self._console = Console(tab_label_width=self._config.tab_label_width)
        self._force_multi = force_multi

    async def present(self, questions: list[Question]) -> str:
        sink = CollectingSink()
        session = create_session(questions, sink, self._config, force_multi=self._force_multi)
        return await _PanelApp(session, sink, self._console).run()


class _PanelApp:
    def __init__(self, session: Session, sink: CollectingSink, console: Console):
        self._session = session
        self._sink = sink
        self._console = console
        self._panel = session.snapshot().active_tab
        # set while the buffer is rewritten from session state, not by typing
        self._syncing = False

        self._other = Buffer(multiline=False, on_text_changed=self._on_other_changed)
        self._body = Window(FormattedTextControl(self._render, focusable=True), wrap_lines=True)
        other_window = ConditionalContainer(
            Window(BufferControl(self._other), height=1),
            filter=Condition(self._other_visible),
        )
        self._app: Application[str] = Application(
            layout=Layout(HSplit([self._body, other_window]), focused_element=self._body),
            key_bindings=self._bindings(),
            full_screen=False,
        )

    async def run(self) -> str:
        return await self._app.run_async()

    # ── Rendering ────────────────────────────────────────────

    def _render(self):
        width = self._app.output.get_size().columns
        return ANSI(self._console.to_ansi(self._session.snapshot(), width=width))

    def _other_visible(self) -> bool:
        snap = self._session.snapshot()
        question = snap.active_question
        return (
            snap.mode is ViewMode.EDITING
            and question is not None
            and snap.selection(question.id).is_other_selected
        )

    # ── Keys ─────────────────────────────────────────────────

    def _bindings(self) -> KeyBindings:
        kb = KeyBindings()
        editing = Condition(lambda: self._session.mode is ViewMode.EDITING)
        ready = ~editing
        text_focused = has_focus(self._other)

        def send(key: Key):
            def handler(event):
                self._spawn(KeyPress(key, text_field_focused=self._app.layout.has_focus(self._other)))
            return handler

        kb.add("tab", filter=editing)(send(Key.TAB))
        kb.add("s-tab", filter=editing)(send(Key.SHIFT_TAB))
        for key in NAV_KEYS:
            kb.add(key.value, filter=editing & ~text_focused)(send(key))

        @kb.add("escape", filter=text_focused)
        @kb.add("enter", filter=text_focused)
        def _leave_text(event):
            event.app.layout.focus(self._body)

        @kb.add("e", filter=ready)
        def _edit(event):
            self._spawn(Edit())

        @kb.add("enter", filter=ready)
        @kb.add("q", filter=ready)
        def _finish(event):
            event.app.exit(result=self._sink.last)

        @kb.add("c-c")
        def _abandon(event):
            event.app.exit(result="")

        return kb

    def _on_other_changed(self, buffer: Buffer) -> None:
        if self._syncing:
            return
        question = self._session.snapshot().active_question
        if question is not None:
            self._spawn(ChangeOtherText(question.id, buffer.text))

    # ── Dispatch ─────────────────────────────────────────────

    def _spawn(self, event: Event) -> None:
        self._app.create_background_task(self._dispatch(event))

    async def _dispatch(self, event: Event) -> None:
        await self._session.dispatch(event)
        self._follow_focus()
        self._app.invalidate()

    def _follow_focus(self) -> None:
        snap = self._session.snapshot()
        question = snap.active_question

        if snap.active_tab != self._panel or snap.mode is ViewMode.READY:
            self._panel = snap.active_tab
            self._set_other_text(snap.selection(question.id).other_text if question else "")
            self._app.layout.focus(self._body)
            return

        if not self._other_visible():
            if self._app.layout.has_focus(self._other):
                self._app.layout.focus(self._body)
            return

        # Activating Other moves the caret into its text field
        if snap.focused_index == snap.layout.other_index and not self._app.layout.has_focus(self._other):
            self._set_other_text(snap.selection(question.id).other_text)
            self._app.layout.focus(self._other)

    def _set_other_text(self, text: str) -> None:
        self._syncing = True
        try:
            self._other.text = text
            self._other.cursor_position = len(text)
        finally:
            self._syncing = False
