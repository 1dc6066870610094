"""Rich rendering of session snapshots."""

from __future__ import annotations

from io import StringIO

from rich.console import Console as RichConsole, Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from askuser.config import DEFAULT_TAB_LABEL_WIDTH
from askuser.core.flow import REVIEW_TAB
from askuser.core.formatter import ResponseFormatter
from askuser.core.view import ViewMode
from askuser.models import Question
from askuser.session import SessionSnapshot

OTHER_PLACEHOLDER = "Enter your answer..."


def _marker(selected: bool, multi: bool) -> str:
    if multi:
        return "[x]" if selected else "[ ]"
    return "(•)" if selected else "( )"


class Console:
    """Handles all terminal output with Rich formatting."""

    def __init__(
        self,
        console: RichConsole | None = None,
        tab_label_width: int = DEFAULT_TAB_LABEL_WIDTH,
        ready_hint: str = "Press e to edit, Enter to finish",
    ):
        self._console = console or RichConsole()
        self._ready_hint = ready_hint
        self._tab_label_width = tab_label_width
        self._formatter = ResponseFormatter()

    # ── Renderables ──────────────────────────────────────────

    def render(self, snap: SessionSnapshot) -> RenderableType:
        if snap.mode is ViewMode.READY:
            return self.render_ready(snap)
        parts: list[RenderableType] = []
        if snap.variant == "multi":
            parts.append(self.render_tab_bar(snap))
        question = snap.active_question
        if question is None:
            parts.append(self.render_review(snap))
        else:
            parts.append(self.render_question(snap, question))
        if snap.last_error:
            parts.append(Text(f"Error: {snap.last_error}", style="bold red"))
        return Group(*parts)

    def render_tab_bar(self, snap: SessionSnapshot) -> Text:
        bar = Text()
        for q in snap.questions:
            check = "■" if q.id in snap.answered_questions else "□"
            label = f" {check} {q.tab_label(self._tab_label_width)} "
            style = "bold reverse blue" if q.id == snap.active_tab else "dim"
            bar.append(label, style=style)
            bar.append(" ")
        style = "bold reverse blue" if snap.active_tab == REVIEW_TAB else "dim"
        bar.append(" ✓ Submit ", style=style)
        return bar

    def render_question(self, snap: SessionSnapshot, question: Question) -> Panel:
        selection = snap.selection(question.id)
        focus = snap.focused_index if snap.keyboard_enabled else -1
        body = Text()
        body.append(question.question, style="bold")
        body.append("\n")

        for i, option in enumerate(question.options):
            body.append("\n")
            body.append("› " if i == focus else "  ", style="cyan bold")
            marker = _marker(option.value in selection.selected, question.multi_select)
            body.append(f"{marker} ", style="cyan")
            body.append(option.label)
            if option.description:
                body.append(f" - {option.description}", style="dim")

        if question.allow_other:
            other_index = snap.layout.other_index
            body.append("\n")
            body.append("› " if other_index == focus else "  ", style="cyan bold")
            body.append(f"{_marker(selection.is_other_selected, question.multi_select)} ", style="cyan")
            body.append("Other", style="italic")
            if selection.is_other_selected:
                body.append("\n      ")
                if selection.other_text:
                    body.append(selection.other_text)
                else:
                    body.append(OTHER_PLACEHOLDER, style="dim")

        if snap.layout.has_next:
            body.append("\n\n")
            body.append("› " if snap.layout.next_index == focus else "  ", style="cyan bold")
            body.append(self._next_label(snap, question), style="bold" if snap.can_submit else "dim")

        title = question.header or "Question"
        return Panel(body, title=Text(title, style="bold blue"), border_style="blue", padding=(0, 1))

    def _next_label(self, snap: SessionSnapshot, question: Question) -> str:
        if snap.variant == "single":
            return "Submit"
        if snap.questions and snap.questions[-1].id == question.id:
            return "Review →"
        return "Next →"

    def render_review(self, snap: SessionSnapshot) -> Panel:
        body = Text()
        body.append("Review your answers\n", style="bold")
        body.append("Make sure everything looks correct before submitting.\n", style="dim")

        for q in snap.questions:
            answered = q.id in snap.answered_questions
            selection = snap.answers.get(q.id)
            body.append("\n")
            body.append("✓ " if answered else "  ", style="green")
            body.append(q.question, style="bold")
            if q.required and not answered:
                body.append("  Required", style="red")
            body.append("\n    ")
            body.append(
                self._formatter.describe(q, selection),
                style="" if answered else "dim italic",
            )

        if snap.unanswered_required:
            body.append("\n\n")
            body.append(
                "Please answer required questions: " + ", ".join(snap.unanswered_required),
                style="red",
            )

        body.append("\n\n")
        if snap.submitting:
            body.append("Sending...", style="dim")
        elif snap.can_submit:
            body.append("Press Enter to submit", style="bold green")
        else:
            body.append("Submit (disabled)", style="dim")
        return Panel(body, title=Text("Submit", style="bold blue"), border_style="blue", padding=(0, 1))

    def render_ready(self, snap: SessionSnapshot) -> Panel:
        body = Text()
        body.append("✓ ", style="green bold")
        body.append(snap.preview or "(no answer)")
        body.append("\n")
        body.append(self._ready_hint, style="dim")
        return Panel(body, border_style="green", padding=(0, 1))

    # ── Output ───────────────────────────────────────────────

    def show(self, snap: SessionSnapshot):
        self._console.print(self.render(snap))

    def to_ansi(self, snap: SessionSnapshot, width: int = 80) -> str:
        """Render to an ANSI string for embedding in another terminal UI."""
        buffer = RichConsole(
            file=StringIO(),
            force_terminal=True,
            color_system="truecolor",
            width=width,
        )
        buffer.print(self.render(snap))
        return buffer.file.getvalue()

    def print_error(self, msg: str):
        self._console.print(f"[bold red]Error:[/bold red] {msg}")

    def print_info(self, msg: str):
        self._console.print(f"[dim]{msg}[/dim]")
