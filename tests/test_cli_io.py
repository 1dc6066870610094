"""Line presenter driven by scripted input."""

from __future__ import annotations

import asyncio
import io

from rich.console import Console as RichConsole

from askuser.io import QuestionPresenter
from askuser.models import parse_questions
from askuser.ui.cli_io import LineUserIO

from fakes import COLOR


def _scripted(*lines: str):
    remaining = iter(lines)

    def read(prompt: str = "") -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    return read


def _present(questions, *lines: str) -> tuple[str, str]:
    buf = io.StringIO()
    io_ = LineUserIO(console=RichConsole(file=buf, width=100), input_fn=_scripted(*lines))
    return asyncio.run(io_.present(questions)), buf.getvalue()


def test_is_a_presenter():
    assert isinstance(LineUserIO(), QuestionPresenter)


def test_tabbed_walkthrough(questions):
    response, _ = _present(questions, "1", "1,3", "", "2", "", "")
    assert response == (
        "Pick one -> Red\n"
        "Which features? -> Auth, Export\n"
        "Deploy where? -> GCP"
    )


def test_other_by_number():
    questions = parse_questions([COLOR])
    response, _ = _present(questions, "3", "teal", "/submit", "")
    assert response == "Other: teal"


def test_free_text_goes_to_other():
    questions = parse_questions([COLOR])
    response, _ = _present(questions, "teal", "/submit", "")
    assert response == "Other: teal"


def test_single_pick_submits_then_edit():
    questions = parse_questions([COLOR])
    response, out = _present(questions, "1", "/edit", "2", "")
    assert response == "Blue"
    assert "Red" in out


def test_review_jumps_to_question(questions):
    response, out = _present(questions, "/review", "3", "1", "", "")
    assert response == "Deploy where? -> AWS"
    assert "Review your answers" in out


def test_unknown_number_reported(questions):
    _, out = _present(questions, "9", "/quit")
    assert "No option 9" in out


def test_unknown_command_lists_commands(questions):
    _, out = _present(questions, "/help", "/quit")
    assert "/submit" in out


def test_quit_and_eof_return_nothing(questions):
    assert _present(questions, "/quit")[0] == ""
    assert _present(questions)[0] == ""
