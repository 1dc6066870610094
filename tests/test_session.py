"""Session behaviour end to end: events in, snapshots and deliveries out."""

from __future__ import annotations

import asyncio
import copy

import pytest

from askuser.config import Config
from askuser.core.events import (
    Advance,
    ChangeOtherText,
    ChangeTab,
    CycleTab,
    Edit,
    KeyPress,
    SelectOption,
    Submit,
    ToggleOther,
)
from askuser.core.flow import REVIEW_TAB
from askuser.core.keyboard import Key
from askuser.core.view import ViewMode
from askuser.exceptions import ConfigurationError, DuplicateQuestionError, InvalidQuestionError
from askuser.io import CallbackSink, CollectingSink
from askuser.session import MultiQuestionSession, SingleQuestionSession, _Session, create_session

from fakes import COLOR, DEPLOY, FEATURES, FailingSink, GatedSink

Q1, Q2, Q3 = "Pick one", "Which features?", "Deploy where?"


def _required(raw: dict) -> dict:
    return dict(copy.deepcopy(raw), required=True)


async def _send(session, *events):
    for event in events:
        await session.dispatch(event)


# ===================================================================
# Variant selection
# ===================================================================

class TestCreateSession:
    def test_batch_gets_multi(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        assert isinstance(session, MultiQuestionSession)
        assert session.snapshot().variant == "multi"

    def test_single_question_gets_single(self, color_raw):
        assert isinstance(create_session([color_raw], CollectingSink()), SingleQuestionSession)

    def test_force_multi(self, color_raw):
        session = create_session([color_raw], CollectingSink(), force_multi=True)
        assert isinstance(session, MultiQuestionSession)

    def test_config_disables_single_variant(self, color_raw):
        config = Config(single_question_variant=False)
        assert isinstance(create_session([color_raw], CollectingSink(), config), MultiQuestionSession)

    def test_invalid_batch_raises(self, color_raw):
        with pytest.raises(DuplicateQuestionError):
            create_session([color_raw, color_raw], CollectingSink())

    def test_base_session_needs_a_variant(self):
        with pytest.raises(TypeError):
            _Session(CollectingSink())


# ===================================================================
# Multi-question session
# ===================================================================

class TestMultiQuestionSession:
    def test_pick_advances_and_submit_delivers(self, raw_batch):
        sink = CollectingSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"))
            assert session.snapshot().active_tab == Q2
            await _send(session, SelectOption(Q2, "search"), SelectOption(Q2, "auth"), Advance())
            assert session.snapshot().active_tab == Q3
            await _send(session, SelectOption(Q3, "gcp"))
            assert session.snapshot().active_tab == REVIEW_TAB
            await _send(session, Submit())

        asyncio.run(run())
        assert sink.responses == [
            "Pick one -> Red\nWhich features? -> Search, Auth\nDeploy where? -> GCP"
        ]
        assert session.mode is ViewMode.READY

    def test_edit_preserves_answers(self, raw_batch):
        sink = CollectingSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "b"), ToggleOther(Q2), ChangeOtherText(Q2, "SSO"))
            before = session.store.snapshot()
            await _send(session, Submit())
            assert session.mode is ViewMode.READY
            await _send(session, Edit())
            return before

        before = asyncio.run(run())
        assert session.mode is ViewMode.EDITING
        assert session.store.snapshot() == before

    def test_ready_mode_ignores_changes(self, raw_batch):
        sink = CollectingSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"), Submit())
            await _send(session, SelectOption(Q3, "aws"), ChangeTab(Q1), Submit())

        asyncio.run(run())
        assert not session.store.has_entry(Q3)
        assert session.snapshot().active_tab == Q2
        assert len(sink.responses) == 1

    def test_failed_delivery_stays_editing(self, raw_batch):
        sink = FailingSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"))
            before = session.store.snapshot()
            await _send(session, Submit())
            return before

        before = asyncio.run(run())
        snap = session.snapshot()
        assert sink.calls == 1
        assert snap.mode is ViewMode.EDITING
        assert snap.submitting is False
        assert "host went away" in snap.last_error
        assert session.store.snapshot() == before

    def test_retry_after_failure_clears_error(self, raw_batch):
        attempts = []

        def deliver(text: str):
            attempts.append(text)
            if len(attempts) == 1:
                raise ConnectionError("offline")

        session = create_session(raw_batch, CallbackSink(deliver))

        async def run():
            await _send(session, SelectOption(Q1, "r"), Submit())
            assert session.snapshot().last_error
            await _send(session, Submit())

        asyncio.run(run())
        assert len(attempts) == 2
        assert session.snapshot().last_error is None
        assert session.mode is ViewMode.READY

    def test_single_flight_delivery(self, raw_batch):
        sink = GatedSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"))
            first = asyncio.create_task(session.submit())
            await asyncio.sleep(0)
            assert session.snapshot().submitting is True
            second = await session.submit()
            sink.release()
            return await first, second

        first, second = asyncio.run(run())
        assert (first, second) == (True, False)
        assert sink.responses == ["Pick one -> Red"]

    def test_answers_frozen_while_delivery_pending(self, raw_batch):
        sink = GatedSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"), SelectOption(Q2, "auth"))
            pending = asyncio.create_task(session.dispatch(Submit()))
            await asyncio.sleep(0)
            await _send(
                session,
                SelectOption(Q2, "search"),
                ToggleOther(Q3),
                ChangeOtherText(Q3, "Azure"),
                KeyPress(Key.ENTER),
            )
            sink.release()
            await pending

        asyncio.run(run())
        snap = session.snapshot()
        assert sink.responses == ["Pick one -> Red\nWhich features? -> Auth"]
        assert snap.mode is ViewMode.READY
        assert snap.preview == sink.responses[0]
        assert snap.answered_questions == {Q1, Q2}

    def test_new_batch_invalidates_pending_delivery(self, raw_batch):
        sink = GatedSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, SelectOption(Q1, "r"))
            pending = asyncio.create_task(session.submit())
            await asyncio.sleep(0)
            session.on_questions_received([copy.deepcopy(DEPLOY)])
            sink.release()
            return await pending

        assert asyncio.run(run()) is False
        snap = session.snapshot()
        assert snap.mode is ViewMode.EDITING
        assert snap.submitting is False
        assert [q.id for q in snap.questions] == [Q3]
        assert len(session.store) == 0

    def test_new_batch_resets_after_ready(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        asyncio.run(_send(session, SelectOption(Q1, "r"), Submit()))
        session.on_questions_received(raw_batch)
        snap = session.snapshot()
        assert snap.mode is ViewMode.EDITING
        assert snap.active_tab == Q1
        assert snap.answered_questions == frozenset()

    def test_invalid_new_batch_leaves_state_untouched(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        asyncio.run(_send(session, SelectOption(Q1, "r")))
        with pytest.raises(ConfigurationError):
            session.on_questions_received([{"question": "Bad", "options": []}])
        assert [q.id for q in session.questions] == [Q1, Q2, Q3]
        assert session.store.get(Q1).selected == ("r",)

    def test_required_question_blocks_submit(self, raw_batch):
        raw_batch[2] = _required(DEPLOY)
        sink = CollectingSink()
        session = create_session(raw_batch, sink)

        async def run():
            await _send(session, ChangeTab(REVIEW_TAB))
            snap = session.snapshot()
            assert snap.can_submit is False
            assert snap.unanswered_required == (Q3,)
            await _send(session, Submit(), KeyPress(Key.ENTER), Advance())
            assert sink.responses == []
            await _send(session, SelectOption(Q3, "aws"))
            assert session.snapshot().active_tab == REVIEW_TAB
            await _send(session, KeyPress(Key.ENTER))

        asyncio.run(run())
        assert sink.responses == ["Deploy where? -> AWS"]

    def test_empty_submission_allowed(self, raw_batch):
        sink = CollectingSink()
        session = create_session(raw_batch, sink)
        asyncio.run(_send(session, ChangeTab(REVIEW_TAB), Advance()))
        assert sink.responses == [""]
        assert session.mode is ViewMode.READY

    def test_on_change_receives_snapshots(self, raw_batch):
        seen = []
        session = create_session(raw_batch, CollectingSink(), on_change=seen.append)
        asyncio.run(_send(session, SelectOption(Q1, "r")))
        assert seen[-1].active_tab == Q2
        assert seen[-1].preview == "Pick one -> Red"


class TestMultiSessionKeyboard:
    def test_enter_picks_focused_option(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        asyncio.run(_send(session, KeyPress(Key.DOWN), KeyPress(Key.ENTER)))
        snap = session.snapshot()
        assert snap.selection(Q1).selected == ("b",)
        assert snap.active_tab == Q2
        assert snap.focused_index == 0

    def test_layout_has_other_and_next(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        snap = session.snapshot()
        assert snap.total_items == 4
        assert snap.layout.other_index == 2
        assert snap.layout.next_index == 3

    def test_activate_other_and_next(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())

        async def run():
            await _send(session, KeyPress(Key.DOWN), KeyPress(Key.DOWN), KeyPress(Key.SPACE))
            assert session.snapshot().selection(Q1).is_other_selected
            await _send(session, KeyPress(Key.DOWN), KeyPress(Key.ENTER))

        asyncio.run(run())
        assert session.snapshot().active_tab == Q2

    def test_text_field_focus_keeps_arrows_local(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())

        async def run():
            await _send(session, KeyPress(Key.DOWN, text_field_focused=True))
            assert session.snapshot().focused_index == 0
            await _send(session, KeyPress(Key.RIGHT, text_field_focused=True))
            assert session.snapshot().active_tab == Q1
            await _send(session, KeyPress(Key.TAB, text_field_focused=True))

        asyncio.run(run())
        assert session.snapshot().active_tab == Q2

    def test_arrow_tabs_from_review(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())

        async def run():
            await _send(session, CycleTab("prev"))
            snap = session.snapshot()
            assert snap.active_tab == REVIEW_TAB
            assert snap.keyboard_enabled is False
            await _send(session, KeyPress(Key.LEFT))

        asyncio.run(run())
        assert session.snapshot().active_tab == Q3

    def test_keyboard_disabled_in_ready(self, raw_batch):
        session = create_session(raw_batch, CollectingSink())
        asyncio.run(_send(session, SelectOption(Q1, "r"), Submit(), KeyPress(Key.DOWN)))
        snap = session.snapshot()
        assert snap.keyboard_enabled is False
        assert snap.focused_index == 0


# ===================================================================
# Single-question session
# ===================================================================

class TestSingleQuestionSession:
    def test_pick_submits_immediately(self, color_raw):
        sink = CollectingSink()
        session = create_session([color_raw], sink)
        asyncio.run(_send(session, SelectOption(Q1, "b")))
        assert sink.responses == ["Blue"]
        assert session.mode is ViewMode.READY

    def test_unknown_value_does_not_submit(self, color_raw):
        sink = CollectingSink()
        session = create_session([color_raw], sink)
        asyncio.run(_send(session, SelectOption(Q1, "purple")))
        assert sink.responses == []

    def test_multi_select_waits_for_submit(self):
        sink = CollectingSink()
        session = create_session([copy.deepcopy(FEATURES)], sink)

        async def run():
            await _send(session, SelectOption(Q2, "search"), SelectOption(Q2, "auth"))
            assert sink.responses == []
            await _send(session, Submit())

        asyncio.run(run())
        assert sink.responses == ["Search, Auth"]

    def test_other_needs_text_before_submit(self, color_raw):
        sink = CollectingSink()
        session = create_session([color_raw], sink)

        async def run():
            await _send(session, ToggleOther(Q1), Submit())
            assert sink.responses == []
            assert session.snapshot().unanswered_required == (Q1,)
            await _send(session, ChangeOtherText(Q1, " teal "), Submit())

        asyncio.run(run())
        assert sink.responses == ["Other: teal"]

    def test_keyboard_submit_control(self, color_raw):
        sink = CollectingSink()
        session = create_session([color_raw], sink)

        async def run():
            await _send(session, ToggleOther(Q1), ChangeOtherText(Q1, "teal"))
            await _send(session, KeyPress(Key.UP), KeyPress(Key.ENTER))

        asyncio.run(run())
        assert session.snapshot().layout.next_index == 3
        assert sink.responses == ["Other: teal"]

    def test_tabs_are_inert(self, color_raw):
        session = create_session([color_raw], CollectingSink())
        asyncio.run(_send(session, ChangeTab(REVIEW_TAB), CycleTab("next"), KeyPress(Key.RIGHT)))
        assert session.snapshot().active_tab == Q1

    def test_edit_then_pick_again(self, color_raw):
        sink = CollectingSink()
        session = create_session([color_raw], sink)
        asyncio.run(_send(session, SelectOption(Q1, "r"), Edit(), SelectOption(Q1, "b")))
        assert sink.responses == ["Red", "Blue"]

    def test_rejects_more_than_one_question(self):
        with pytest.raises(InvalidQuestionError):
            SingleQuestionSession(CollectingSink(), [copy.deepcopy(COLOR), copy.deepcopy(DEPLOY)])
