# Area: Game Tests
"""Per-player locks and serialization under real threads."""

import random
import threading
import time

import pytest

from trivia_ladder._game.player_locks import PlayerLocks
from trivia_ladder._shared.conversation_logger import ConversationLogger
from trivia_ladder.config import GameSettings
from trivia_ladder.demo_supplier import DemoQuestionSupplier, RecordingTransport
from trivia_ladder.runner import TriviaRunner


def _run(target, *args) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


@pytest.fixture
def live_runner(db_path):
    """Runner on wall clocks and threading.Timer with a very short question timer."""
    settings = GameSettings(
        database_path=db_path,
        question_timeout_seconds=0.05,
        captcha_zones=(),
    )
    return TriviaRunner(
        transport=RecordingTransport(),
        supplier=DemoQuestionSupplier(rng=random.Random(7)),
        settings=settings,
        rng=random.Random(3),
        conversation_logger=ConversationLogger(enabled=False),
        configure_logging=False,
    )


class TestPlayerLocks:
    """Test that locks isolate players and disappear when unused."""

    def test_same_thread_can_reenter(self):
        locks = PlayerLocks()

        with locks.hold("a"):
            with locks.hold("a"):
                assert locks.size() == 1

        assert locks.size() == 0

    def test_other_player_is_not_blocked(self):
        locks = PlayerLocks()
        held, release, done = threading.Event(), threading.Event(), threading.Event()

        def hold_a():
            with locks.hold("a"):
                held.set()
                release.wait(5)

        def use_b():
            with locks.hold("b"):
                done.set()

        holder = _run(hold_a)
        assert held.wait(5)
        worker = _run(use_b)
        try:
            assert done.wait(2)
        finally:
            release.set()
            holder.join(5)
            worker.join(5)

    def test_same_player_waits_for_holder(self):
        locks = PlayerLocks()
        held, release, entered = threading.Event(), threading.Event(), threading.Event()
        order = []

        def first():
            with locks.hold("a"):
                order.append("first")
                held.set()
                release.wait(5)
                order.append("first-out")

        def second():
            with locks.hold("a"):
                order.append("second")
                entered.set()

        holder = _run(first)
        assert held.wait(5)
        waiter = _run(second)

        assert not entered.wait(0.2)
        assert locks.size() == 1

        release.set()
        assert entered.wait(5)
        holder.join(5)
        waiter.join(5)
        assert order == ["first", "first-out", "second"]
        assert locks.size() == 0

    def test_locks_are_dropped_after_use(self):
        locks = PlayerLocks()

        for n in range(500):
            with locks.hold(f"player-{n}"):
                pass

        assert locks.size() == 0

    def test_lock_released_when_body_raises(self):
        locks = PlayerLocks()

        with pytest.raises(RuntimeError):
            with locks.hold("a"):
                raise RuntimeError("boom")

        assert locks.size() == 0
        acquired = threading.Event()

        def take_a():
            with locks.hold("a"):
                acquired.set()

        worker = _run(take_a)
        assert acquired.wait(2)
        worker.join(2)


class TestSerializedPlay:
    """Test that inbound messages and timer callbacks for one player never interleave."""

    def test_busy_player_does_not_block_another(self, live_runner):
        live_runner.register_player("a", "Ada")
        live_runner.register_player("b", "Bo")
        held, release = threading.Event(), threading.Event()
        a_done, b_done = threading.Event(), threading.Event()

        def hold_a():
            with live_runner.locks.hold("a"):
                held.set()
                release.wait(5)

        def say(player_id, done):
            live_runner.handle_text(player_id, "PLAY")
            done.set()

        holder = _run(hold_a)
        assert held.wait(5)
        for_a = _run(say, "a", a_done)
        for_b = _run(say, "b", b_done)
        try:
            assert b_done.wait(2)
            assert not a_done.is_set()
        finally:
            release.set()
        assert a_done.wait(5)
        for thread in (holder, for_a, for_b):
            thread.join(5)

    def test_answer_racing_question_timer_ends_session_once(self, live_runner):
        for n in range(8):
            player_id = f"racer-{n}"
            live_runner.register_player(player_id, "Racer")
            live_runner.handle_text(player_id, "PLAY")
            live_runner.handle_text(player_id, "1")
            live_runner.handle_text(player_id, "START")
            session = live_runner.engine.get_active_session(player_id)
            question = session.current_question
            wrong = next(k for k in "ABCD" if k != question["correct_option"])

            # Land the answer right around the 0.05 s deadline.
            time.sleep(0.04 + 0.005 * (n % 4))
            answer = _run(live_runner.handle_text, player_id, wrong)
            answer.join(5)
            time.sleep(0.15)

            types = [
                e["event_type"] for e in live_runner.get_session_trail(session.session_id)
            ]
            assert types.count("ANSWER_GIVEN") + types.count("QUESTION_TIMEOUT") == 1
            assert types.count("SESSION_ENDED") == 1
            assert not live_runner.sessions.get_session(session.session_id).is_live
            assert live_runner.engine.get_active_session(player_id) is None

        assert live_runner.locks.size() == 0
