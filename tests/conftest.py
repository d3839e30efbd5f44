# Area: Test Fixtures
"""Shared fixtures: manual clock, hand-fired timers and a game driver."""

import os
import random
import tempfile

import pytest

from trivia_ladder._game.enums import TimerPurpose
from trivia_ladder._shared.conversation_logger import ConversationLogger
from trivia_ladder.config import GameSettings
from trivia_ladder.demo_supplier import DemoQuestionSupplier, RecordingTransport
from trivia_ladder.runner import TriviaRunner


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, seconds, function, args):
        self.seconds = seconds
        self.function = function
        self.args = args
        self.started = False
        self.cancelled = False

    @property
    def purpose(self) -> TimerPurpose:
        return self.args[1]

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, seconds, function, args):
        timer = FakeTimer(seconds, function, args)
        self.timers.append(timer)
        return timer

    def latest(self, purpose: TimerPurpose) -> FakeTimer:
        matching = [t for t in self.timers if t.purpose == purpose]
        assert matching, f"no {purpose.value} timer was armed"
        return matching[-1]

    def live(self, purpose: TimerPurpose = None):
        return [
            t for t in self.timers
            if t.started and not t.cancelled and (purpose is None or t.purpose == purpose)
        ]


class GameDriver:
    """Plays one player through a runner built on fakes."""

    def __init__(self, runner: TriviaRunner, clock: ManualClock, timers: FakeTimerFactory,
                 transport: RecordingTransport, player_id: str = "p1"):
        self.runner = runner
        self.clock = clock
        self.timers = timers
        self.transport = transport
        self.player_id = player_id

    @property
    def engine(self):
        return self.runner.engine

    @property
    def session(self):
        return self.engine.get_active_session(self.player_id)

    def say(self, text: str, message_id: str = None) -> None:
        self.runner.handle_text(self.player_id, text, message_id)

    def start(self, mode_choice: str = "1") -> str:
        """Menu → mode → START; returns the session id."""
        self.say("PLAY")
        self.say(mode_choice)
        session = self.session
        assert session is not None, self.transport.last_text(self.player_id)
        self.say("START")
        return session.session_id

    def answer(self, correct: bool = True, latency: float = 5.0, message_id: str = None) -> str:
        """Answer the current question after ``latency`` seconds."""
        session = self.session
        question = session.current_question
        assert question is not None, "no question delivered"
        if correct:
            letter = question["correct_option"]
        else:
            letter = next(
                k for k in session.remaining_options if k != question["correct_option"]
            )
        self.clock.advance(latency)
        self.say(letter, message_id)
        return letter

    def answer_many(self, count: int, latency: float = 5.0) -> None:
        for _ in range(count):
            self.answer(True, latency)

    def challenge(self):
        session = self.session
        return self.engine.get_anticheat_state(session.session_id).challenge

    def pass_challenge(self) -> None:
        self.say(self.challenge()["answers"][0])

    def fire(self, purpose: TimerPurpose) -> None:
        self.timers.latest(purpose).fire()

    def trail_types(self, session_id: str):
        return [e["event_type"] for e in self.runner.get_session_trail(session_id)]

    def last_text(self) -> str:
        return self.transport.last_text(self.player_id)


@pytest.fixture
def db_path():
    """Create temporary database for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    os.unlink(path)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def supplier():
    return DemoQuestionSupplier(rng=random.Random(7))


@pytest.fixture
def make_runner(db_path, clock, timer_factory, transport, supplier):
    """Factory: build a TriviaRunner on fakes with optional settings overrides."""

    def _make(supplier_override=None, **overrides) -> TriviaRunner:
        # Scheduled captchas only where a test asks for them.
        overrides.setdefault("captcha_zones", ())
        settings = GameSettings(database_path=db_path, **overrides)
        return TriviaRunner(
            transport=transport,
            supplier=supplier_override or supplier,
            settings=settings,
            clock=clock,
            timer_factory=timer_factory,
            store_clock=clock,
            rng=random.Random(3),
            conversation_logger=ConversationLogger(enabled=False),
            configure_logging=False,
        )

    return _make


@pytest.fixture
def make_driver(make_runner, clock, timer_factory, transport):
    """Factory: runner plus a registered player wrapped in a GameDriver."""

    def _make(player_id: str = "p1", supplier_override=None, **overrides) -> GameDriver:
        runner = make_runner(supplier_override=supplier_override, **overrides)
        runner.register_player(player_id, "Ada")
        return GameDriver(runner, clock, timer_factory, transport, player_id)

    return _make


@pytest.fixture
def driver(make_driver):
    return make_driver()
