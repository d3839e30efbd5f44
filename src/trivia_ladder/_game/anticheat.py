# Area: Game
"""
trivia_ladder._game.anticheat — Anti-cheat decision functions
=============================================================

Deterministic decisions over immutable state. Nothing in this module
touches storage, timers or the transport: the engine applies the
returned decision.

Policy
------
* ``fast_streak_length`` consecutive correct answers, each faster than
  ``fast_answer_seconds``, switch the session to speed mode and put a
  challenge in front of the next question.
* A failed or timed-out challenge consumes an attempt. When a stage runs
  out of attempts the next stage of the escalation chain takes over; when
  the last stage runs out the session is terminated.
* Consecutive sessions that time out on question 1 raise a warning, then
  a temporary suspension. The streak decays after a quiet period.
* Each captcha zone shows one scheduled captcha, independent of answer
  speed: by chance at an earlier index of the zone, and for certain at
  its last index if it has not been shown yet.
* Answering the final question correctly always requires payout review.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .enums import ChallengeStage
from .models import QuestionRecord


class Action(Enum):
    """What the engine has to do after a decision."""
    NONE = "none"
    CHALLENGE = "challenge"      # show state.stage's challenge before the next question
    PASS = "pass"                # challenge cleared, deliver the pending question
    RETRY = "retry"              # same stage, new challenge
    ESCALATE = "escalate"        # next stage, new challenge
    TERMINATE = "terminate"      # cancel session and flag player


class Q1Action(Enum):
    TRACKED = "tracked"
    WARNING = "warning"
    SUSPENSION = "suspension"


@dataclass(frozen=True)
class AntiCheatPolicy:
    """Thresholds for the decision functions."""

    fast_answer_seconds: float = 2.5
    fast_streak_length: int = 3
    escalation_stages: Tuple[ChallengeStage, ...] = (
        ChallengeStage.SPEED, ChallengeStage.CAPTCHA, ChallengeStage.PHOTO,
    )
    stage_attempts: Dict[ChallengeStage, int] = field(default_factory=lambda: {
        ChallengeStage.SPEED: 2, ChallengeStage.CAPTCHA: 2, ChallengeStage.PHOTO: 2,
    })
    q1_warning_streak: int = 3
    q1_suspension_streak: int = 5
    q1_streak_reset_seconds: float = 24 * 3600.0
    suspension_seconds: float = 36 * 3600.0
    captcha_zones: Tuple[Tuple[int, ...], ...] = ((6, 8), (11, 12))
    captcha_zone_chance: float = 0.5

    @classmethod
    def from_settings(cls, settings) -> "AntiCheatPolicy":
        stages = tuple(ChallengeStage(s) for s in settings.escalation_stages)
        return cls(
            fast_answer_seconds=settings.fast_answer_seconds,
            fast_streak_length=settings.fast_streak_length,
            escalation_stages=stages,
            stage_attempts={
                s: settings.attempts_for(s.value)
                for s in ChallengeStage if s != ChallengeStage.NONE
            },
            q1_warning_streak=settings.q1_warning_streak,
            q1_suspension_streak=settings.q1_suspension_streak,
            q1_streak_reset_seconds=settings.q1_streak_reset_hours * 3600.0,
            suspension_seconds=settings.suspension_hours * 3600.0,
            captcha_zones=tuple(tuple(zone) for zone in settings.captcha_zones),
            captcha_zone_chance=settings.captcha_zone_chance,
        )

    def attempts_for(self, stage: ChallengeStage) -> int:
        return self.stage_attempts[stage]

    def stage_after(self, stage: ChallengeStage) -> Optional[ChallengeStage]:
        """Next stage of the chain; None after the last one or off the chain."""
        if stage not in self.escalation_stages:
            return None
        position = self.escalation_stages.index(stage)
        if position + 1 < len(self.escalation_stages):
            return self.escalation_stages[position + 1]
        return None


@dataclass(frozen=True)
class AntiCheatState:
    """
    Per-session counters.

    ``attempts`` counts failures at the current ``stage``. ``challenge``
    is the pending challenge payload while a stage is active.
    ``zones_shown`` holds the positions of captcha zones already used and
    ``penalty_mode`` marks a session played on the penalty timer.
    """

    fast_streak: int = 0
    speed_mode: bool = False
    stage: ChallengeStage = ChallengeStage.NONE
    attempts: int = 0
    challenge: Optional[Dict[str, Any]] = None
    zones_shown: Tuple[int, ...] = ()
    penalty_mode: bool = False

    @property
    def challenge_pending(self) -> bool:
        return self.stage != ChallengeStage.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fast_streak": self.fast_streak,
            "speed_mode": self.speed_mode,
            "stage": self.stage.value,
            "attempts": self.attempts,
            "challenge": self.challenge,
            "zones_shown": list(self.zones_shown),
            "penalty_mode": self.penalty_mode,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AntiCheatState":
        if not data:
            return cls()
        return cls(
            fast_streak=int(data.get("fast_streak", 0)),
            speed_mode=bool(data.get("speed_mode", False)),
            stage=ChallengeStage(data.get("stage", "none")),
            attempts=int(data.get("attempts", 0)),
            challenge=data.get("challenge"),
            zones_shown=tuple(data.get("zones_shown", ())),
            penalty_mode=bool(data.get("penalty_mode", False)),
        )


@dataclass(frozen=True)
class AnswerEvent:
    index: int
    correct: bool
    latency: Optional[float]


@dataclass(frozen=True)
class Decision:
    state: AntiCheatState
    action: Action
    speed_mode_activated: bool = False


@dataclass(frozen=True)
class Q1Decision:
    streak: int
    action: Q1Action
    suspended_until: Optional[float] = None


def evaluate_answer(state: AntiCheatState, event: AnswerEvent, policy: AntiCheatPolicy) -> Decision:
    """
    Update the fast-answer streak after an answer.

    Only a correct answer faster than the bound extends the streak.
    Reaching the streak length opens the first stage of the chain and
    resets the streak.
    """
    fast = (
        event.correct
        and event.latency is not None
        and event.latency < policy.fast_answer_seconds
    )
    if not fast:
        return Decision(replace(state, fast_streak=0), Action.NONE)

    streak = state.fast_streak + 1
    if streak < policy.fast_streak_length:
        return Decision(replace(state, fast_streak=streak), Action.NONE)

    activated = not state.speed_mode
    new_state = replace(
        state,
        fast_streak=0,
        speed_mode=True,
        stage=policy.escalation_stages[0],
        attempts=0,
        challenge=None,
    )
    return Decision(new_state, Action.CHALLENGE, speed_mode_activated=activated)


def evaluate_challenge(state: AntiCheatState, passed: bool, policy: AntiCheatPolicy) -> Decision:
    """
    Resolve one challenge attempt (a failed response or a timeout).

    Raises:
        ValueError: If no challenge is pending
    """
    if not state.challenge_pending:
        raise ValueError("no challenge pending")

    if passed:
        return Decision(
            replace(state, stage=ChallengeStage.NONE, attempts=0, challenge=None),
            Action.PASS,
        )

    attempts = state.attempts + 1
    if attempts < policy.attempts_for(state.stage):
        return Decision(replace(state, attempts=attempts, challenge=None), Action.RETRY)

    following = policy.stage_after(state.stage)
    if following is None:
        return Decision(replace(state, attempts=attempts, challenge=None), Action.TERMINATE)
    return Decision(
        replace(state, stage=following, attempts=0, challenge=None),
        Action.ESCALATE,
    )


def evaluate_question_gate(
    state: AntiCheatState, index: int, policy: AntiCheatPolicy, rng: random.Random
) -> Decision:
    """
    Decide whether a scheduled captcha comes before question ``index``.

    ``rng`` is only drawn from at an earlier index of an unused zone, so
    sessions that never reach a zone consume no randomness.
    """
    if state.challenge_pending:
        return Decision(state, Action.NONE)
    for position, zone in enumerate(policy.captcha_zones):
        if index not in zone or position in state.zones_shown:
            continue
        if index == max(zone) or rng.random() < policy.captcha_zone_chance:
            new_state = replace(
                state,
                stage=ChallengeStage.CAPTCHA,
                attempts=0,
                challenge=None,
                zones_shown=state.zones_shown + (position,),
            )
            return Decision(new_state, Action.CHALLENGE)
    return Decision(state, Action.NONE)


def evaluate_q1_timeout(
    streak: int, last_at: Optional[float], now: float, policy: AntiCheatPolicy
) -> Q1Decision:
    """
    Count one more session lost to a question-1 timeout.

    A streak whose last increment is older than the reset window starts
    over before counting.
    """
    if last_at is not None and now - last_at > policy.q1_streak_reset_seconds:
        streak = 0
    streak += 1
    if streak >= policy.q1_suspension_streak:
        return Q1Decision(streak, Q1Action.SUSPENSION, now + policy.suspension_seconds)
    if streak >= policy.q1_warning_streak:
        return Q1Decision(streak, Q1Action.WARNING)
    return Q1Decision(streak, Q1Action.TRACKED)


def evaluate_completion(
    records: Sequence[QuestionRecord], total_questions: int
) -> Optional[Dict[str, Any]]:
    """
    Review payload when the final question was answered correctly.

    Returns None if the session did not win the final question.
    """
    final = [r for r in records if r.index == total_questions and r.correct]
    if not final:
        return None
    lifelines = sorted({r.lifeline for r in records if r.lifeline})
    perfect = all(r.correct and r.outcome == "answered" for r in records) and not lifelines
    latencies = [r.latency for r in records if r.latency is not None]
    return {
        "question_index": total_questions,
        "perfect_record": perfect,
        "lifelines_used": lifelines,
        "fastest_latency": min(latencies) if latencies else None,
    }
