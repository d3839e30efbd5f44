# Area: Game Tests
"""Tests for the anti-cheat decision functions."""

import random
from unittest.mock import MagicMock

import pytest

from trivia_ladder._game.anticheat import (
    Action,
    AntiCheatPolicy,
    AntiCheatState,
    AnswerEvent,
    Q1Action,
    evaluate_answer,
    evaluate_challenge,
    evaluate_completion,
    evaluate_q1_timeout,
    evaluate_question_gate,
)
from trivia_ladder._game.enums import ChallengeStage
from trivia_ladder._game.models import QuestionRecord
from trivia_ladder.config import GameSettings


POLICY = AntiCheatPolicy()
HOUR = 3600.0


def _fast(index, latency=1.0):
    return AnswerEvent(index=index, correct=True, latency=latency)


class TestEvaluateAnswer:
    """Fast-streak tracking."""

    def test_fast_correct_extends_streak(self):
        decision = evaluate_answer(AntiCheatState(), _fast(1), POLICY)

        assert decision.action == Action.NONE
        assert decision.state.fast_streak == 1

    def test_slow_answer_resets_streak(self):
        state = AntiCheatState(fast_streak=2)

        decision = evaluate_answer(state, _fast(3, latency=2.5), POLICY)

        assert decision.state.fast_streak == 0
        assert decision.action == Action.NONE

    def test_wrong_fast_answer_does_not_count(self):
        state = AntiCheatState(fast_streak=2)

        decision = evaluate_answer(state, AnswerEvent(3, False, 0.5), POLICY)

        assert decision.state.fast_streak == 0

    def test_missing_latency_does_not_count(self):
        decision = evaluate_answer(AntiCheatState(fast_streak=2), AnswerEvent(3, True, None), POLICY)

        assert decision.action == Action.NONE

    def test_third_fast_answer_opens_first_stage(self):
        """Test the streak length switches on speed mode and resets the streak."""
        state = AntiCheatState(fast_streak=2)

        decision = evaluate_answer(state, _fast(3), POLICY)

        assert decision.action == Action.CHALLENGE
        assert decision.speed_mode_activated is True
        assert decision.state.speed_mode is True
        assert decision.state.stage == ChallengeStage.SPEED
        assert decision.state.fast_streak == 0
        assert decision.state.attempts == 0

    def test_reactivation_is_not_reported_twice(self):
        state = AntiCheatState(fast_streak=2, speed_mode=True)

        decision = evaluate_answer(state, _fast(6), POLICY)

        assert decision.action == Action.CHALLENGE
        assert decision.speed_mode_activated is False


class TestEvaluateChallenge:
    """Attempts and escalation."""

    def test_pass_clears_stage(self):
        state = AntiCheatState(speed_mode=True, stage=ChallengeStage.SPEED, challenge={"answers": ["7"]})

        decision = evaluate_challenge(state, True, POLICY)

        assert decision.action == Action.PASS
        assert decision.state.stage == ChallengeStage.NONE
        assert decision.state.challenge is None
        assert decision.state.speed_mode is True

    def test_first_failure_retries(self):
        state = AntiCheatState(stage=ChallengeStage.SPEED)

        decision = evaluate_challenge(state, False, POLICY)

        assert decision.action == Action.RETRY
        assert decision.state.attempts == 1
        assert decision.state.stage == ChallengeStage.SPEED

    def test_exhausted_stage_escalates(self):
        state = AntiCheatState(stage=ChallengeStage.SPEED, attempts=1)

        decision = evaluate_challenge(state, False, POLICY)

        assert decision.action == Action.ESCALATE
        assert decision.state.stage == ChallengeStage.CAPTCHA
        assert decision.state.attempts == 0

    def test_last_stage_terminates(self):
        state = AntiCheatState(stage=ChallengeStage.PHOTO, attempts=1)

        decision = evaluate_challenge(state, False, POLICY)

        assert decision.action == Action.TERMINATE

    def test_single_stage_chain(self):
        policy = AntiCheatPolicy.from_settings(GameSettings(escalation_stages=("speed",)))
        state = AntiCheatState(stage=ChallengeStage.SPEED, attempts=1)

        assert evaluate_challenge(state, False, policy).action == Action.TERMINATE

    def test_nothing_pending_raises(self):
        with pytest.raises(ValueError):
            evaluate_challenge(AntiCheatState(), False, POLICY)


class TestQ1Timeout:
    """Warning and suspension thresholds."""

    def test_counts_up(self):
        assert evaluate_q1_timeout(0, None, 1000.0, POLICY).action == Q1Action.TRACKED
        assert evaluate_q1_timeout(1, 900.0, 1000.0, POLICY).streak == 2

    def test_warning_at_three(self):
        decision = evaluate_q1_timeout(2, 900.0, 1000.0, POLICY)

        assert decision.streak == 3
        assert decision.action == Q1Action.WARNING

    def test_suspension_at_five(self):
        decision = evaluate_q1_timeout(4, 900.0, 1000.0, POLICY)

        assert decision.action == Q1Action.SUSPENSION
        assert decision.suspended_until == 1000.0 + 36 * HOUR

    def test_old_streak_decays(self):
        """Test a streak idle for longer than the reset window starts over."""
        decision = evaluate_q1_timeout(4, 0.0, 25 * HOUR, POLICY)

        assert decision.streak == 1
        assert decision.action == Q1Action.TRACKED


class TestEvaluateCompletion:

    def _records(self, total=15, **overrides):
        records = [
            QuestionRecord(index=i, question_id=f"q{i}", chosen="A", correct=True, latency=4.0 + i)
            for i in range(1, total + 1)
        ]
        for key, value in overrides.items():
            setattr(records[0], key, value)
        return records

    def test_no_review_without_final_correct(self):
        records = self._records()[:14]

        assert evaluate_completion(records, 15) is None

    def test_perfect_record(self):
        review = evaluate_completion(self._records(), 15)

        assert review["question_index"] == 15
        assert review["perfect_record"] is True
        assert review["lifelines_used"] == []
        assert review["fastest_latency"] == 5.0

    def test_lifeline_breaks_perfect_record(self):
        review = evaluate_completion(self._records(lifeline="fifty_fifty"), 15)

        assert review["perfect_record"] is False
        assert review["lifelines_used"] == ["fifty_fifty"]


class TestAntiCheatState:

    def test_dict_round_trip_preserves_pending_challenge(self):
        state = AntiCheatState(
            fast_streak=1, speed_mode=True, stage=ChallengeStage.CAPTCHA, attempts=1,
            challenge={"stage": "captcha", "kind": "reverse", "prompt": "p", "answers": ["YALP"]},
            zones_shown=(0,), penalty_mode=True,
        )

        assert AntiCheatState.from_dict(state.to_dict()) == state
        assert AntiCheatState.from_dict(None) == AntiCheatState()

    def test_streak_keeps_zones_and_penalty_mode(self):
        state = AntiCheatState(fast_streak=2, zones_shown=(0,), penalty_mode=True)

        decision = evaluate_answer(state, _fast(3), POLICY)

        assert decision.action == Action.CHALLENGE
        assert decision.state.zones_shown == (0,)
        assert decision.state.penalty_mode is True


class _Roll:
    """Stand-in rng whose random() returns a fixed value."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.value


class TestEvaluateQuestionGate:
    """Scheduled captcha zones (Q6/Q8 and Q11/Q12 by default)."""

    def test_outside_zones_draws_nothing(self):
        rng = MagicMock()

        for index in (1, 5, 7, 9, 10, 13, 15):
            assert evaluate_question_gate(AntiCheatState(), index, POLICY, rng).action == Action.NONE

        rng.random.assert_not_called()

    def test_first_index_of_zone_is_a_coin_flip(self):
        assert evaluate_question_gate(AntiCheatState(), 6, POLICY, _Roll(0.9)).action == Action.NONE

        decision = evaluate_question_gate(AntiCheatState(), 6, POLICY, _Roll(0.1))

        assert decision.action == Action.CHALLENGE
        assert decision.state.stage == ChallengeStage.CAPTCHA
        assert decision.state.zones_shown == (0,)

    def test_last_index_of_zone_is_certain(self):
        rng = _Roll(0.99)

        decision = evaluate_question_gate(AntiCheatState(), 8, POLICY, rng)

        assert decision.action == Action.CHALLENGE
        assert decision.state.zones_shown == (0,)
        assert rng.calls == 0

    def test_second_zone(self):
        state = AntiCheatState(zones_shown=(0,))

        assert evaluate_question_gate(state, 11, POLICY, _Roll(0.9)).action == Action.NONE
        decision = evaluate_question_gate(state, 12, POLICY, _Roll(0.9))

        assert decision.action == Action.CHALLENGE
        assert decision.state.zones_shown == (0, 1)

    def test_used_zone_never_shows_again(self):
        state = AntiCheatState(zones_shown=(0, 1))

        for index in (6, 8, 11, 12):
            assert evaluate_question_gate(state, index, POLICY, _Roll(0.0)).action == Action.NONE

    def test_pending_challenge_wins(self):
        state = AntiCheatState(stage=ChallengeStage.SPEED)

        decision = evaluate_question_gate(state, 8, POLICY, _Roll(0.0))

        assert decision.action == Action.NONE
        assert decision.state == state

    def test_keeps_speed_mode_and_streak(self):
        state = AntiCheatState(fast_streak=2, speed_mode=True, penalty_mode=True)

        decision = evaluate_question_gate(state, 8, POLICY, random.Random(0))

        assert decision.state.speed_mode is True
        assert decision.state.fast_streak == 2
        assert decision.state.penalty_mode is True

    def test_zones_from_settings(self):
        policy = AntiCheatPolicy.from_settings(GameSettings(captcha_zones=((3,),)))

        assert evaluate_question_gate(AntiCheatState(), 3, policy, _Roll(0.9)).action == Action.CHALLENGE
        assert evaluate_question_gate(AntiCheatState(), 8, policy, _Roll(0.0)).action == Action.NONE

    def test_captcha_off_the_chain_terminates_when_exhausted(self):
        policy = AntiCheatPolicy.from_settings(GameSettings(escalation_stages=("speed",)))
        state = AntiCheatState(stage=ChallengeStage.CAPTCHA, attempts=1)

        assert policy.stage_after(ChallengeStage.CAPTCHA) is None
        assert evaluate_challenge(state, False, policy).action == Action.TERMINATE
