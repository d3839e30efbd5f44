# Area: Game
"""
trivia_ladder._game.engine — Game session engine
================================================

Turns one player's inbound messages and timer fires into question
delivery, scoring, lifelines, challenges and terminal outcomes.

Every entry point takes the player's lock, reloads the durable session
and commits through ``SessionRepository.save_live``, which only writes a
row that is still ready/active. Timer callbacks additionally check that
their marker token is still current and that the session is still on
the question (or challenge attempt) they were armed for. Whichever path
commits first wins; the other finds nothing to do.

Effects of a transition happen in this order: commit the session row,
then audit, player stats and outbound messages. A failed commit leaves
the previous durable state untouched.
"""

from __future__ import annotations

import functools
import logging
import random
import time
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from . import messages
from .anticheat import (
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
from .audit import AuditRecorder
from .challenges import check_response, generate_challenge, is_photo
from .enums import (
    AuditEventType,
    ChallengeStage,
    EndReason,
    GameMode,
    Lifeline,
    SessionEvent,
    SessionStatus,
    TimerPurpose,
)
from .ladder import PrizeLadder
from .models import GameSession, QuestionRecord
from .player_locks import PlayerLocks
from .state_machine import try_transition
from .timers import TimerScheduler
from ..callbacks import MessageTransport, QuestionSupplier
from ..config import GameSettings
from ..errors import (
    CollaboratorError,
    InvalidAnswerError,
    LifelineUnavailableError,
    PlayerSuspendedError,
    QuestionSupplierError,
    SessionClosedError,
    SessionConflictError,
    UnknownPlayerError,
    UserInputError,
    WrongPhaseError,
)
from .._shared.conversation_logger import ConversationLogger, get_conversation_logger
from .._shared.logging_config import log_game_error
from .._store.ephemeral import EphemeralStore, conversation_key
from .._store.repo_players import PlayerRepository
from .._store.repo_sessions import SessionRepository

logger = logging.getLogger("trivia_ladder.engine")

ANSWER_LETTERS = ("A", "B", "C", "D")
FIFTY_FIFTY_TOKENS = ("50", "5050", "50:50", "50/50", "FIFTY")
SKIP_TOKENS = ("SKIP",)

# Anti-cheat counters outlive the session timer by this margin.
ANTICHEAT_TTL_MARGIN_SECONDS = 600.0


class QuestionModel(BaseModel):
    """Validated shape of ``QuestionSupplier.next_question()`` output."""

    model_config = ConfigDict(extra="ignore")

    id: str
    text: str
    options: Dict[str, str]
    correct_option: Literal["A", "B", "C", "D"]
    category: str = ""
    fun_fact: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("options")
    @classmethod
    def _four_options(cls, value: Dict[str, str]) -> Dict[str, str]:
        if set(value) != set(ANSWER_LETTERS):
            raise ValueError(f"options must be exactly {ANSWER_LETTERS}, got {sorted(value)}")
        if not all(str(v).strip() for v in value.values()):
            raise ValueError("options must not be blank")
        return value

    @field_validator("correct_option", mode="before")
    @classmethod
    def _upper_letter(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class GameSessionEngine:
    """
    The session state machine.

    Args:
        settings: Validated game settings
        sessions: Durable session storage
        players: Durable player storage
        audit: Best-effort audit recorder
        store: Ephemeral store for anti-cheat counters and timer markers
        transport: Outbound message channel
        supplier: Question source
        timers: Timer scheduler
        locks: Per-player locks shared with the router
        clock: Wall clock (seconds)
        rng: Randomness for 50:50 and challenges
        conversation_logger: One-line traffic logger
    """

    def __init__(
        self,
        settings: GameSettings,
        sessions: SessionRepository,
        players: PlayerRepository,
        audit: AuditRecorder,
        store: EphemeralStore,
        transport: MessageTransport,
        supplier: QuestionSupplier,
        timers: TimerScheduler,
        locks: PlayerLocks,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        conversation_logger: Optional[ConversationLogger] = None,
    ):
        self.settings = settings
        self.ladder = PrizeLadder.from_settings(settings)
        self.policy = AntiCheatPolicy.from_settings(settings)
        self._sessions = sessions
        self._players = players
        self._audit = audit
        self._store = store
        self._transport = transport
        self._supplier = supplier
        self._timers = timers
        self._locks = locks
        self._clock = clock
        self._rng = rng or random.Random()
        self._conv = conversation_logger or get_conversation_logger()

    # ══════════════════════════════════════════════════════════════
    # Public API
    # ══════════════════════════════════════════════════════════════

    def start_session(self, player_id: str, mode, tournament_id: Optional[str] = None) -> str:
        """
        Create a ready session and ask the player for the start token.

        Returns:
            The new session id

        Raises:
            UnknownPlayerError: Player was never registered
            PlayerSuspendedError: Player is temporarily suspended
            SessionConflictError: Player already has a ready/active session
            ValueError: Tournament mode without a tournament id
        """
        mode = GameMode(mode)
        if mode == GameMode.TOURNAMENT and not tournament_id:
            raise ValueError("tournament mode requires a tournament_id")

        with self._locks.hold(player_id):
            player = self._players.get_player(player_id)
            if player is None:
                raise UnknownPlayerError(player_id)

            now = self._clock()
            practice_allowed = (
                mode == GameMode.PRACTICE and self.settings.allow_practice_when_suspended
            )
            if player.is_suspended(now) and not practice_allowed:
                raise PlayerSuspendedError(player_id, player.suspended_until, player.suspension_reason)

            existing = self._sessions.get_live_session(player_id)
            if existing is not None:
                raise SessionConflictError(player_id, existing.session_id)

            session = GameSession(
                session_id=uuid.uuid4().hex,
                player_id=player_id,
                mode=mode,
                tournament_id=tournament_id if mode == GameMode.TOURNAMENT else None,
                status=SessionStatus.READY,
                started_at=now,
                last_activity_at=now,
            )
            self._sessions.create_session(session)
            penalty_mode = player.penalty_games_remaining > 0 and not player.is_suspended(now)
            ac = AntiCheatState(penalty_mode=penalty_mode)
            if penalty_mode:
                self._save_anticheat(session.session_id, ac)
                logger.info(
                    f"[{session.session_id}] Penalty timer on "
                    f"({player.penalty_games_remaining} games left)"
                )
            self._timers.arm(
                session.session_id, TimerPurpose.SESSION,
                self.settings.session_timeout_seconds, self._on_session_timer,
            )
            self._audit.record(
                AuditEventType.SESSION_STARTED, player_id, session.session_id,
                {"mode": mode.value, "tournament_id": session.tournament_id},
            )
            self._conv.log_decision(session.session_id, "SESSION_READY", mode.value)
            self._send(
                player_id,
                messages.session_ready(
                    mode.value,
                    self.settings.start_token,
                    int(self.settings.session_timeout_seconds // 60),
                    int(self._question_timeout_for(ac)),
                ),
                self.settings.session_timeout_seconds,
            )
            if mode == GameMode.PRACTICE:
                self._send(player_id, messages.practice_note())
            logger.info(f"[{session.session_id}] Session ready for {player_id} ({mode.value})")
            return session.session_id

    def handle_input(self, player_id: str, raw_text: str) -> None:
        """
        Apply one inbound text to the player's live session.

        All effects are messages to the player. Input errors become
        guidance; collaborator failures leave the session at its last
        durable state and ask the player to retry.
        """
        with self._locks.hold(player_id):
            try:
                session = self._sessions.get_live_session(player_id)
                if session is None:
                    logger.info(f"No live session for {player_id}; input ignored")
                    return
                try:
                    self._dispatch_text(session, raw_text)
                except UserInputError as e:
                    logger.info(f"[{session.session_id}] {e.error_type}: {e.reason}")
                    self._send(player_id, self._guidance(e, session))
            except SessionClosedError as e:
                logger.info(f"Input lost the race: {e}")
            except CollaboratorError as e:
                log_game_error(e, player_id)
                self._send(player_id, messages.retry_later())

    def handle_image(self, player_id: str, media_ref: str) -> None:
        """Apply an inbound image; it only matters while a photo check is pending."""
        with self._locks.hold(player_id):
            try:
                session = self._sessions.get_live_session(player_id)
                if session is None or session.status != SessionStatus.ACTIVE:
                    logger.info(f"Image from {player_id} with no active session ignored")
                    return
                ac = self._load_anticheat(session.session_id)
                if not is_photo(ac.challenge):
                    self._send(player_id, messages.invalid_answer(session.remaining_options or ANSWER_LETTERS))
                    return
                self._resolve_challenge(session, ac, passed=True, media_ref=media_ref)
            except SessionClosedError as e:
                logger.info(f"Image lost the race: {e}")
            except CollaboratorError as e:
                log_game_error(e, player_id)
                self._send(player_id, messages.retry_later())

    def get_active_session(self, player_id: str) -> Optional[GameSession]:
        return self._sessions.get_live_session(player_id)

    def cancel_session(self, player_id: str, reason: EndReason = EndReason.PLAYER_RESET) -> bool:
        """
        Cancel the player's live session.

        Returns:
            True if a session was cancelled, False if none was live
        """
        with self._locks.hold(player_id):
            session = self._sessions.get_live_session(player_id)
            if session is None:
                return False
            try:
                self._cancel(session, reason)
            except SessionClosedError:
                return False
            return True

    def cancel_session_by_id(self, session_id: str, reason: EndReason = EndReason.ADMIN_CANCEL) -> bool:
        """Administrative cancellation. Returns False if the session is not live."""
        session = self._sessions.get_session(session_id)
        if session is None:
            return False
        with self._locks.hold(session.player_id):
            session = self._sessions.get_session(session_id)
            if session is None or not session.is_live:
                return False
            try:
                self._cancel(session, reason)
            except SessionClosedError:
                return False
            return True

    def get_session_trail(self, session_id: str):
        return self._audit.get_session_trail(session_id)

    def get_player_trail(self, player_id: str, start: Optional[float] = None, end: Optional[float] = None):
        return self._audit.get_player_trail(player_id, start, end)

    def get_anticheat_state(self, session_id: str) -> AntiCheatState:
        return self._load_anticheat(session_id)

    # ══════════════════════════════════════════════════════════════
    # Text dispatch
    # ══════════════════════════════════════════════════════════════

    def _dispatch_text(self, session: GameSession, raw_text: str) -> None:
        text = " ".join(raw_text.strip().upper().split())

        if session.status == SessionStatus.READY:
            if text != self.settings.start_token:
                raise WrongPhaseError(session.player_id, raw_text, "awaiting start token")
            self._begin(session)
            return

        ac = self._load_anticheat(session.session_id)
        if ac.challenge_pending:
            if is_photo(ac.challenge):
                self._send(session.player_id, messages.photo_reminder())
                return
            if ac.challenge is None:
                # Challenge decided but never shown (delivery failed); show it now.
                self._issue_challenge(session, ac)
                return
            self._resolve_challenge(session, ac, passed=check_response(ac.challenge, text))
            return

        if session.awaiting_delivery:
            self._deliver_question(session, ac)
            return

        if text in FIFTY_FIFTY_TOKENS:
            self._apply_fifty_fifty(session, raw_text)
        elif text in SKIP_TOKENS:
            self._apply_skip(session, raw_text, ac)
        elif text in ANSWER_LETTERS:
            self._answer(session, text, raw_text, ac)
        else:
            raise InvalidAnswerError(session.player_id, raw_text, "not an option letter or lifeline")

    def _guidance(self, error: UserInputError, session: GameSession) -> str:
        if isinstance(error, LifelineUnavailableError):
            return messages.lifeline_unavailable(error.lifeline)
        if isinstance(error, WrongPhaseError) and session.status == SessionStatus.READY:
            return messages.awaiting_start(self.settings.start_token)
        if isinstance(error, WrongPhaseError):
            return messages.waiting_for_question()
        return messages.invalid_answer(session.remaining_options or ANSWER_LETTERS)

    # ══════════════════════════════════════════════════════════════
    # Transitions
    # ══════════════════════════════════════════════════════════════

    def _begin(self, session: GameSession) -> None:
        self._transition(session, SessionEvent.START)
        self._commit(session)
        self._audit.record(AuditEventType.GAME_STARTED, session.player_id, session.session_id, {})
        self._conv.log_decision(session.session_id, "GAME_STARTED")
        self._deliver_question(session, self._load_anticheat(session.session_id))

    def _deliver_question(self, session: GameSession, ac: AntiCheatState, gate: bool = True) -> None:
        """
        Fetch, persist and send the question at ``current_index``.

        With ``gate`` set, a scheduled captcha due at this index is shown
        first and the question follows once it is passed.
        """
        index = session.current_index
        if gate:
            decision = evaluate_question_gate(ac, index, self.policy, self._rng)
            if decision.action == Action.CHALLENGE:
                self._save_anticheat(session.session_id, decision.state)
                self._conv.log_decision(session.session_id, "CAPTCHA_ZONE", f"before Q{index}")
                self._issue_challenge(session, decision.state, trigger="captcha_zone")
                return
        question = self._fetch_question(index, session.player_id)
        now = self._clock()

        session.current_question = question
        session.removed_options = []
        session.question_asked_at = now
        self._commit(session)

        timeout = self._question_timeout_for(ac)
        self._timers.arm(
            session.session_id, TimerPurpose.QUESTION, timeout,
            functools.partial(self._on_question_timer, index),
        )
        prize = self.ladder.prize_at(index)
        self._audit.record(
            AuditEventType.QUESTION_ASKED, session.player_id, session.session_id,
            {
                "index": index,
                "question_id": question["id"],
                "category": question.get("category"),
                "prize_at_stake": prize,
                "safe": self.ladder.is_safe(index),
                "timeout_seconds": timeout,
            },
        )
        self._send(
            session.player_id,
            messages.format_question(
                index, len(self.ladder), question, session.remaining_options, prize,
                self.ladder.is_safe(index), int(timeout), self._lifelines_left(session),
                self.settings.currency_symbol,
            ),
            timeout,
        )

    def _answer(self, session: GameSession, letter: str, raw_text: str, ac: AntiCheatState) -> None:
        if letter in session.removed_options:
            raise InvalidAnswerError(session.player_id, raw_text, "option removed by 50:50")

        now = self._clock()
        index = session.current_index
        question = session.current_question
        correct = letter == question["correct_option"]
        latency = round(now - session.question_asked_at, 3)
        session.records.append(QuestionRecord(
            index=index,
            question_id=question["id"],
            chosen=letter,
            correct=correct,
            latency=latency,
            lifeline=Lifeline.FIFTY_FIFTY.value if session.removed_options else None,
        ))
        decision = evaluate_answer(ac, AnswerEvent(index, correct, latency), self.policy)
        answer_payload = {
            "index": index,
            "question_id": question["id"],
            "chosen": letter,
            "correct": correct,
            "latency": latency,
        }

        if not correct:
            self._transition(session, SessionEvent.ANSWER_WRONG)
            self._end(session, EndReason.WRONG_ANSWER, session.safe_floor)
            self._audit.record(AuditEventType.ANSWER_GIVEN, session.player_id, session.session_id, answer_payload)
            self._record_exposure(question["id"], False)
            self._after_end(session, AuditEventType.SESSION_ENDED)
            self._send(
                session.player_id,
                messages.wrong_answer(
                    question["correct_option"],
                    question["options"][question["correct_option"]],
                    session.final_score,
                    self.settings.currency_symbol,
                ),
            )
            return

        prize = self.ladder.prize_at(index)
        session.score = max(session.score, prize)
        safe = self.ladder.is_safe(index)
        if safe:
            session.safe_floor = max(session.safe_floor, prize)

        if self.ladder.is_final(index):
            self._transition(session, SessionEvent.FINAL_CORRECT)
            session.review_required = True
            self._end(session, EndReason.MAX_WIN, session.score)
            self._audit.record(AuditEventType.ANSWER_GIVEN, session.player_id, session.session_id, answer_payload)
            self._record_exposure(question["id"], True)
            self._reset_q1_streak(session, index)
            review = evaluate_completion(session.records, len(self.ladder))
            if review is not None:
                review["prize"] = session.score
                self._audit.record(
                    AuditEventType.PERFECT_GAME_FLAGGED, session.player_id, session.session_id, review,
                )
                self._conv.log_decision(session.session_id, "PERFECT_GAME_FLAGGED", f"prize={session.score}")
            self._after_end(session, AuditEventType.SESSION_ENDED)
            self._send(session.player_id, messages.max_win(session.score, self.settings.currency_symbol))
            return

        self._transition(session, SessionEvent.ANSWER_CORRECT)
        fun_fact = question.get("fun_fact")
        session.current_index += 1
        session.clear_current_question()
        self._commit(session)
        self._timers.disarm(session.session_id, TimerPurpose.QUESTION)
        self._save_anticheat(session.session_id, decision.state)

        self._audit.record(AuditEventType.ANSWER_GIVEN, session.player_id, session.session_id, answer_payload)
        self._record_exposure(question["id"], True)
        self._reset_q1_streak(session, index)
        self._send(
            session.player_id,
            messages.correct_answer(session.score, self.settings.currency_symbol, safe, fun_fact),
        )

        if decision.action == Action.CHALLENGE:
            if decision.speed_mode_activated:
                self._audit.record(
                    AuditEventType.SPEED_MODE_ACTIVATED, session.player_id, session.session_id,
                    {"index": index, "streak": self.policy.fast_streak_length},
                )
                self._conv.log_decision(session.session_id, "SPEED_MODE_ACTIVATED", f"after Q{index}")
            self._issue_challenge(session, decision.state, trigger="fast_streak")
            return
        self._deliver_question(session, decision.state)

    def _apply_fifty_fifty(self, session: GameSession, raw_text: str) -> None:
        if session.fifty_fifty_used:
            raise LifelineUnavailableError(
                session.player_id, raw_text, Lifeline.FIFTY_FIFTY.value, "already used"
            )
        question = session.current_question
        wrong = [k for k in sorted(question["options"]) if k != question["correct_option"]]
        session.removed_options = sorted(self._rng.sample(wrong, 2))
        session.fifty_fifty_used = True
        self._commit(session)

        self._audit.record(
            AuditEventType.LIFELINE_USED, session.player_id, session.session_id,
            {
                "lifeline": Lifeline.FIFTY_FIFTY.value,
                "index": session.current_index,
                "removed": session.removed_options,
            },
        )
        deadline = self._timers.deadline(session.session_id, TimerPurpose.QUESTION)
        remaining = max(1, int(deadline - self._clock())) if deadline else 1
        index = session.current_index
        self._send(
            session.player_id,
            messages.format_question(
                index, len(self.ladder), question, session.remaining_options,
                self.ladder.prize_at(index), self.ladder.is_safe(index), remaining,
                self._lifelines_left(session), self.settings.currency_symbol,
            ),
            remaining,
        )

    def _apply_skip(self, session: GameSession, raw_text: str, ac: AntiCheatState) -> None:
        if session.skip_used:
            raise LifelineUnavailableError(session.player_id, raw_text, Lifeline.SKIP.value, "already used")
        if self.ladder.is_final(session.current_index):
            raise LifelineUnavailableError(
                session.player_id, raw_text, Lifeline.SKIP.value, "final question cannot be skipped"
            )

        index = session.current_index
        question = session.current_question
        session.records.append(QuestionRecord(
            index=index,
            question_id=question["id"],
            lifeline=Lifeline.SKIP.value,
            outcome="skipped",
        ))
        session.skip_used = True
        self._transition(session, SessionEvent.SKIP)
        session.current_index += 1
        session.clear_current_question()
        self._commit(session)
        self._timers.disarm(session.session_id, TimerPurpose.QUESTION)

        self._audit.record(
            AuditEventType.LIFELINE_USED, session.player_id, session.session_id,
            {"lifeline": Lifeline.SKIP.value, "index": index, "question_id": question["id"]},
        )
        self._send(session.player_id, messages.skip_applied())
        self._deliver_question(session, ac)

    # ══════════════════════════════════════════════════════════════
    # Challenges
    # ══════════════════════════════════════════════════════════════

    def _issue_challenge(
        self, session: GameSession, ac: AntiCheatState, trigger: Optional[str] = None
    ) -> None:
        challenge = generate_challenge(ac.stage, self._rng)
        ac = replace(ac, challenge=challenge)
        self._save_anticheat(session.session_id, ac)

        seconds = self.settings.timeout_for_challenge(ac.stage.value)
        self._timers.arm(
            session.session_id, TimerPurpose.CHALLENGE, seconds,
            functools.partial(self._on_challenge_timer, ac.stage, ac.attempts),
        )
        payload: Dict[str, Any] = {
            "stage": ac.stage.value,
            "kind": challenge["kind"],
            "attempt": ac.attempts + 1,
            "index": session.current_index,
        }
        if trigger is not None:
            payload["trigger"] = trigger
        self._audit.record(AuditEventType.CHALLENGE_SHOWN, session.player_id, session.session_id, payload)
        self._conv.log_decision(session.session_id, "CHALLENGE_SHOWN", f"{ac.stage.value}#{ac.attempts + 1}")
        self._send(session.player_id, messages.challenge_prompt(challenge, int(seconds)), seconds)

    def _resolve_challenge(
        self,
        session: GameSession,
        ac: AntiCheatState,
        passed: bool,
        timed_out: bool = False,
        media_ref: Optional[str] = None,
    ) -> None:
        self._timers.disarm(session.session_id, TimerPurpose.CHALLENGE)
        decision = evaluate_challenge(ac, passed, self.policy)

        if passed:
            event_type = AuditEventType.CHALLENGE_PASSED
        elif timed_out:
            event_type = AuditEventType.CHALLENGE_TIMEOUT
        else:
            event_type = AuditEventType.CHALLENGE_FAILED
        payload: Dict[str, Any] = {
            "stage": ac.stage.value,
            "attempt": ac.attempts + 1,
            "index": session.current_index,
            "decision": decision.action.value,
        }
        if media_ref is not None:
            payload["media_ref"] = media_ref
        self._audit.record(event_type, session.player_id, session.session_id, payload)
        self._conv.log_decision(session.session_id, event_type.value, decision.action.value)

        if decision.action == Action.TERMINATE:
            self._terminate(session, ac)
            return

        self._save_anticheat(session.session_id, decision.state)
        if decision.action == Action.PASS:
            self._send(session.player_id, messages.challenge_passed())
            self._deliver_question(session, decision.state, gate=False)
            return
        self._send(session.player_id, messages.challenge_retry())
        self._issue_challenge(session, decision.state)

    def _terminate(self, session: GameSession, ac: AntiCheatState) -> None:
        self._timers.disarm_all(session.session_id)
        self._transition(session, SessionEvent.TERMINATE)
        self._end(session, EndReason.VERIFICATION_FAILED, 0)
        self._audit.record(
            AuditEventType.SESSION_TERMINATED, session.player_id, session.session_id,
            {
                "end_reason": EndReason.VERIFICATION_FAILED.value,
                "stage": ac.stage.value,
                "attempts": ac.attempts + 1,
                "index": session.current_index,
            },
        )
        try:
            self._players.flag(session.player_id, EndReason.VERIFICATION_FAILED.value)
            self._audit.record(
                AuditEventType.PLAYER_FLAGGED, session.player_id, session.session_id,
                {"reason": EndReason.VERIFICATION_FAILED.value},
            )
        except CollaboratorError as e:
            log_game_error(e, session.player_id)
        self._after_end(session, None)
        self._send(session.player_id, messages.verification_failed())

    # ══════════════════════════════════════════════════════════════
    # Cancellation and termination
    # ══════════════════════════════════════════════════════════════

    def _cancel(self, session: GameSession, reason: EndReason) -> None:
        self._timers.disarm_all(session.session_id)
        self._transition(session, SessionEvent.CANCEL)
        self._end(session, reason, 0)
        self._after_end(session, AuditEventType.SESSION_CANCELLED)
        if reason == EndReason.ADMIN_CANCEL:
            self._send(session.player_id, messages.admin_cancelled())
        else:
            self._send(session.player_id, messages.session_reset())

    def _end(self, session: GameSession, reason: EndReason, final_score: int) -> None:
        """Commit a terminal transition already applied to ``session.status``."""
        session.final_score = final_score
        session.end_reason = reason.value
        session.completed_at = self._clock()
        session.clear_current_question()
        self._commit(session)
        logger.info(
            f"[{session.session_id}] Ended: {reason.value}, final={final_score}, score={session.score}"
        )

    def _after_end(self, session: GameSession, event_type: Optional[AuditEventType]) -> None:
        """Side effects after a committed terminal transition."""
        penalty_mode = self._load_anticheat(session.session_id).penalty_mode
        self._timers.disarm_all(session.session_id)
        self._store.delete(self._anticheat_key(session.session_id))
        self._store.delete(conversation_key(session.player_id))

        if event_type is not None:
            self._audit.record(
                event_type, session.player_id, session.session_id,
                {
                    "end_reason": session.end_reason,
                    "status": session.status.value,
                    "final_score": session.final_score,
                    "score": session.score,
                    "safe_floor": session.safe_floor,
                    "index": session.current_index,
                },
            )

        winnings = session.final_score or 0
        if session.mode == GameMode.PRACTICE:
            winnings = 0
        highest = max((r.index for r in session.records), default=0)
        try:
            self._players.record_completion(session.player_id, winnings, highest)
            if penalty_mode:
                left = self._players.consume_penalty_game(session.player_id)
                logger.info(f"Penalty games left for {session.player_id}: {left}")
        except CollaboratorError as e:
            log_game_error(e, session.player_id)
        self._conv.log_decision(session.session_id, session.status.value.upper(), session.end_reason or "")

    # ══════════════════════════════════════════════════════════════
    # Timer callbacks
    # ══════════════════════════════════════════════════════════════

    def _locked_reload(self, session_id: str, purpose: TimerPurpose, token: str, body: Callable) -> None:
        """Run ``body(session)`` under the player's lock if the timer is still current."""
        session = self._sessions.get_session(session_id)
        if session is None:
            return
        with self._locks.hold(session.player_id):
            if not self._timers.is_current(session_id, purpose, token):
                logger.debug(f"[{session_id}] {purpose.value} timer superseded")
                return
            session = self._sessions.get_session(session_id)
            if session is None or not session.is_live:
                return
            try:
                body(session)
            except SessionClosedError as e:
                logger.info(f"Timer lost the race: {e}")
            except CollaboratorError as e:
                log_game_error(e, session.player_id)
                self._send(session.player_id, messages.retry_later())

    def _on_question_timer(self, index: int, session_id: str, purpose: TimerPurpose, token: str) -> None:
        def body(session: GameSession) -> None:
            if (
                session.status != SessionStatus.ACTIVE
                or session.current_index != index
                or session.awaiting_delivery
            ):
                logger.info(f"[{session_id}] Question timer for Q{index} no longer applies")
                return
            self._question_timeout(session)

        self._locked_reload(session_id, purpose, token, body)

    def _on_session_timer(self, session_id: str, purpose: TimerPurpose, token: str) -> None:
        self._locked_reload(session_id, purpose, token, self._session_timeout)

    def _on_challenge_timer(
        self, stage: ChallengeStage, attempts: int, session_id: str, purpose: TimerPurpose, token: str
    ) -> None:
        def body(session: GameSession) -> None:
            ac = self._load_anticheat(session_id)
            if ac.stage != stage or ac.attempts != attempts or ac.challenge is None:
                logger.info(f"[{session_id}] Challenge timer for {stage.value}#{attempts + 1} no longer applies")
                return
            self._resolve_challenge(session, ac, passed=False, timed_out=True)

        self._locked_reload(session_id, purpose, token, body)

    def _question_timeout(self, session: GameSession) -> None:
        index = session.current_index
        question = session.current_question
        session.records.append(QuestionRecord(
            index=index, question_id=question["id"], outcome="timeout",
        ))
        self._transition(session, SessionEvent.QUESTION_TIMEOUT)
        self._end(session, EndReason.QUESTION_TIMEOUT, session.safe_floor)
        self._audit.record(
            AuditEventType.QUESTION_TIMEOUT, session.player_id, session.session_id,
            {"index": index, "question_id": question["id"], "final_score": session.final_score},
        )
        self._record_exposure(question["id"], False)
        if index == 1:
            self._track_q1_timeout(session)
        self._after_end(session, AuditEventType.SESSION_ENDED)
        self._send(
            session.player_id,
            messages.question_timeout(session.final_score, self.settings.currency_symbol),
        )

    def _session_timeout(self, session: GameSession) -> None:
        was_active = session.status == SessionStatus.ACTIVE
        index = session.current_index
        question = session.current_question
        if question is not None:
            session.records.append(QuestionRecord(
                index=index, question_id=question["id"], outcome="timeout",
            ))
        self._transition(session, SessionEvent.SESSION_TIMEOUT)
        self._end(session, EndReason.SESSION_TIMEOUT, session.safe_floor)
        self._audit.record(
            AuditEventType.SESSION_TIMEOUT, session.player_id, session.session_id,
            {"index": index, "was_active": was_active, "final_score": session.final_score},
        )
        if question is not None:
            self._record_exposure(question["id"], False)
        if was_active and index == 1:
            self._track_q1_timeout(session)
        self._after_end(session, AuditEventType.SESSION_ENDED)
        self._send(
            session.player_id,
            messages.session_timeout(session.final_score, self.settings.currency_symbol),
        )

    # ══════════════════════════════════════════════════════════════
    # Q1 timeout streak
    # ══════════════════════════════════════════════════════════════

    def _track_q1_timeout(self, session: GameSession) -> None:
        player = self._players.get_player(session.player_id)
        if player is None:
            return
        now = self._clock()
        decision = evaluate_q1_timeout(
            player.q1_timeout_streak, player.q1_timeout_last_at, now, self.policy
        )
        try:
            self._players.set_q1_streak(session.player_id, decision.streak, now)
            self._audit.record(
                AuditEventType.Q1_TIMEOUT_TRACKED, session.player_id, session.session_id,
                {"streak": decision.streak},
            )
            if decision.action == Q1Action.WARNING:
                self._audit.record(
                    AuditEventType.Q1_TIMEOUT_WARNING, session.player_id, session.session_id,
                    {"streak": decision.streak},
                )
            elif decision.action == Q1Action.SUSPENSION:
                self._players.suspend(
                    session.player_id, decision.suspended_until, "q1_timeout_streak",
                    penalty_games=self.settings.penalty_games,
                )
                self._audit.record(
                    AuditEventType.Q1_TIMEOUT_SUSPENSION, session.player_id, session.session_id,
                    {
                        "streak": decision.streak,
                        "suspended_until": decision.suspended_until,
                        "penalty_games": self.settings.penalty_games,
                    },
                )
                logger.warning(
                    f"Player {session.player_id} suspended until {decision.suspended_until}",
                    extra={"player_id": session.player_id},
                )
        except CollaboratorError as e:
            log_game_error(e, session.player_id)

    def _reset_q1_streak(self, session: GameSession, index: int) -> None:
        if index != 1:
            return
        try:
            player = self._players.get_player(session.player_id)
            if player is not None and player.q1_timeout_streak:
                self._players.set_q1_streak(session.player_id, 0, None)
        except CollaboratorError as e:
            log_game_error(e, session.player_id)

    # ══════════════════════════════════════════════════════════════
    # Helpers
    # ══════════════════════════════════════════════════════════════

    def _transition(self, session: GameSession, event: SessionEvent) -> None:
        if try_transition(session, event) is None:
            raise SessionClosedError(session.session_id)

    def _commit(self, session: GameSession) -> None:
        session.last_activity_at = self._clock()
        self._sessions.save_live(session)

    def _fetch_question(self, index: int, player_id: str) -> Dict[str, Any]:
        try:
            raw = self._supplier.next_question(index, player_id)
        except Exception as e:
            raise QuestionSupplierError("next_question", e) from e
        try:
            return QuestionModel.model_validate(raw).model_dump()
        except ValidationError as e:
            raise QuestionSupplierError("next_question", e) from e

    def _record_exposure(self, question_id: str, was_correct: bool) -> None:
        try:
            self._supplier.record_exposure(question_id, was_correct)
        except Exception as e:
            logger.warning(f"record_exposure failed for {question_id}: {e}")

    def _question_timeout_for(self, ac: AntiCheatState) -> float:
        """Shortest of the timers that apply: normal, speed mode, penalty."""
        timeout = self.settings.question_timeout_seconds
        if ac.speed_mode:
            timeout = min(timeout, self.settings.speed_question_timeout_seconds)
        if ac.penalty_mode:
            timeout = min(timeout, self.settings.penalty_question_timeout_seconds)
        return timeout

    def _lifelines_left(self, session: GameSession) -> List[str]:
        left = []
        if not session.fifty_fifty_used:
            left.append("50 (50:50)")
        if not session.skip_used and not self.ladder.is_final(session.current_index):
            left.append("SKIP")
        return left

    def _anticheat_key(self, session_id: str) -> str:
        return f"anticheat:{session_id}"

    def _load_anticheat(self, session_id: str) -> AntiCheatState:
        return AntiCheatState.from_dict(self._store.get(self._anticheat_key(session_id)))

    def _save_anticheat(self, session_id: str, state: AntiCheatState) -> None:
        self._store.set(
            self._anticheat_key(session_id),
            state.to_dict(),
            self.settings.session_timeout_seconds + ANTICHEAT_TTL_MARGIN_SECONDS,
        )

    def _send(self, player_id: str, text: str, deadline_seconds: Optional[float] = None) -> None:
        self._conv.log_sent(player_id, text, deadline_seconds)
        try:
            self._transport.send_text(player_id, text)
        except Exception as e:
            self._conv.log_error(f"send to {player_id} failed: {e}")
            logger.error(f"send_text to {player_id} failed: {e}", extra={"player_id": player_id})
