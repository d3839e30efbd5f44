"""
trivia_ladder.config — Game settings
====================================

Every tunable of the engine lives on ``GameSettings``. Values come
from (lowest to highest precedence) the model defaults, an optional JSON
config file, ``TRIVIA_*`` environment variables (a ``.env`` file is
loaded first) and explicit keyword overrides.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger("trivia_ladder.config")

CHALLENGE_STAGES = ("speed", "captcha", "photo")

# Reference ladder of the original game: Q5 and Q10 are safe.
DEFAULT_PRIZE_LADDER: Dict[int, int] = {
    1: 200, 2: 250, 3: 300, 4: 500, 5: 1000,
    6: 2000, 7: 3000, 8: 5000, 9: 8000, 10: 10000,
    11: 20000, 12: 25000, 13: 30000, 14: 40000, 15: 50000,
}
DEFAULT_SAFE_CHECKPOINTS: Tuple[int, ...] = (5, 10)
DEFAULT_CAPTCHA_ZONES: Tuple[Tuple[int, ...], ...] = ((6, 8), (11, 12))

ENV_PREFIX = "TRIVIA_"


class GameSettings(BaseModel):
    """Validated, immutable engine configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Prize ladder
    prize_ladder: Dict[int, int] = Field(default_factory=lambda: dict(DEFAULT_PRIZE_LADDER))
    safe_checkpoints: Tuple[int, ...] = DEFAULT_SAFE_CHECKPOINTS
    total_questions: int = Field(15, ge=1)
    currency_symbol: str = "₦"

    # Timers (seconds)
    question_timeout_seconds: float = Field(12.0, gt=0)
    speed_question_timeout_seconds: float = Field(10.0, gt=0)
    session_timeout_seconds: float = Field(300.0, gt=0)
    challenge_timeout_seconds: float = Field(12.0, gt=0)
    photo_timeout_seconds: float = Field(20.0, gt=0)
    conversation_ttl_seconds: float = Field(1800.0, gt=0)
    inbound_dedupe_ttl_seconds: float = Field(3600.0, gt=0)
    ephemeral_sweep_seconds: float = Field(300.0, gt=0)

    # Speed heuristic
    fast_answer_seconds: float = Field(2.5, gt=0)
    fast_streak_length: int = Field(3, ge=1)

    # Escalation chain and attempts per stage
    escalation_stages: Tuple[str, ...] = CHALLENGE_STAGES
    speed_attempts: int = Field(2, ge=1)
    captcha_attempts: int = Field(2, ge=1)
    photo_attempts: int = Field(2, ge=1)

    # Scheduled captchas: one per zone, the last index of a zone always shows it
    captcha_zones: Tuple[Tuple[int, ...], ...] = DEFAULT_CAPTCHA_ZONES
    captcha_zone_chance: float = Field(0.5, ge=0, le=1)

    # Q1 timeout streak policy
    q1_warning_streak: int = Field(3, ge=1)
    q1_suspension_streak: int = Field(5, ge=1)
    q1_streak_reset_hours: float = Field(24.0, gt=0)
    suspension_hours: float = Field(36.0, gt=0)
    penalty_games: int = Field(5, ge=0)
    penalty_question_timeout_seconds: float = Field(10.0, gt=0)
    allow_practice_when_suspended: bool = True

    # Conversation tokens
    start_token: str = "START"
    reset_tokens: Tuple[str, ...] = ("RESET", "RESTART")

    # Infrastructure
    database_path: str = "trivia_ladder.db"
    log_file: str = "trivia_ladder.log"

    @field_validator("escalation_stages")
    @classmethod
    def _check_stages(cls, stages: Tuple[str, ...]) -> Tuple[str, ...]:
        if not stages:
            raise ValueError("escalation_stages must not be empty")
        unknown = [s for s in stages if s not in CHALLENGE_STAGES]
        if unknown:
            raise ValueError(f"unknown escalation stages: {unknown}")
        if len(set(stages)) != len(stages):
            raise ValueError("escalation_stages must not repeat a stage")
        return stages

    @field_validator("start_token")
    @classmethod
    def _upper_start(cls, token: str) -> str:
        return token.strip().upper()

    @field_validator("reset_tokens")
    @classmethod
    def _upper_reset(cls, tokens: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(t.strip().upper() for t in tokens)

    @model_validator(mode="after")
    def _check_ladder(self) -> "GameSettings":
        if not self.prize_ladder:
            raise ValueError("prize_ladder must not be empty")
        if min(self.prize_ladder) < 1 or max(self.prize_ladder) > self.total_questions:
            raise ValueError("prize_ladder indices must lie within 1..total_questions")
        if self.total_questions not in self.prize_ladder:
            raise ValueError("prize_ladder must define the final question's prize")
        missing = [i for i in self.safe_checkpoints if i not in self.prize_ladder]
        if missing:
            raise ValueError(f"safe checkpoints without a prize: {missing}")
        ordered = [self.prize_ladder[i] for i in sorted(self.prize_ladder)]
        if any(b < a for a, b in zip(ordered, ordered[1:])):
            raise ValueError("prize_ladder must be non-decreasing")
        if self.q1_suspension_streak < self.q1_warning_streak:
            raise ValueError("q1_suspension_streak must be >= q1_warning_streak")
        for zone in self.captcha_zones:
            if not zone or min(zone) < 1:
                raise ValueError(f"captcha zone {list(zone)} must hold question indices >= 1")
        return self

    def attempts_for(self, stage: str) -> int:
        """Allowed attempts for a challenge stage."""
        return {
            "speed": self.speed_attempts,
            "captcha": self.captcha_attempts,
            "photo": self.photo_attempts,
        }[stage]

    def timeout_for_challenge(self, stage: str) -> float:
        if stage == "photo":
            return self.photo_timeout_seconds
        return self.challenge_timeout_seconds


def _env_overrides(environ: Dict[str, str]) -> Dict[str, Any]:
    """Collect ``TRIVIA_<FIELD>`` variables for known fields."""
    overrides: Dict[str, Any] = {}
    for name in GameSettings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is None or raw == "":
            continue
        value: Any = raw
        stripped = raw.strip()
        if stripped[:1] in ("[", "{"):
            value = json.loads(stripped)
        elif name in ("escalation_stages", "reset_tokens", "safe_checkpoints"):
            value = [part.strip() for part in stripped.split(",") if part.strip()]
        overrides[name] = value
    return overrides


def load_settings(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
    **overrides: Any,
) -> GameSettings:
    """
    Build ``GameSettings`` from file, environment and overrides.

    Parameters
    ----------
    config_path : str, optional
        JSON file with any subset of the settings fields.
    env_file : str, optional
        Path handed to ``load_dotenv``; defaults to ``.env`` lookup.
    **overrides
        Highest-precedence explicit values.

    Raises
    ------
    ValueError
        If the merged values fail validation.
    """
    load_dotenv(env_file)

    values: Dict[str, Any] = {}
    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                values.update(json.load(f))
        else:
            logger.warning(f"Config file not found: {config_path}")

    values.update(_env_overrides(dict(os.environ)))
    values.update(overrides)

    try:
        return GameSettings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid game settings: {e}") from e
