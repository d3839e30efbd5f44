# Area: Config Tests
"""Tests for GameSettings and load_settings."""

import json

import pytest
from pydantic import ValidationError

from trivia_ladder.config import GameSettings, load_settings


class TestGameSettings:

    def test_defaults_are_valid(self):
        settings = GameSettings()

        assert settings.total_questions == 15
        assert settings.safe_checkpoints == (5, 10)
        assert settings.question_timeout_seconds == 12.0
        assert settings.speed_question_timeout_seconds == 10.0
        assert settings.session_timeout_seconds == 300.0
        assert settings.escalation_stages == ("speed", "captcha", "photo")
        assert settings.captcha_zones == ((6, 8), (11, 12))
        assert settings.penalty_games == 5
        assert settings.penalty_question_timeout_seconds == 10.0

    def test_tokens_are_uppercased(self):
        settings = GameSettings(start_token=" go ", reset_tokens=("quit", "Reset"))

        assert settings.start_token == "GO"
        assert settings.reset_tokens == ("QUIT", "RESET")

    def test_unknown_stage_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(escalation_stages=("laser",))

    def test_repeated_stage_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(escalation_stages=("speed", "speed"))

    def test_ladder_must_define_final_prize(self):
        with pytest.raises(ValidationError):
            GameSettings(prize_ladder={5: 1000, 10: 10000}, safe_checkpoints=(5, 10))

    def test_decreasing_ladder_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(prize_ladder={1: 500, 2: 100}, total_questions=2, safe_checkpoints=())

    def test_empty_captcha_zone_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(captcha_zones=((),))

    def test_captcha_zone_chance_bounds(self):
        with pytest.raises(ValidationError):
            GameSettings(captcha_zone_chance=1.5)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            GameSettings(question_timeout=5)

    def test_settings_are_frozen(self):
        settings = GameSettings()
        with pytest.raises(ValidationError):
            settings.start_token = "GO"

    def test_challenge_timeouts(self):
        settings = GameSettings(challenge_timeout_seconds=8, photo_timeout_seconds=30)

        assert settings.timeout_for_challenge("speed") == 8
        assert settings.timeout_for_challenge("captcha") == 8
        assert settings.timeout_for_challenge("photo") == 30
        assert settings.attempts_for("photo") == 2


class TestLoadSettings:

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "trivia.json"
        path.write_text(json.dumps({
            "prize_ladder": {"1": 100, "2": 500, "3": 1000},
            "total_questions": 3,
            "safe_checkpoints": [2],
            "question_timeout_seconds": 20,
        }))

        settings = load_settings(str(path))

        assert settings.prize_ladder == {1: 100, 2: 500, 3: 1000}
        assert settings.safe_checkpoints == (2,)
        assert settings.question_timeout_seconds == 20.0

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "nope.json"))

        assert settings.question_timeout_seconds == 12.0

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "trivia.json"
        path.write_text(json.dumps({"question_timeout_seconds": 20}))
        monkeypatch.setenv("TRIVIA_QUESTION_TIMEOUT_SECONDS", "30")
        monkeypatch.setenv("TRIVIA_ESCALATION_STAGES", "captcha, photo")
        monkeypatch.setenv("TRIVIA_CAPTCHA_ZONES", "[[3, 4]]")

        settings = load_settings(str(path))

        assert settings.question_timeout_seconds == 30.0
        assert settings.escalation_stages == ("captcha", "photo")
        assert settings.captcha_zones == ((3, 4),)

    def test_keyword_overrides_win(self, monkeypatch):
        monkeypatch.setenv("TRIVIA_SESSION_TIMEOUT_SECONDS", "600")

        settings = load_settings(session_timeout_seconds=120)

        assert settings.session_timeout_seconds == 120

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRIVIA_START_TOKEN", "placeholder")
        monkeypatch.delenv("TRIVIA_START_TOKEN")
        env_file = tmp_path / ".env"
        env_file.write_text("TRIVIA_START_TOKEN=go\n")

        settings = load_settings(env_file=str(env_file))

        assert settings.start_token == "GO"

    def test_invalid_values_raise_value_error(self, monkeypatch):
        monkeypatch.setenv("TRIVIA_FAST_STREAK_LENGTH", "0")

        with pytest.raises(ValueError, match="Invalid game settings"):
            load_settings()
