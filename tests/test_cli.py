# Area: CLI Tests
"""Tests for the command-line entry point and the console loop."""

from unittest.mock import patch

from trivia_ladder._game.enums import SessionStatus
from trivia_ladder.cli import main, parse_args


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])

        assert args.demo is False
        assert args.player == "console"
        assert args.name == "Player"
        assert args.config is None

    def test_all_flags(self):
        args = parse_args(["--demo", "--config", "c.json", "--db", "x.db", "--player", "ada", "--name", "Ada", "--quiet"])

        assert args.demo and args.quiet
        assert args.config == "c.json"
        assert args.db == "x.db"
        assert args.player == "ada"


class TestMain:

    def test_requires_demo(self, capsys):
        assert main([]) == 1
        assert "only --demo" in capsys.readouterr().err

    def test_invalid_config_exits_with_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TRIVIA_QUESTION_TIMEOUT_SECONDS", "-1")

        assert main(["--demo"]) == 1
        assert "Invalid game settings" in capsys.readouterr().err

    def test_demo_runs_console(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        db = tmp_path / "cli.db"

        with patch("trivia_ladder.runner.TriviaRunner.run_console") as run_console:
            assert main(["--demo", "--db", str(db), "--player", "ada", "--name", "Ada"]) == 0

        run_console.assert_called_once_with("ada", "Ada")
        assert db.exists()


class TestRunConsole:

    def test_scripted_console_game(self, make_runner, transport):
        runner = make_runner()
        lines = iter(["1", "START", "/photo selfie.jpg", "quit"])

        runner.run_console("ada", "Ada", input_fn=lambda prompt: next(lines))

        texts = transport.texts_for("ada")
        assert texts[0].startswith("Hi Ada!")
        assert any(t.startswith("Question 1/15") for t in texts)
        assert texts[-1].startswith("Please reply with")
        session = runner.engine.get_active_session("ada")
        assert session.status == SessionStatus.ACTIVE

    def test_eof_ends_console(self, make_runner):
        runner = make_runner()

        def _eof(prompt):
            raise EOFError

        runner.run_console("ada", "Ada", input_fn=_eof)

        assert runner.players.get_player("ada").display_name == "Ada"
