"""
trivia_ladder.cli — Command-line interface
==========================================

Provides the CLI entry point for playing a game in the terminal.

Usage:
    python -m trivia_ladder --demo                      # Demo question bank
    python -m trivia_ladder --demo --config trivia.json # With settings file
    trivia-ladder --demo --player ada --name Ada

Settings come from the config file, ``TRIVIA_*`` environment variables
(``.env`` is honoured) and the flags below, in increasing precedence.
"""

import argparse
import logging
import sys
from typing import Any, Dict

from ._shared.logging_config import enable_conversation_mode
from .config import load_settings
from .demo_supplier import ConsoleTransport, DemoQuestionSupplier


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Trivia Ladder - play a game session in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m trivia_ladder --demo
  python -m trivia_ladder --demo --config trivia.json
  TRIVIA_QUESTION_TIMEOUT_SECONDS=30 python -m trivia_ladder --demo
        """,
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the built-in demo question bank",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON settings file",
    )

    parser.add_argument(
        "--db",
        type=str,
        help="SQLite database path (overrides settings)",
    )

    parser.add_argument(
        "--player",
        type=str,
        default="console",
        help="Player id to play as (default: console)",
    )

    parser.add_argument(
        "--name",
        type=str,
        default="Player",
        help="Display name for a new player",
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Show only conversation lines on the terminal",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if not args.demo:
        print("Error: only --demo is available from the command line.", file=sys.stderr)
        print("Embed TriviaRunner with your own QuestionSupplier to use a real bank.", file=sys.stderr)
        return 1

    overrides: Dict[str, Any] = {}
    if args.db:
        overrides["database_path"] = args.db
    try:
        settings = load_settings(args.config, **overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Import here so --help works without touching the database
    from .runner import TriviaRunner

    runner = TriviaRunner(
        transport=ConsoleTransport(),
        supplier=DemoQuestionSupplier(),
        settings=settings,
    )
    if args.quiet:
        enable_conversation_mode()
    logging.getLogger("trivia_ladder").info(f"Playing as {args.player}")
    runner.run_console(args.player, args.name)
    return 0
