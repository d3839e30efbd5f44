# Area: Game
"""
trivia_ladder._game.messages — Player-facing texts
==================================================

Every string the engine and router send lives here. Texts never name
the check that triggered a challenge, suspension or termination.
"""

from typing import Any, Dict, Iterable, Optional


def money(amount: int, currency: str = "₦") -> str:
    return f"{currency}{amount:,}"


# ── Menu / router ─────────────────────────────────────────────

def main_menu(display_name: str) -> str:
    return (
        f"Hi {display_name}! Choose a game mode:\n\n"
        "1. CLASSIC\n"
        "2. PRACTICE (no prize money)\n"
        "3. TOURNAMENT <id>\n\n"
        "Reply with the number or the name."
    )


def help_text(start_token: str, reset_tokens: Iterable[str]) -> str:
    resets = " or ".join(reset_tokens)
    return (
        "How to play:\n"
        f"- Pick a mode, then reply {start_token} to get question 1.\n"
        "- Answer with A, B, C or D before the timer runs out.\n"
        "- Lifelines (once per game): 50 removes two wrong options, SKIP moves on.\n"
        f"- Reply {resets} at any time to abandon the game."
    )


def unknown_mode() -> str:
    return "Sorry, I didn't get that. Reply 1 for CLASSIC, 2 for PRACTICE or 3 <id> for TOURNAMENT."


def tournament_id_required() -> str:
    return "Please include the tournament id, for example: TOURNAMENT SPRING24"


def session_reset() -> str:
    return "Your game has been reset. Reply PLAY to start again."


def nothing_to_reset() -> str:
    return "There is no game in progress. Reply PLAY to start one."


def not_registered() -> str:
    return "Welcome! Please complete registration before playing."


# ── Session lifecycle ─────────────────────────────────────────

def session_ready(mode: str, start_token: str, session_minutes: int, question_seconds: int) -> str:
    return (
        f"Your {mode.upper()} game is ready.\n"
        f"Each question has a {question_seconds}s timer and the whole game "
        f"must finish within {session_minutes} minutes.\n\n"
        f"Reply {start_token} when you are ready."
    )


def awaiting_start(start_token: str) -> str:
    return f"Reply {start_token} to get your first question."


def session_conflict() -> str:
    return "You already have a game in progress. Finish it or reply RESET to start over."


def suspended() -> str:
    return "You can't start a new game right now. Please try again later."


def retry_later() -> str:
    return "Something went wrong on our side. Please send any message in a moment to continue."


def admin_cancelled() -> str:
    return "Your game has been cancelled by an administrator."


def verification_failed() -> str:
    return "Verification failed. This game has ended."


# ── Questions ─────────────────────────────────────────────────

def format_question(
    index: int,
    total: int,
    question: Dict[str, Any],
    options: Iterable[str],
    prize: int,
    safe: bool,
    timeout_seconds: int,
    lifelines: Iterable[str],
    currency: str = "₦",
) -> str:
    """Render one ladder question with its prize and remaining lifelines."""
    marker = " (SAFE)" if safe else ""
    lines = [
        f"Question {index}/{total} for {money(prize, currency)}{marker}",
        "",
        question["text"],
        "",
    ]
    for letter in options:
        lines.append(f"{letter}. {question['options'][letter]}")
    lines.append("")
    lifelines = list(lifelines)
    if lifelines:
        lines.append("Lifelines: " + ", ".join(lifelines))
    lines.append(f"You have {timeout_seconds} seconds.")
    return "\n".join(lines)


def correct_answer(score: int, currency: str, safe: bool, fun_fact: Optional[str] = None) -> str:
    text = f"Correct! You now have {money(score, currency)}."
    if safe:
        text += " That amount is now guaranteed."
    if fun_fact:
        text += f"\n\nDid you know? {fun_fact}"
    return text


def wrong_answer(correct_letter: str, correct_text: str, final_score: int, currency: str) -> str:
    return (
        f"Wrong answer. The correct answer was {correct_letter}. {correct_text}\n"
        f"You leave with {money(final_score, currency)}."
    )


def question_timeout(final_score: int, currency: str) -> str:
    return f"Time's up! You leave with {money(final_score, currency)}."


def session_timeout(final_score: int, currency: str) -> str:
    return f"Your game time has run out. You leave with {money(final_score, currency)}."


def max_win(score: int, currency: str) -> str:
    return (
        f"Congratulations! You answered every question and won {money(score, currency)}!\n"
        "Our team will be in touch about your prize."
    )


def practice_note() -> str:
    return "Practice game: no prize money is awarded."


def invalid_answer(options: Iterable[str]) -> str:
    return "Please reply with " + ", ".join(options) + ", or use a lifeline (50, SKIP)."


def lifeline_unavailable(lifeline: str) -> str:
    names = {"fifty_fifty": "50:50", "skip": "SKIP"}
    return f"The {names.get(lifeline, lifeline)} lifeline is not available."


def skip_applied() -> str:
    return "Question skipped."


def waiting_for_question() -> str:
    return "Your next question is on its way."


# ── Challenges ────────────────────────────────────────────────

def challenge_prompt(challenge: Dict[str, Any], timeout_seconds: int) -> str:
    return (
        "Quick check before your next question:\n\n"
        f"{challenge['prompt']}\n\n"
        f"You have {timeout_seconds} seconds."
    )


def challenge_retry() -> str:
    return "That didn't work. Here is another one."


def challenge_passed() -> str:
    return "Thanks! Back to the game."


def photo_reminder() -> str:
    return "Please send the requested photo to continue."
