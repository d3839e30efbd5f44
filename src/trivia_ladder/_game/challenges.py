# Area: Game
"""
trivia_ladder._game.challenges — Verification challenges
========================================================

Builds the challenge shown at each escalation stage:

* speed: a quick arithmetic or comparison question
* captcha: math, emoji pick, emoji count, reversed word, emoji grid,
  odd one out or emoji sequence, drawn by weight
* photo: a request for a live photo with a random gesture

A challenge is a plain dict so it can live in the ephemeral store::

    {"stage": "captcha", "kind": "reverse", "prompt": "...", "answers": ["YALP"]}

Photo challenges have no text answers; only an inbound image clears them.
"""

import random
from typing import Any, Dict, List, Optional

from .enums import ChallengeStage

EMOJI_CATEGORIES = {
    "ANIMAL": ["🐘", "🦁", "🐕", "🐈", "🐟", "🦅", "🐢", "🐰"],
    "FRUIT": ["🍎", "🍊", "🍋", "🍇", "🍓", "🍑", "🍒", "🍌"],
    "VEHICLE": ["🚗", "🚌", "🚂", "🚢", "🚁", "🚲", "🛵", "🚀"],
    "SPORT": ["⚽", "🏀", "🎾", "🏈", "⚾", "🏐", "🏓", "🥊"],
}
COUNT_EMOJIS = ["⭐", "🔥", "💎", "🎯", "✨"]
REVERSE_WORDS = ["PLAY", "GAME", "QUIZ", "CASH", "LUCK", "STAR", "GOLD", "HERO"]
PHOTO_GESTURES = [
    "holding up two fingers",
    "holding up three fingers",
    "with a thumbs-up",
    "touching your left ear",
    "covering one eye with your hand",
]

DISTRACTOR_EMOJIS = [
    "💡", "📱", "💻", "📚", "🔑", "🎁", "🎈", "🔔", "🌍", "💧",
    "🌸", "🍀", "🌙", "🎭", "🧩", "🧸", "📌", "🎀", "🧲", "📎",
]
SEQUENCE_EMOJIS = ["🔴", "🟡", "🟢", "🔵", "🟣", "🟠", "⚫", "⚪"]

# Relative draw frequency of each captcha kind.
CAPTCHA_WEIGHTS = {
    "math": 15,
    "emoji": 15,
    "count": 10,
    "reverse": 10,
    "emoji_grid": 20,
    "odd_one_out": 15,
    "emoji_sequence": 15,
}
CAPTCHA_KINDS = tuple(CAPTCHA_WEIGHTS)


def _challenge(stage: ChallengeStage, kind: str, prompt: str, answers: List[str]) -> Dict[str, Any]:
    return {"stage": stage.value, "kind": kind, "prompt": prompt, "answers": answers}


def _speed_challenge(rng: random.Random) -> Dict[str, Any]:
    if rng.random() < 0.5:
        a, b = rng.randint(3, 17), rng.randint(3, 17)
        return _challenge(ChallengeStage.SPEED, "arithmetic", f"What is {a} + {b}?", [str(a + b)])
    a, b = rng.sample(range(10, 99), 2)
    return _challenge(
        ChallengeStage.SPEED, "compare",
        f"Which number is bigger: {a} or {b}?", [str(max(a, b))],
    )


def _math_captcha(rng: random.Random) -> Dict[str, Any]:
    op = rng.choice(["+", "-", "×"])
    if op == "+":
        a, b = rng.randint(3, 17), rng.randint(3, 17)
        answer = a + b
    elif op == "-":
        a = rng.randint(10, 24)
        b = rng.randint(1, a)
        answer = a - b
    else:
        a, b = rng.randint(2, 10), rng.randint(2, 10)
        answer = a * b
    return _challenge(ChallengeStage.CAPTCHA, "math", f"Solve this: what is {a} {op} {b}?", [str(answer)])


def _emoji_captcha(rng: random.Random) -> Dict[str, Any]:
    category = rng.choice(sorted(EMOJI_CATEGORIES))
    correct = rng.choice(EMOJI_CATEGORIES[category])
    others = [e for c, emojis in EMOJI_CATEGORIES.items() if c != category for e in emojis]
    options = rng.sample(others, 3) + [correct]
    rng.shuffle(options)
    position = options.index(correct) + 1
    lines = "\n".join(f"{i}. {e}" for i, e in enumerate(options, start=1))
    prompt = f"Which emoji is a {category}?\n{lines}\nReply with 1, 2, 3 or 4"
    return _challenge(ChallengeStage.CAPTCHA, "emoji", prompt, [str(position)])


def _count_captcha(rng: random.Random) -> Dict[str, Any]:
    emoji = rng.choice(COUNT_EMOJIS)
    count = rng.randint(3, 9)
    prompt = f"Count carefully:\n{emoji * count}\nHow many {emoji} are there?"
    return _challenge(ChallengeStage.CAPTCHA, "count", prompt, [str(count)])


def _reverse_captcha(rng: random.Random) -> Dict[str, Any]:
    word = rng.choice(REVERSE_WORDS)
    return _challenge(
        ChallengeStage.CAPTCHA, "reverse", f"Type this word backwards: {word}", [word[::-1]]
    )


def _emoji_grid_captcha(rng: random.Random) -> Dict[str, Any]:
    target = rng.choice(COUNT_EMOJIS)
    count = rng.randint(3, 7)
    cells = [target] * count + [rng.choice(DISTRACTOR_EMOJIS) for _ in range(rng.randint(5, 10))]
    rng.shuffle(cells)
    grid = "\n".join("".join(cells[i:i + 5]) for i in range(0, len(cells), 5))
    prompt = f"Count the {target} in this grid:\n{grid}\nHow many {target} are there?"
    return _challenge(ChallengeStage.CAPTCHA, "emoji_grid", prompt, [str(count)])


def _odd_one_out_captcha(rng: random.Random) -> Dict[str, Any]:
    category = rng.choice(sorted(EMOJI_CATEGORIES))
    majority, odd = rng.sample(EMOJI_CATEGORIES[category], 2)
    length = rng.randint(5, 7)
    position = rng.randint(1, length)
    row = " ".join(
        f"{i}.{odd if i == position else majority}" for i in range(1, length + 1)
    )
    prompt = f"Find the odd one out:\n{row}\nWhich position is different? Reply with 1-{length}"
    return _challenge(ChallengeStage.CAPTCHA, "odd_one_out", prompt, [str(position)])


def _emoji_sequence_captcha(rng: random.Random) -> Dict[str, Any]:
    pattern = rng.sample(SEQUENCE_EMOJIS, rng.randint(2, 3))
    sequence = pattern * 3
    # The first cycle is always shown whole.
    blank = rng.randint(len(pattern), len(sequence) - 1)
    missing = sequence[blank]
    sequence[blank] = "❓"
    options = rng.sample([e for e in SEQUENCE_EMOJIS if e != missing], 2) + [missing]
    rng.shuffle(options)
    lines = "\n".join(f"{i}. {e}" for i, e in enumerate(options, start=1))
    prompt = (
        f"Complete the pattern:\n{' '.join(sequence)}\n"
        f"What replaces the ❓?\n{lines}\nReply with 1, 2 or 3"
    )
    return _challenge(
        ChallengeStage.CAPTCHA, "emoji_sequence", prompt, [str(options.index(missing) + 1)]
    )


_CAPTCHA_BUILDERS = {
    "math": _math_captcha,
    "emoji": _emoji_captcha,
    "count": _count_captcha,
    "reverse": _reverse_captcha,
    "emoji_grid": _emoji_grid_captcha,
    "odd_one_out": _odd_one_out_captcha,
    "emoji_sequence": _emoji_sequence_captcha,
}


def _photo_challenge(rng: random.Random) -> Dict[str, Any]:
    gesture = rng.choice(PHOTO_GESTURES)
    return _challenge(
        ChallengeStage.PHOTO, "photo",
        f"Please send a live photo of yourself {gesture}.", [],
    )


def generate_challenge(stage: ChallengeStage, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Build a fresh challenge for ``stage``.

    Raises:
        ValueError: For ChallengeStage.NONE
    """
    rng = rng or random.Random()
    if stage == ChallengeStage.SPEED:
        return _speed_challenge(rng)
    if stage == ChallengeStage.CAPTCHA:
        kind = rng.choices(CAPTCHA_KINDS, weights=[CAPTCHA_WEIGHTS[k] for k in CAPTCHA_KINDS])[0]
        return _CAPTCHA_BUILDERS[kind](rng)
    if stage == ChallengeStage.PHOTO:
        return _photo_challenge(rng)
    raise ValueError(f"No challenge for stage {stage.value}")


def normalize_response(text: str) -> str:
    return " ".join(text.strip().upper().split())


def check_response(challenge: Dict[str, Any], text: str) -> bool:
    """True if ``text`` answers a text challenge."""
    return normalize_response(text) in challenge.get("answers", [])


def is_photo(challenge: Optional[Dict[str, Any]]) -> bool:
    return bool(challenge) and challenge.get("stage") == ChallengeStage.PHOTO.value
