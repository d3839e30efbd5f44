# Area: Game
"""
trivia_ladder._game.ladder — Prize ladder
=========================================

Fixed mapping from question index to cumulative prize, with a subset of
indices marked safe. An index with no entry of its own carries the
prize of the nearest defined index below it.
"""

from typing import Dict, Iterable, Optional


class PrizeLadder:
    """Read-only prize ladder."""

    def __init__(self, prizes: Dict[int, int], safe: Iterable[int], total_questions: Optional[int] = None):
        if not prizes:
            raise ValueError("prize ladder must not be empty")
        self._prizes = dict(sorted((int(k), int(v)) for k, v in prizes.items()))
        self._safe = frozenset(int(i) for i in safe)
        self.total_questions = total_questions or max(self._prizes)
        unknown = self._safe - set(self._prizes)
        if unknown:
            raise ValueError(f"safe checkpoints without a prize: {sorted(unknown)}")

    @classmethod
    def from_settings(cls, settings) -> "PrizeLadder":
        return cls(settings.prize_ladder, settings.safe_checkpoints, settings.total_questions)

    def prize_at(self, index: int) -> int:
        """Cumulative prize for having answered ``index`` correctly."""
        prize = 0
        for i, amount in self._prizes.items():
            if i > index:
                break
            prize = amount
        return prize

    def is_safe(self, index: int) -> bool:
        return index in self._safe

    def is_final(self, index: int) -> bool:
        return index >= self.total_questions

    def __len__(self) -> int:
        return self.total_questions
