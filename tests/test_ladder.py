# Area: Game Tests
"""Tests for PrizeLadder."""

import pytest

from trivia_ladder._game.ladder import PrizeLadder
from trivia_ladder.config import DEFAULT_PRIZE_LADDER, GameSettings


class TestPrizeLadder:

    def test_default_ladder(self):
        ladder = PrizeLadder.from_settings(GameSettings())

        assert len(ladder) == 15
        assert ladder.prize_at(1) == 200
        assert ladder.prize_at(5) == 1000
        assert ladder.prize_at(15) == 50000
        assert ladder.is_safe(5) and ladder.is_safe(10)
        assert not ladder.is_safe(6)
        assert ladder.is_final(15) and not ladder.is_final(14)

    def test_sparse_ladder_carries_forward(self):
        """Test indices without an entry keep the prize below them."""
        ladder = PrizeLadder({5: 1000, 8: 5000, 10: 10000, 12: 25000, 15: 50000}, (5, 10), 15)

        assert ladder.prize_at(4) == 0
        assert ladder.prize_at(5) == 1000
        assert ladder.prize_at(7) == 1000
        assert ladder.prize_at(9) == 5000
        assert ladder.prize_at(14) == 25000

    def test_prizes_never_decrease(self):
        ladder = PrizeLadder(DEFAULT_PRIZE_LADDER, (5, 10))
        prizes = [ladder.prize_at(i) for i in range(1, 16)]

        assert prizes == sorted(prizes)

    def test_total_defaults_to_highest_index(self):
        assert len(PrizeLadder({1: 10, 3: 30}, ())) == 3

    def test_safe_checkpoint_needs_prize(self):
        with pytest.raises(ValueError):
            PrizeLadder({5: 1000, 15: 50000}, (5, 10))

    def test_empty_ladder_rejected(self):
        with pytest.raises(ValueError):
            PrizeLadder({}, ())
