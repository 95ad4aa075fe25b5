"""Tests for policy evaluation and exploitability (src/solvers/best_response.py).

The reference profile is Kuhn's equilibrium family at alpha = 0: player 1
never bets first, calls a bet with Q one third of the time and always with
K; player 2 calls with Q one third of the time, bluffs J after a check one
third of the time and always bets K.
"""

from __future__ import annotations

import pytest

from src.engine.kuhn import BET, CHECK, GAME_VALUE, KuhnPoker
from src.solvers.best_response import (
    action_probabilities,
    best_response_value,
    compute_exploitability,
    profile_value,
)
from src.solvers.information_sets import InfoSetKey


def _bet(p: float) -> dict[str, float]:
    return {CHECK: 1.0 - p, BET: p}


@pytest.fixture
def equilibrium() -> dict[InfoSetKey, dict[str, float]]:
    J, Q, K = 1, 2, 3
    return {
        InfoSetKey(0, J, ()): _bet(0.0),
        InfoSetKey(0, Q, ()): _bet(0.0),
        InfoSetKey(0, K, ()): _bet(0.0),
        InfoSetKey(0, J, (CHECK, BET)): _bet(0.0),
        InfoSetKey(0, Q, (CHECK, BET)): _bet(1.0 / 3.0),
        InfoSetKey(0, K, (CHECK, BET)): _bet(1.0),
        InfoSetKey(1, J, (BET,)): _bet(0.0),
        InfoSetKey(1, Q, (BET,)): _bet(1.0 / 3.0),
        InfoSetKey(1, K, (BET,)): _bet(1.0),
        InfoSetKey(1, J, (CHECK,)): _bet(1.0 / 3.0),
        InfoSetKey(1, Q, (CHECK,)): _bet(0.0),
        InfoSetKey(1, K, (CHECK,)): _bet(1.0),
    }


# ─── Helpers ──────────────────────────────────────────────────────────────────


class TestActionProbabilities:
    def test_present_key(self, equilibrium) -> None:
        key = InfoSetKey(1, 3, (BET,))
        assert action_probabilities(equilibrium, key, [CHECK, BET]) == [0.0, 1.0]

    def test_missing_key_is_uniform(self) -> None:
        assert action_probabilities({}, InfoSetKey(0, 1, ()), ["a", "b", "c", "d"]) == [0.25] * 4


# ─── Profile value ────────────────────────────────────────────────────────────


class TestProfileValue:
    def test_equilibrium_value(self, kuhn: KuhnPoker, equilibrium) -> None:
        assert profile_value(kuhn, equilibrium, 0) == pytest.approx(GAME_VALUE, abs=1e-12)

    def test_zero_sum(self, kuhn: KuhnPoker, equilibrium) -> None:
        total = profile_value(kuhn, equilibrium, 0) + profile_value(kuhn, equilibrium, 1)
        assert total == pytest.approx(0.0, abs=1e-12)

    def test_always_bet_versus_always_call(self, kuhn: KuhnPoker) -> None:
        # Every hand goes b-b to showdown for 2; cards are symmetric.
        profile = {
            InfoSetKey(p, c, h): _bet(1.0)
            for c in (1, 2, 3)
            for p, h in ((0, ()), (0, (CHECK, BET)), (1, (BET,)), (1, (CHECK,)))
        }
        assert profile_value(kuhn, profile, 0) == pytest.approx(0.0, abs=1e-12)


# ─── Best response / exploitability ───────────────────────────────────────────


class TestExploitability:
    def test_equilibrium_is_unexploitable(self, kuhn: KuhnPoker, equilibrium) -> None:
        assert compute_exploitability(kuhn, equilibrium) == pytest.approx(0.0, abs=1e-9)

    def test_best_responses_match_game_value(self, kuhn: KuhnPoker, equilibrium) -> None:
        assert best_response_value(kuhn, equilibrium, 0) == pytest.approx(GAME_VALUE, abs=1e-9)
        assert best_response_value(kuhn, equilibrium, 1) == pytest.approx(-GAME_VALUE, abs=1e-9)

    def test_uniform_play_is_exploitable(self, kuhn: KuhnPoker) -> None:
        assert compute_exploitability(kuhn, {}) > 0.1

    @pytest.mark.parametrize("player", [0, 1])
    def test_best_response_dominates_on_policy(self, kuhn: KuhnPoker, player: int) -> None:
        assert best_response_value(kuhn, {}, player) >= profile_value(kuhn, {}, player)

    def test_pure_bluffer_is_exploitable(self, kuhn: KuhnPoker, equilibrium) -> None:
        profile = dict(equilibrium)
        profile[InfoSetKey(0, 1, ())] = _bet(1.0)
        assert compute_exploitability(kuhn, profile) > 0.01
