"""Tests for the CFR solver (src/solvers/cfr.py).

Test structure:

    TestTrainArguments     — iteration-count validation
    TestInformationSets    — which information sets a run creates
    TestStrategyValidity   — every strategy is a probability distribution
    TestDeterminism        — identical runs give bit-identical statistics
    TestKuhnConvergence    — game value, zero sum, known equilibrium actions
    TestSolve              — solve() output shape, early stopping
    TestBotAction          — get_bot_action sampling
"""

from __future__ import annotations

import numpy as np
import pytest

from src.config import SolverConfig
from src.engine.chance import EnumerationSampler
from src.engine.dudo import Dudo
from src.engine.kuhn import BET, CHECK, GAME_VALUE, KuhnPoker
from src.solvers.cfr import CfrResult, Solver, get_bot_action, solve
from src.solvers.information_sets import InfoSetKey

QUIET = SolverConfig(log_every=0)


def _kuhn_solver(**overrides) -> Solver:
    return Solver(KuhnPoker(), QUIET.with_overrides(**overrides))


# ─── Train arguments ──────────────────────────────────────────────────────────


class TestTrainArguments:
    @pytest.mark.parametrize("bad", [0, -5, 1.5, True, "10"])
    def test_rejects_non_positive_or_non_integer(self, bad) -> None:
        solver = _kuhn_solver()
        with pytest.raises(ValueError):
            solver.train(bad)
        assert solver.iterations == 0

    def test_counts_iterations_across_calls(self) -> None:
        solver = _kuhn_solver()
        solver.train(6)
        solver.train(4)
        assert solver.iterations == 10

    def test_numpy_integer_accepted(self) -> None:
        solver = _kuhn_solver()
        solver.train(np.int64(3))
        assert solver.iterations == 3


# ─── Information sets ─────────────────────────────────────────────────────────


class TestInformationSets:
    def test_kuhn_has_twelve_information_sets(self) -> None:
        solver = _kuhn_solver()
        solver.train(6)
        keys = [k for k, _ in solver.all_information_sets()]
        assert len(keys) == 12
        assert {k.history for k in keys if k.player == 0} == {(), ("c", "b")}
        assert {k.history for k in keys if k.player == 1} == {("c",), ("b",)}

    def test_no_information_set_at_terminal_history(self) -> None:
        solver = _kuhn_solver()
        solver.train(6)
        game = solver.game
        assert not any(game.is_terminal(k.history) for k, _ in solver.all_information_sets())

    def test_all_information_sets_sorted(self) -> None:
        solver = _kuhn_solver()
        solver.train(6)
        keys = [k for k, _ in solver.all_information_sets()]
        assert keys[0] == InfoSetKey(0, 1, ())
        assert [k.player for k in keys] == [0] * 6 + [1] * 6

    def test_dudo_single_deal_visits_every_history(self) -> None:
        # One iteration on the (1, 1) roll touches each of the 2^12 claim
        # sequences once, so each becomes an information set.
        solver = Solver(Dudo(), QUIET)
        solver.train(1)
        assert len(solver.store) == 2 ** 12

    def test_unvisited_key_raises(self) -> None:
        solver = _kuhn_solver()
        with pytest.raises(KeyError):
            solver.average_strategy(InfoSetKey(0, 1, ()))


# ─── Strategy validity ────────────────────────────────────────────────────────


class TestStrategyValidity:
    @staticmethod
    def _assert_distributions(solver: Solver) -> None:
        for key, node in solver.all_information_sets():
            for vec in (node.strategy, node.average_strategy()):
                assert np.all(vec >= 0.0), key
                assert vec.sum() == pytest.approx(1.0, abs=1e-9), key

    def test_kuhn_strategies_are_distributions(self) -> None:
        solver = _kuhn_solver()
        for _ in range(5):
            solver.train(37)
            self._assert_distributions(solver)

    def test_dudo_strategies_are_distributions(self) -> None:
        solver = Solver(Dudo(), QUIET)
        solver.train(2)
        self._assert_distributions(solver)

    def test_average_strategy_idempotent(self, trained_kuhn_solver: Solver) -> None:
        key = InfoSetKey(0, 2, ("c", "b"))
        first = trained_kuhn_solver.average_strategy(key)
        second = trained_kuhn_solver.average_strategy(key)
        assert np.array_equal(first, second)

    def test_expected_value_does_not_modify_store(self) -> None:
        solver = _kuhn_solver()
        solver.train(60)
        before = {k: n.strategy_sum.copy() for k, n in solver.all_information_sets()}
        solver.expected_value(0)
        after = {k: n.strategy_sum for k, n in solver.all_information_sets()}
        assert all(np.array_equal(before[k], after[k]) for k in before)


# ─── Determinism ──────────────────────────────────────────────────────────────


class TestDeterminism:
    @staticmethod
    def _sums(solver: Solver) -> dict:
        return {k: (n.regret_sum, n.strategy_sum) for k, n in solver.all_information_sets()}

    def test_enumeration_runs_bit_identical(self) -> None:
        a, b = _kuhn_solver(), _kuhn_solver()
        a.train(500)
        b.train(500)
        sa, sb = self._sums(a), self._sums(b)
        assert sa.keys() == sb.keys()
        for key in sa:
            assert np.array_equal(sa[key][0], sb[key][0])
            assert np.array_equal(sa[key][1], sb[key][1])

    def test_seeded_uniform_runs_bit_identical(self) -> None:
        a = _kuhn_solver(sampling="uniform", seed=11)
        b = _kuhn_solver(sampling="uniform", seed=11)
        a.train(300)
        b.train(300)
        sa, sb = self._sums(a), self._sums(b)
        assert sa.keys() == sb.keys()
        for key in sa:
            assert np.array_equal(sa[key][1], sb[key][1])

    def test_explicit_sampler_is_used(self) -> None:
        sampler = EnumerationSampler([(3, 1)])
        solver = Solver(KuhnPoker(), QUIET, sampler=sampler)
        solver.train(10)
        assert {k.private for k, _ in solver.all_information_sets() if k.player == 0} == {3}


# ─── Kuhn convergence ─────────────────────────────────────────────────────────


class TestKuhnConvergence:
    def test_expected_value_near_game_value(self, trained_kuhn_solver: Solver) -> None:
        assert trained_kuhn_solver.expected_value(0) == pytest.approx(GAME_VALUE, abs=0.01)

    def test_zero_sum(self, trained_kuhn_solver: Solver) -> None:
        total = trained_kuhn_solver.expected_value(0) + trained_kuhn_solver.expected_value(1)
        assert total == pytest.approx(0.0, abs=1e-12)

    def test_training_value_near_game_value(self, trained_kuhn_solver: Solver) -> None:
        assert trained_kuhn_solver.average_game_value == pytest.approx(GAME_VALUE, abs=0.02)

    def test_exploitability_small(self, trained_kuhn_solver: Solver) -> None:
        assert 0.0 <= trained_kuhn_solver.exploitability() < 0.02

    def test_average_regret_shrinks(self) -> None:
        solver = _kuhn_solver()
        solver.train(500)
        early = solver.average_regret()
        solver.train(7_500)
        assert solver.average_regret() < early

    def test_player_two_calls_bet_with_king(self, trained_kuhn_solver: Solver) -> None:
        avg = trained_kuhn_solver.average_strategy(InfoSetKey(1, 3, (BET,)))
        assert avg[1] > 0.95

    def test_player_two_folds_jack_to_bet(self, trained_kuhn_solver: Solver) -> None:
        avg = trained_kuhn_solver.average_strategy(InfoSetKey(1, 1, (BET,)))
        assert avg[1] < 0.05

    def test_player_two_bets_king_after_check(self, trained_kuhn_solver: Solver) -> None:
        avg = trained_kuhn_solver.average_strategy(InfoSetKey(1, 3, (CHECK,)))
        assert avg[1] > 0.95

    def test_player_one_folds_jack_after_check_bet(self, trained_kuhn_solver: Solver) -> None:
        avg = trained_kuhn_solver.average_strategy(InfoSetKey(0, 1, (CHECK, BET)))
        assert avg[1] < 0.05


# ─── solve() ──────────────────────────────────────────────────────────────────


class TestSolve:
    def test_result_shape(self, kuhn_result: CfrResult) -> None:
        assert isinstance(kuhn_result, CfrResult)
        assert kuhn_result.game.name == "kuhn"
        assert kuhn_result.n_iterations == 600
        assert len(kuhn_result.strategy) == 12
        assert [it for it, _ in kuhn_result.exploitability_history] == [300, 600]
        assert [it for it, _ in kuhn_result.regret_history] == [300, 600]
        assert not kuhn_result.converged

    def test_exploitability_matches_last_check(self, kuhn_result: CfrResult) -> None:
        assert kuhn_result.exploitability == kuhn_result.exploitability_history[-1][1]
        assert kuhn_result.exploitability >= 0.0

    def test_zero_sum_value(self, kuhn_result: CfrResult) -> None:
        assert -1.0 < kuhn_result.expected_value < 1.0

    def test_early_stop(self) -> None:
        # Payoffs are bounded by 2, so exploitability is always below 10.
        result = solve(
            KuhnPoker(),
            n_iterations=1_000,
            convergence_check_every=100,
            exploitability_threshold=10.0,
        )
        assert result.converged
        assert result.n_iterations == 100
        assert len(result.exploitability_history) == 1

    def test_uneven_final_chunk(self) -> None:
        result = solve(n_iterations=250, convergence_check_every=100)
        assert [it for it, _ in result.exploitability_history] == [100, 200, 250]

    def test_defaults_to_kuhn(self) -> None:
        assert solve(n_iterations=12, convergence_check_every=12).game.name == "kuhn"

    def test_invalid_sampling_raises(self) -> None:
        with pytest.raises(ValueError):
            solve(n_iterations=10, sampling="bogus")


# ─── Bot action ───────────────────────────────────────────────────────────────


class TestBotAction:
    @staticmethod
    def _result(strategy: dict) -> CfrResult:
        return CfrResult(
            game=KuhnPoker(),
            strategy=strategy,
            n_iterations=0,
            expected_value=0.0,
            exploitability=0.0,
            converged=False,
            average_game_value=0.0,
        )

    def test_pure_strategy_always_chosen(self) -> None:
        key = InfoSetKey(1, 3, (BET,))
        result = self._result({key: {CHECK: 0.0, BET: 1.0}})
        rng = np.random.default_rng(0)
        assert {get_bot_action(result, key, rng) for _ in range(50)} == {BET}

    def test_missing_key_draws_legal_action(self) -> None:
        result = self._result({})
        rng = np.random.default_rng(1)
        draws = {get_bot_action(result, InfoSetKey(0, 2, ()), rng) for _ in range(50)}
        assert draws == {CHECK, BET}

    def test_trained_result(self, kuhn_result: CfrResult) -> None:
        key = InfoSetKey(0, 2, ())
        assert get_bot_action(kuhn_result, key, np.random.default_rng(2)) in (CHECK, BET)
