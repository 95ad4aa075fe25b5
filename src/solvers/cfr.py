"""Vanilla CFR solver for two-player zero-sum games with private information.

Finds approximate Nash equilibrium strategies by Counterfactual Regret
Minimization self-play over an implicit game tree.

Game-theory summary
-------------------
Each player holds one private value (a card, a die face) and the two players
alternate public actions. A decision point is identified by the acting
player's private value plus the public history; that is the information set.

Sign convention
~~~~~~~~~~~~~~~
``_cfr`` returns the expected utility of a subtree for the player to move at
its root. A child is always rooted at the other player's turn, so the parent
negates every child value before using it. Player 0 moves at even history
lengths, player 1 at odd lengths.

Algorithm: vanilla CFR (chance-sampled)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
  1. Each iteration takes one chance outcome from the sampler and traverses
     the full tree under it, starting from the empty history with both reach
     probabilities at 1.
  2. At a decision node the current strategy comes from regret matching; the
     acting player's own reach weights the strategy-sum accumulation.
  3. Counterfactual action utilities are gathered by recursion; node utility
     is their strategy-weighted sum.
  4. Regret: R[I][a] += reach_opponent × (u(a) − u(I)). Regrets are signed
     and never floored.
  5. Nash equilibrium ← average strategy (normalised strategy_sum).

Public API
~~~~~~~~~~
  Solver(game, config)        — owns one run's InformationSetStore
  Solver.train(iterations)
  Solver.average_strategy(key)
  Solver.expected_value(player)
  Solver.all_information_sets()
  solve(game, n_iterations, ...) → CfrResult with periodic exploitability checks
  get_bot_action(result, key, rng)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

import numpy as np

from src.config import SolverConfig
from src.engine.chance import ChanceSampler, make_sampler
from src.engine.game import Deal, Game, History
from src.engine.kuhn import KuhnPoker
from src.solvers.best_response import (
    StrategyProfile,
    action_probabilities,
    compute_exploitability,
    profile_value,
)
from src.solvers.information_sets import (
    InformationSet,
    InformationSetStore,
    InfoSetKey,
    make_key,
)

logger = logging.getLogger(__name__)


# ─── Result type ───────────────────────────────────────────────────────────────


@dataclass
class CfrResult:
    """Output of solve().

    Attributes:
        game:                   Game the strategies were trained for.
        strategy:               Average strategy per information set.
                                Maps InfoSetKey → {action: prob}.
        n_iterations:           CFR iterations actually run.
        expected_value:         Player-0 value of the game under ``strategy``.
        exploitability:         Sum of both best-response values against
                                ``strategy`` (0 at equilibrium).
        converged:              True if exploitability fell below the threshold.
        average_game_value:     Mean root utility over training iterations.
        exploitability_history: (iteration, exploitability) at each check.
        regret_history:         (iteration, average regret) at each check.
    """

    game: Game
    strategy: StrategyProfile
    n_iterations: int
    expected_value: float
    exploitability: float
    converged: bool
    average_game_value: float
    exploitability_history: list[tuple[int, float]] = field(default_factory=list)
    regret_history: list[tuple[int, float]] = field(default_factory=list)


# ─── Solver ────────────────────────────────────────────────────────────────────


class Solver:
    """One CFR training run over one game.

    All regret and strategy state lives in ``self.store`` and dies with the
    Solver; nothing is shared between instances.

    Args:
        game:    Game model to solve.
        config:  Training configuration (defaults to SolverConfig()).
        sampler: Chance sampler; built from config.sampling/config.seed if None.
    """

    def __init__(
        self,
        game: Game,
        config: SolverConfig | None = None,
        sampler: ChanceSampler | None = None,
    ) -> None:
        self.game = game
        self.config = (config or SolverConfig()).validate()
        self.sampler = sampler or make_sampler(game, self.config.sampling, self.config.seed)
        self.store = InformationSetStore()
        self.iterations = 0
        self._utility_sum = 0.0

    # ── Traversal ────────────────────────────────────────────────────────────

    def _cfr(self, private: Deal, history: History, reach_p1: float, reach_p2: float) -> float:
        """Return the subtree utility for the player to move at *history*."""
        player = len(history) % 2

        if self.game.is_terminal(history):
            return self.game.terminal_utility(history, private[player], private[1 - player])

        actions = self.game.legal_actions(history)
        node = self.store.get_or_create(make_key(private, history), actions)

        if player == 0:
            reach_self, reach_opp = reach_p1, reach_p2
        else:
            reach_self, reach_opp = reach_p2, reach_p1
        strategy = node.current_strategy(reach_self)

        action_utils = np.zeros(node.action_count)
        for i, action in enumerate(actions):
            child = history + (action,)
            if player == 0:
                action_utils[i] = -self._cfr(private, child, reach_p1 * strategy[i], reach_p2)
            else:
                action_utils[i] = -self._cfr(private, child, reach_p1, reach_p2 * strategy[i])

        node_util = float(np.dot(strategy, action_utils))
        node.update_regrets(action_utils, node_util, reach_opp)
        return node_util

    # ── Training ─────────────────────────────────────────────────────────────

    def train(self, iterations: int) -> None:
        """Run *iterations* chance-sampled CFR traversals.

        Can be called repeatedly; statistics keep accumulating.

        Raises:
            ValueError: If iterations is not a positive integer.
        """
        if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)):
            raise ValueError(f"iterations must be a positive integer, got {iterations!r}.")
        if iterations <= 0:
            raise ValueError(f"iterations must be a positive integer, got {iterations}.")

        logger.info(
            "Training %s for %d iterations (%s sampling)",
            self.game.name,
            iterations,
            self.config.sampling,
        )
        start = time.perf_counter()
        log_every = self.config.log_every

        for _ in range(int(iterations)):
            deal = self.sampler.next_outcome()
            self._utility_sum += self._cfr(deal, (), 1.0, 1.0)
            self.iterations += 1
            if log_every and self.iterations % log_every == 0:
                logger.info(
                    "iteration %d: %d information sets, average regret %.6f",
                    self.iterations,
                    len(self.store),
                    self.average_regret(),
                )

        logger.info(
            "Finished %d iterations in %.2fs; %d information sets, game value %.4f",
            iterations,
            time.perf_counter() - start,
            len(self.store),
            self.average_game_value,
        )

    @property
    def average_game_value(self) -> float:
        """Mean root utility (player 0) over all training iterations so far."""
        if self.iterations == 0:
            return 0.0
        return self._utility_sum / self.iterations

    def average_regret(self) -> float:
        """Mean over information sets of max positive regret divided by T."""
        if self.iterations == 0 or len(self.store) == 0:
            return 0.0
        peaks = [max(float(node.regret_sum.max()), 0.0) for _, node in self.store.all_entries()]
        return float(np.mean(peaks)) / self.iterations

    # ── Strategy extraction ──────────────────────────────────────────────────

    def average_strategy(self, key: InfoSetKey) -> np.ndarray:
        """Average strategy at *key*. Raises KeyError if never visited."""
        return self.store.get(key).average_strategy()

    def all_information_sets(self) -> list[tuple[InfoSetKey, InformationSet]]:
        """Every information set, ordered by (player, private, history)."""
        return sorted(
            self.store.all_entries(),
            key=lambda kv: (kv[0].player, kv[0].private, len(kv[0].history), kv[0].history),
        )

    def strategy_profile(self) -> StrategyProfile:
        return {key: node.average_strategy_dict() for key, node in self.all_information_sets()}

    def expected_value(self, player: int = 0) -> float:
        """Value of the game for *player* when both play the average strategy.

        Enumerates every chance outcome; the store is not modified.
        """
        return profile_value(self.game, self.strategy_profile(), player)

    def exploitability(self) -> float:
        return compute_exploitability(self.game, self.strategy_profile())


# ─── Batch entry point ─────────────────────────────────────────────────────────


def solve(
    game: Game | None = None,
    n_iterations: int = 1000,
    convergence_check_every: int = 100,
    exploitability_threshold: float = 0.0,
    sampling: str = "enumerate",
    seed: int | None = None,
) -> CfrResult:
    """Run CFR and return the average strategy with diagnostics.

    Trains in chunks of ``convergence_check_every`` iterations, computing
    exploitability after each chunk and stopping early once it drops below
    ``exploitability_threshold`` (never, with the default threshold of 0).

    Args:
        game:                     Game to solve (Kuhn poker if None).
        n_iterations:             Maximum number of CFR iterations.
        convergence_check_every:  Exploitability check interval.
        exploitability_threshold: Early-stop target.
        sampling:                 'enumerate' or 'uniform' chance sampling.
        seed:                     RNG seed for uniform sampling.

    Returns:
        CfrResult with strategies, expected value and exploitability.

    Examples:
        >>> result = solve(n_iterations=600, convergence_check_every=600)
        >>> result.n_iterations
        600
    """
    game = game or KuhnPoker()
    config = SolverConfig(
        iterations=n_iterations,
        sampling=sampling,
        seed=seed,
        log_every=0,
        convergence_check_every=convergence_check_every,
        exploitability_threshold=exploitability_threshold,
    ).validate()
    solver = Solver(game, config)

    exploitability = float("inf")
    converged = False
    exploitability_history: list[tuple[int, float]] = []
    regret_history: list[tuple[int, float]] = []

    while solver.iterations < n_iterations:
        chunk = min(convergence_check_every, n_iterations - solver.iterations)
        solver.train(chunk)
        exploitability = solver.exploitability()
        exploitability_history.append((solver.iterations, exploitability))
        regret_history.append((solver.iterations, solver.average_regret()))
        logger.info("iteration %d: exploitability %.6f", solver.iterations, exploitability)
        if exploitability < exploitability_threshold:
            converged = True
            break

    return CfrResult(
        game=game,
        strategy=solver.strategy_profile(),
        n_iterations=solver.iterations,
        expected_value=solver.expected_value(0),
        exploitability=exploitability,
        converged=converged,
        average_game_value=solver.average_game_value,
        exploitability_history=exploitability_history,
        regret_history=regret_history,
    )


# ─── Public strategy helpers ───────────────────────────────────────────────────


def get_bot_action(
    result: CfrResult,
    key: InfoSetKey,
    rng: np.random.Generator | None = None,
) -> str:
    """Draw an action for *key* from the equilibrium strategy.

    Falls back to a uniform draw over the legal actions when the information
    set has no entry in the strategy table.

    Args:
        result: CfrResult from solve().
        key:    Information set the bot is acting in.
        rng:    numpy Generator (a fresh unseeded one if None).

    Returns:
        The chosen action token.
    """
    rng = rng or np.random.default_rng()
    actions = result.game.legal_actions(key.history)
    probs = np.asarray(action_probabilities(result.strategy, key, actions))
    return actions[int(rng.choice(len(actions), p=probs / probs.sum()))]
