"""
Information sets and the store that owns them for one CFR training run.

An information set (infoset) is a decision point as seen by the player to
move: their own private value plus the public action history. Two histories
that the acting player cannot tell apart share one infoset and therefore one
strategy.

    InfoSetKey            — (player, private, history) NamedTuple; hashable and
                            collision-free by construction
    InformationSet        — regret_sum / strategy / strategy_sum arrays for one key
    InformationSetStore   — lazily grown table key → InformationSet

Regret matching
~~~~~~~~~~~~~~~
The current strategy is proportional to the positive part of the cumulative
regret. When no action has positive regret the strategy is uniform. The same
uniform fallback applies to the average strategy when strategy_sum is all
zero; a zero-sum vector is never an error.

Invariants
~~~~~~~~~~
  - action_count is fixed when the infoset is created.
  - strategy is always a probability distribution.
  - regret_sum and strategy_sum only ever accumulate within one run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from src.engine.game import History, MalformedHistory

logger = logging.getLogger(__name__)


# ─── Keys ─────────────────────────────────────────────────────────────────────

class InfoSetKey(NamedTuple):
    """Identity of one information set.

    Player identity is implied by len(history) parity but is kept explicit so
    reports can group by player without re-deriving it.

    Attributes:
        player:  Index of the acting player (0 acts first).
        private: Acting player's private value (card rank or die face).
        history: Public action history, one token per action.

    Example:
        >>> InfoSetKey(player=1, private=3, history=('c',))
        InfoSetKey(player=1, private=3, history=('c',))
    """
    player: int
    private: int
    history: History


def make_key(private: tuple[int, int], history: History) -> InfoSetKey:
    """Build the key for the player to move at *history*.

    Examples:
        >>> make_key((3, 1), ('b',))
        InfoSetKey(player=1, private=1, history=('b',))
    """
    player = len(history) % 2
    return InfoSetKey(player=player, private=private[player], history=tuple(history))


# ─── Regret matching ──────────────────────────────────────────────────────────

def normalise(values: np.ndarray) -> np.ndarray:
    """Scale a non-negative vector to sum to 1; uniform if it sums to 0.

    Examples:
        >>> normalise(np.array([1.0, 3.0])).tolist()
        [0.25, 0.75]
        >>> normalise(np.zeros(4)).tolist()
        [0.25, 0.25, 0.25, 0.25]
    """
    total = float(values.sum())
    if total <= 0.0:
        return np.full(values.shape[0], 1.0 / values.shape[0])
    return values / total


def regret_matching(regret_sum: np.ndarray) -> np.ndarray:
    """Return the strategy proportional to positive cumulative regret.

    Examples:
        >>> regret_matching(np.array([-5.0, 2.0])).tolist()
        [0.0, 1.0]
    """
    return normalise(np.maximum(regret_sum, 0.0))


# ─── Information set ──────────────────────────────────────────────────────────

@dataclass
class InformationSet:
    """Regret-matching state for one information set.

    Attributes:
        key:          InfoSetKey this record belongs to.
        actions:      Legal action tokens, in the game's order.
        regret_sum:   Cumulative counterfactual regret per action.
        strategy:     Current-iteration behavioural strategy.
        strategy_sum: Reach-weighted cumulative strategy (for averaging).
    """

    key: InfoSetKey
    actions: tuple[str, ...]
    regret_sum: np.ndarray = field(init=False, repr=False)
    strategy: np.ndarray = field(init=False, repr=False)
    strategy_sum: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        n = len(self.actions)
        if n == 0:
            raise MalformedHistory(f"Information set {self.key} has no legal actions.")
        self.regret_sum = np.zeros(n)
        self.strategy = np.full(n, 1.0 / n)
        self.strategy_sum = np.zeros(n)

    @property
    def action_count(self) -> int:
        return len(self.actions)

    def current_strategy(self, reach_self: float) -> np.ndarray:
        """Refresh the strategy by regret matching and accumulate it.

        Args:
            reach_self: Acting player's own reach probability; weights the
                        contribution to strategy_sum.

        Returns:
            The new current strategy (a view owned by this infoset).
        """
        self.strategy = regret_matching(self.regret_sum)
        self.strategy_sum += reach_self * self.strategy
        return self.strategy

    def update_regrets(
        self,
        action_utils: np.ndarray,
        node_util: float,
        reach_opponent: float,
    ) -> None:
        """Vanilla CFR regret update.

        R[a] += reach_opponent × (u(a) − u(node))
        """
        self.regret_sum += reach_opponent * (action_utils - node_util)

    def average_strategy(self) -> np.ndarray:
        """Normalised strategy_sum; uniform if nothing was accumulated."""
        return normalise(self.strategy_sum)

    def average_strategy_dict(self) -> dict[str, float]:
        avg = self.average_strategy()
        return {a: float(p) for a, p in zip(self.actions, avg, strict=True)}


# ─── Store ────────────────────────────────────────────────────────────────────

class InformationSetStore:
    """Owns every InformationSet created during one training run."""

    def __init__(self) -> None:
        self._entries: dict[InfoSetKey, InformationSet] = {}

    def get_or_create(self, key: InfoSetKey, actions: list[str] | tuple[str, ...]) -> InformationSet:
        """Return the infoset for *key*, creating it on first visit.

        Raises:
            MalformedHistory: If key already exists with a different number
                              of legal actions.
        """
        node = self._entries.get(key)
        if node is None:
            node = InformationSet(key=key, actions=tuple(actions))
            self._entries[key] = node
            logger.debug("Created information set %s (%d actions)", key, node.action_count)
        elif node.action_count != len(actions):
            raise MalformedHistory(
                f"Information set {key} has {node.action_count} actions, "
                f"got {len(actions)}."
            )
        return node

    def get(self, key: InfoSetKey) -> InformationSet:
        """Return an existing infoset. Raises KeyError if never created."""
        return self._entries[key]

    def all_entries(self) -> list[tuple[InfoSetKey, InformationSet]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
