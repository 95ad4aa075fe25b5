"""
Chance sampling: which private-information deal each CFR iteration trains on.

Two policies:

    EnumerationSampler — cycles deterministically through the game's chance
                         outcomes in lexicographic order (the same order as
                         repeated lexicographic permutation advance), so after
                         k·N draws every one of the N outcomes has been seen
                         exactly k times. No randomness.
    UniformSampler     — draws an outcome uniformly at random each iteration
                         from a seeded numpy Generator.

Use make_sampler(game, policy, seed) to build one by name.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .game import Deal, Game

SAMPLING_POLICIES: tuple[str, ...] = ("enumerate", "uniform")


class ChanceSampler:
    """Supplies one chance outcome per training iteration."""

    def __init__(self, outcomes: Sequence[Deal]) -> None:
        if not outcomes:
            raise ValueError("Chance sampler needs at least one outcome.")
        self.outcomes: tuple[Deal, ...] = tuple(outcomes)

    def next_outcome(self) -> Deal:
        raise NotImplementedError


class EnumerationSampler(ChanceSampler):
    """Deterministic round-robin over all chance outcomes.

    Examples:
        >>> s = EnumerationSampler([(1, 2), (2, 1)])
        >>> [s.next_outcome() for _ in range(3)]
        [(1, 2), (2, 1), (1, 2)]
    """

    def __init__(self, outcomes: Sequence[Deal]) -> None:
        super().__init__(outcomes)
        self._position = 0

    def next_outcome(self) -> Deal:
        outcome = self.outcomes[self._position]
        self._position = (self._position + 1) % len(self.outcomes)
        return outcome


class UniformSampler(ChanceSampler):
    """Independent uniform draw per iteration."""

    def __init__(self, outcomes: Sequence[Deal], seed: int | None = None) -> None:
        super().__init__(outcomes)
        self._rng = np.random.default_rng(seed)

    def next_outcome(self) -> Deal:
        return self.outcomes[int(self._rng.integers(len(self.outcomes)))]


def make_sampler(game: Game, policy: str = "enumerate", seed: int | None = None) -> ChanceSampler:
    """Build a chance sampler for *game*.

    Args:
        game:   Game whose chance_outcomes() are sampled.
        policy: 'enumerate' (deterministic cycling) or 'uniform' (random).
        seed:   RNG seed for the uniform policy; ignored by 'enumerate'.

    Raises:
        ValueError: If policy is not a known sampling policy.
    """
    if policy == "enumerate":
        return EnumerationSampler(game.chance_outcomes())
    if policy == "uniform":
        return UniformSampler(game.chance_outcomes(), seed=seed)
    raise ValueError(f"Unknown sampling policy {policy!r}; expected one of {SAMPLING_POLICIES}.")
