"""
Runtime configuration for CFR training runs.

SolverConfig is an immutable bundle of training knobs. Defaults suit a full
Kuhn poker solve; SolverConfig.from_env() lets a caller override them through
environment variables (handy for CI, where a smaller run is wanted):

    CFR_ITERATIONS   — int, training iterations
    CFR_SAMPLING     — 'enumerate' or 'uniform'
    CFR_SEED         — int, RNG seed for uniform sampling
    CFR_LOG_EVERY    — int, progress log interval (0 disables)

Unparseable environment values fall back to the default rather than raising;
explicit overrides passed in code are validated strictly.

The game registry (GAMES / make_game) lives here too so every entry point
resolves game names the same way.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

from src.engine.chance import SAMPLING_POLICIES
from src.engine.dudo import Dudo
from src.engine.game import Game
from src.engine.kuhn import KuhnPoker

GAMES: dict[str, type[Game]] = {
    "kuhn": KuhnPoker,
    "dudo": Dudo,
}


def make_game(name: str) -> Game:
    """Instantiate a registered game by name.

    Raises:
        ValueError: If name is not registered.
    """
    try:
        return GAMES[name]()
    except KeyError:
        raise ValueError(f"Unknown game {name!r}; expected one of {sorted(GAMES)}.") from None


def _env_int(name: str, default: int | None) -> int | None:
    val = os.getenv(name)
    if val is None:
        return default
    s = val.strip()
    if (s.startswith("-") and s[1:].isdigit()) or s.isdigit():
        return int(s)
    return default


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    val = os.getenv(name)
    if val is None:
        return default
    v = val.strip().lower()
    return v if v in choices else default


@dataclass(frozen=True)
class SolverConfig:
    """Training configuration.

    Attributes:
        iterations:               CFR iterations for a full run.
        sampling:                 Chance-sampling policy ('enumerate' / 'uniform').
        seed:                     RNG seed for uniform sampling (None = fresh entropy).
        log_every:                Log training progress every N iterations; 0 = never.
        convergence_check_every:  solve() computes exploitability every N iterations.
        exploitability_threshold: solve() stops early once exploitability drops below.
    """

    iterations: int = 100_000
    sampling: str = "enumerate"
    seed: int | None = None
    log_every: int = 10_000
    convergence_check_every: int = 10_000
    exploitability_threshold: float = 0.0

    def validate(self) -> SolverConfig:
        """Return self, raising ValueError on out-of-range fields."""
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations}.")
        if self.sampling not in SAMPLING_POLICIES:
            raise ValueError(
                f"Unknown sampling policy {self.sampling!r}; expected one of {SAMPLING_POLICIES}."
            )
        if self.log_every < 0:
            raise ValueError(f"log_every must be non-negative, got {self.log_every}.")
        if self.convergence_check_every <= 0:
            raise ValueError(
                f"convergence_check_every must be positive, got {self.convergence_check_every}."
            )
        if self.exploitability_threshold < 0.0:
            raise ValueError("exploitability_threshold must be non-negative.")
        return self

    def with_overrides(self, **overrides: Any) -> SolverConfig:
        return replace(self, **overrides).validate()

    @classmethod
    def from_env(cls, overrides: dict[str, Any] | None = None) -> SolverConfig:
        """Build a config from defaults, environment variables, then *overrides*."""
        base = cls()
        cfg = replace(
            base,
            iterations=_env_int("CFR_ITERATIONS", base.iterations),
            sampling=_env_choice("CFR_SAMPLING", base.sampling, SAMPLING_POLICIES),
            seed=_env_int("CFR_SEED", base.seed),
            log_every=_env_int("CFR_LOG_EVERY", base.log_every),
        )
        if overrides:
            cfg = replace(cfg, **overrides)
        return cfg.validate()
