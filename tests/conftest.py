"""
Shared pytest fixtures for the CFR solver tests.

Training is the slow part of the suite, so the trained Kuhn solver and the
solve() result are session-scoped and shared read-only across modules.
"""

from __future__ import annotations

import logging

import pytest

from src.config import SolverConfig
from src.engine.dudo import Dudo
from src.engine.kuhn import KuhnPoker
from src.solvers.cfr import CfrResult, Solver, solve

# Long enough for the Kuhn average strategy to sit close to equilibrium.
KUHN_TRAINING_ITERATIONS: int = 30_000


def quiet_config(**overrides) -> SolverConfig:
    """SolverConfig with progress logging switched off."""
    return SolverConfig(log_every=0).with_overrides(**overrides)


@pytest.fixture
def kuhn() -> KuhnPoker:
    return KuhnPoker()


@pytest.fixture
def dudo() -> Dudo:
    return Dudo()


@pytest.fixture(scope="session")
def trained_kuhn_solver() -> Solver:
    """Kuhn solver trained once for the whole session. Do not train further."""
    solver = Solver(KuhnPoker(), quiet_config())
    solver.train(KUHN_TRAINING_ITERATIONS)
    return solver


@pytest.fixture(scope="session")
def kuhn_result() -> CfrResult:
    """Small solve() result with two convergence checks."""
    return solve(KuhnPoker(), n_iterations=600, convergence_check_every=300)


@pytest.fixture(scope="session")
def dudo_result() -> CfrResult:
    """Dudo solve() result after a handful of iterations."""
    return solve(Dudo(), n_iterations=2, convergence_check_every=2)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
