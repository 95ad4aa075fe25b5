"""Command-line entry point: train a CFR solver and print the strategy report.

Run:
    python -m src.cli --game kuhn --iterations 100000
    python -m src.cli --game dudo --iterations 200 --max-rows 20
"""

from __future__ import annotations

import argparse
import logging
import sys

from src.analysis.strategy_report import (
    print_convergence,
    print_expected_value,
    print_strategy,
)
from src.config import GAMES, SolverConfig, make_game
from src.engine.chance import SAMPLING_POLICIES
from src.log import setup_logging
from src.solvers.cfr import solve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    config = SolverConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="cfr-solve",
        description="Solve a small two-player zero-sum game with vanilla CFR.",
    )
    parser.add_argument("--game", choices=sorted(GAMES), default="kuhn")
    parser.add_argument("--iterations", type=int, default=config.iterations)
    parser.add_argument("--sampling", choices=SAMPLING_POLICIES, default=config.sampling)
    parser.add_argument("--seed", type=int, default=config.seed)
    parser.add_argument(
        "--check-every",
        type=int,
        default=None,
        help="Exploitability check interval (default: iterations / 10).",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=config.exploitability_threshold,
        help="Stop early once exploitability drops below this value.",
    )
    parser.add_argument("--max-rows", type=int, default=None, help="Rows per player in the report.")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    if args.iterations <= 0:
        logger.error("--iterations must be positive, got %d", args.iterations)
        return 2
    check_every = args.check_every or max(1, args.iterations // 10)

    game = make_game(args.game)
    result = solve(
        game,
        n_iterations=args.iterations,
        convergence_check_every=check_every,
        exploitability_threshold=args.threshold,
        sampling=args.sampling,
        seed=args.seed,
    )

    print_expected_value(result)
    print_strategy(result, max_rows=args.max_rows)
    print_convergence(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
