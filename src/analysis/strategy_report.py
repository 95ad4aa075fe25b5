"""Strategy report for the CFR solver.

Three public functions format a CfrResult into human-readable tables:

    print_expected_value(result) — game value for both players, exploitability
    print_strategy(result)       — average strategy per information set
    print_convergence(result)    — exploitability / regret at each check

Players are printed 1-based ("Player 1" acts first), matching how the games
are usually described.
"""

from __future__ import annotations

from src.solvers.cfr import CfrResult
from src.solvers.information_sets import InfoSetKey

_WIDTH: int = 56


def _header(title: str) -> None:
    print("=" * _WIDTH)
    print(title)
    print("=" * _WIDTH)


def _sorted_rows(result: CfrResult, player: int) -> list[tuple[InfoSetKey, dict[str, float]]]:
    rows = [(k, v) for k, v in result.strategy.items() if k.player == player]
    rows.sort(key=lambda kv: (kv[0].private, len(kv[0].history), kv[0].history))
    return rows


def format_strategy_line(result: CfrResult, key: InfoSetKey, probs: dict[str, float]) -> str:
    """Format one information set as a single report line.

    Example:
        Card: K, History: cb, Strategy: c 0.00% | b 100.00%
    """
    game = result.game
    label = "Card" if game.name == "kuhn" else "Private"
    mix = " | ".join(f"{action} {p * 100:.2f}%" for action, p in probs.items())
    return (
        f"{label}: {game.format_private(key.private)}, "
        f"History: {game.format_history(key.history)}, "
        f"Strategy: {mix}"
    )


# ─── Public report functions ──────────────────────────────────────────────────

def print_expected_value(result: CfrResult) -> None:
    """Print the equilibrium value for both players and exploitability.

    Args:
        result: CfrResult returned by cfr.solve().
    """
    _header(f"Expected Game Value ({result.game.name})")
    print(f"  Player 1 EV:     {result.expected_value:+.4f}")
    print(f"  Player 2 EV:     {-result.expected_value:+.4f}")
    print(f"  Exploitability:  {result.exploitability:.6f}")
    print(f"  Iterations:      {result.n_iterations}")
    print(f"  Training value:  {result.average_game_value:+.4f}  (mean root utility)")
    print(f"  Converged:       {'yes' if result.converged else 'no'}")
    print()


def print_strategy(result: CfrResult, max_rows: int | None = None) -> None:
    """Print the average strategy for every information set, per player.

    Args:
        result:   CfrResult returned by cfr.solve().
        max_rows: Optional cap on rows printed per player (Dudo has
                  thousands of information sets).
    """
    for player in (0, 1):
        rows = _sorted_rows(result, player)
        _header(f"Player {player + 1} Strategy  ({len(rows)} information sets)")
        shown = rows if max_rows is None else rows[:max_rows]
        for key, probs in shown:
            print(f"  {format_strategy_line(result, key, probs)}")
        if len(shown) < len(rows):
            print(f"  ... {len(rows) - len(shown)} more")
        print()


def print_convergence(result: CfrResult) -> None:
    """Print exploitability and average regret at each convergence check."""
    _header("Convergence")
    print(f"  {'Iteration':>10}  {'Exploitability':>14}  {'Avg regret':>12}")
    print(f"  {'---------':>10}  {'--------------':>14}  {'----------':>12}")
    regrets = dict(result.regret_history)
    if not result.exploitability_history:
        print("  (no convergence checks recorded)")
    for iteration, expl in result.exploitability_history:
        regret = regrets.get(iteration, float("nan"))
        print(f"  {iteration:>10}  {expl:>14.6f}  {regret:>12.6f}")
    print()
