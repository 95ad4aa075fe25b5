"""
Kuhn poker: the three-card sequential betting game.

Both players ante 1 chip and receive one card from the deck {J, Q, K}
(encoded 1, 2, 3). Play alternates starting with player 0. A player can
check ('c') or bet ('b') 1 chip. Passing after a bet folds and hands the pot
to the bettor; two passes or two bets go to showdown, higher card wins.

    P0      P1      P0      Result
    check   check           +1 to the higher card
    check   bet     check   +1 to P1 (P0 folds)
    check   bet     bet     +2 to the higher card
    bet     check           +1 to P0 (P1 folds)
    bet     bet             +2 to the higher card

Utilities are reported to the player to move at the terminal history. At a
fold ('bc', 'cbc') that is always the bettor, who wins 1.

The game value for player 0 at equilibrium is -1/18.
"""

from __future__ import annotations

from itertools import permutations

from .game import Deal, Game, History, MalformedHistory

CHECK: str = "c"
BET: str = "b"
ACTIONS: tuple[str, ...] = (CHECK, BET)

DECK: tuple[int, ...] = (1, 2, 3)
CARD_NAMES: dict[int, str] = {1: "J", 2: "Q", 3: "K"}

TERMINAL_HISTORIES: frozenset[str] = frozenset({"cc", "bb", "bc", "cbc", "cbb"})
MAX_HISTORY_LENGTH: int = 3

# Equilibrium value of the game for the first player.
GAME_VALUE: float = -1.0 / 18.0


class KuhnPoker(Game):
    """Three-card Kuhn poker game model."""

    name = "kuhn"

    def validate_history(self, history: History) -> None:
        if len(history) > MAX_HISTORY_LENGTH:
            raise MalformedHistory(f"kuhn: history too long: {history!r}")
        for i, token in enumerate(history):
            if token not in ACTIONS:
                raise MalformedHistory(f"kuhn: unknown action {token!r} in {history!r}")
            if i > 0 and "".join(history[:i]) in TERMINAL_HISTORIES:
                raise MalformedHistory(f"kuhn: action after terminal prefix in {history!r}")

    def _legal_actions(self, history: History) -> list[str]:
        return list(ACTIONS)

    def _is_terminal(self, history: History) -> bool:
        return "".join(history) in TERMINAL_HISTORIES

    def _utility(self, history: History, private_to_move: int, private_other: int) -> float:
        h = "".join(history)
        # Bet then fold: the player to move is the bettor.
        if h.endswith("bc"):
            return 1.0
        win = 1.0 if private_to_move > private_other else -1.0
        if h == "cc":
            return win
        return 2.0 * win

    def chance_outcomes(self) -> list[Deal]:
        """Six ordered deals of two distinct cards, lexicographic order.

        Examples:
            >>> KuhnPoker().chance_outcomes()[:2]
            [(1, 2), (1, 3)]
        """
        return [(a, b) for a, b in permutations(DECK, 2)]

    def all_actions(self) -> list[str]:
        return list(ACTIONS)

    def format_private(self, value: int) -> str:
        return CARD_NAMES.get(value, str(value))
