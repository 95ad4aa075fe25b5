"""
Game-model contract shared by every concrete game the CFR solver can train on.

A game model is a set of pure functions over a public action history:

    legal_actions(history)        — ordered action tokens legal at history
    legal_action_count(history)   — len(legal_actions(history))
    is_terminal(history)          — True iff history ends the hand
    terminal_utility(history, private_to_move, private_other)
                                  — payoff to the player to move at a terminal
    chance_outcomes()             — every private-information assignment

Histories are tuples of string tokens. Players alternate strictly by history
length: even length → player 0 (first to act), odd length → player 1. The
player "to move" at a terminal history is the one who would act next, so the
player who made the final action is always the opponent of the player whose
utility is reported.

Contract violations raise GameError subclasses and are never recovered from.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

# Public action history: one token per action since the start of the hand.
History = tuple[str, ...]

# Private information per player: (player 0 value, player 1 value).
Deal = tuple[int, int]

NUM_PLAYERS: int = 2


# ─── Errors ───────────────────────────────────────────────────────────────────

class GameError(ValueError):
    """Base class for game-model contract violations."""


class InvalidTerminalAccess(GameError):
    """Utility was requested for a history that does not end the hand."""


class MalformedHistory(GameError):
    """History does not correspond to any reachable game state."""


# ─── Helpers ──────────────────────────────────────────────────────────────────

def player_to_move(history: History) -> int:
    """Return the index (0 or 1) of the player who acts at *history*.

    Examples:
        >>> player_to_move(())
        0
        >>> player_to_move(('c',))
        1
    """
    return len(history) % NUM_PLAYERS


def opponent(player: int) -> int:
    return 1 - player


# ─── Abstract game ────────────────────────────────────────────────────────────

class Game(ABC):
    """Two-player zero-sum game with one private value per player."""

    name: str = ""
    num_players: int = NUM_PLAYERS

    @abstractmethod
    def validate_history(self, history: History) -> None:
        """Raise MalformedHistory if *history* is not reachable."""

    @abstractmethod
    def _legal_actions(self, history: History) -> list[str]:
        """Legal actions at an already-validated, non-terminal history."""

    @abstractmethod
    def _is_terminal(self, history: History) -> bool:
        """Terminal test on an already-validated history."""

    @abstractmethod
    def _utility(self, history: History, private_to_move: int, private_other: int) -> float:
        """Payoff at an already-validated terminal history."""

    @abstractmethod
    def chance_outcomes(self) -> list[Deal]:
        """All equally likely private-information assignments, sorted."""

    @abstractmethod
    def all_actions(self) -> list[str]:
        """Every action token the game can ever use, in canonical order."""

    def legal_actions(self, history: History) -> list[str]:
        """Return the ordered legal action tokens at *history*.

        Raises:
            MalformedHistory: If history is unreachable or already terminal.
        """
        history = tuple(history)
        self.validate_history(history)
        if self._is_terminal(history):
            raise MalformedHistory(
                f"{self.name}: no actions after terminal history {self.format_history(history)!r}"
            )
        return self._legal_actions(history)

    def legal_action_count(self, history: History) -> int:
        return len(self.legal_actions(history))

    def is_terminal(self, history: History) -> bool:
        history = tuple(history)
        self.validate_history(history)
        return self._is_terminal(history)

    def terminal_utility(
        self,
        history: History,
        private_to_move: int,
        private_other: int,
    ) -> float:
        """Return the payoff to the player to move at a terminal *history*.

        Args:
            history:         Terminal action history.
            private_to_move: Private value of the player to move at history.
            private_other:   Private value of that player's opponent.

        Raises:
            InvalidTerminalAccess: If history does not end the hand.
            MalformedHistory:      If history is unreachable.
        """
        history = tuple(history)
        self.validate_history(history)
        if not self._is_terminal(history):
            raise InvalidTerminalAccess(
                f"{self.name}: terminal_utility called on non-terminal history "
                f"{self.format_history(history)!r}"
            )
        return self._utility(history, private_to_move, private_other)

    def format_history(self, history: History) -> str:
        return "".join(history) if history else "--"

    def format_private(self, value: int) -> str:
        return str(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
