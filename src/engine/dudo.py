"""
Two-dice Dudo: a claim/challenge bluffing game.

Each player rolls one six-sided die in secret. Face 1 is wild and counts
toward every rank. Players alternately either raise the standing claim
"there are at least <quantity> dice showing <rank>" or challenge it by
calling "dudo" ('D'), which ends the hand.

Claims follow a fixed strict total order (wild rank 1 is highest within each
quantity):

    1x2 < 1x3 < 1x4 < 1x5 < 1x6 < 1x1 < 2x2 < 2x3 < 2x4 < 2x5 < 2x6 < 2x1

A new claim must be strictly above the standing one. The challenge is only
legal once at least one claim has been made.

Scoring at a challenge (to the challenged claimant, who is the player to move
at the terminal history):

    count = dice matching the claimed rank or the wild face (both players)
    diff  = count - quantity
    diff > 0  →  diff       (claim understated)
    diff < 0  →  -diff      (claim overstated)
    diff == 0 →  1          (exact claim)
"""

from __future__ import annotations

from typing import NamedTuple

from .game import Deal, Game, History, MalformedHistory

NUM_SIDES: int = 6
NUM_DICE: int = 2
WILD: int = 1
DUDO: str = "D"


class Claim(NamedTuple):
    """A claim of at least *quantity* dice showing *rank*.

    Example:
        >>> Claim(quantity=2, rank=5).token
        '2x5'
    """
    quantity: int
    rank: int

    @property
    def token(self) -> str:
        return f"{self.quantity}x{self.rank}"


# Ranks in claim order within one quantity: 2..6 then the wild face.
_RANK_ORDER: tuple[int, ...] = (2, 3, 4, 5, 6, WILD)

CLAIMS: tuple[Claim, ...] = tuple(
    Claim(quantity=q, rank=r) for q in range(1, NUM_DICE + 1) for r in _RANK_ORDER
)
NUM_CLAIMS: int = len(CLAIMS)

_CLAIM_INDEX: dict[str, int] = {c.token: i for i, c in enumerate(CLAIMS)}


def parse_claim(token: str) -> Claim:
    """Return the Claim for a claim token.

    Raises:
        MalformedHistory: If token is not a claim token.

    Examples:
        >>> parse_claim('1x6')
        Claim(quantity=1, rank=6)
    """
    try:
        return CLAIMS[_CLAIM_INDEX[token]]
    except KeyError:
        raise MalformedHistory(f"dudo: unknown claim token {token!r}") from None


def count_matching(dice: tuple[int, ...], rank: int) -> int:
    """Count dice showing *rank* or the wild face.

    Examples:
        >>> count_matching((1, 1), 6)
        2
        >>> count_matching((3, 5), 5)
        1
    """
    return sum(1 for d in dice if d == rank or d == WILD)


def score_challenge(claim: Claim, dice: tuple[int, ...]) -> float:
    """Score a challenged claim from the claimant's perspective."""
    diff = count_matching(dice, claim.rank) - claim.quantity
    if diff > 0:
        return float(diff)
    if diff < 0:
        return float(-diff)
    return 1.0


class Dudo(Game):
    """Two-player, one-die-each Dudo game model."""

    name = "dudo"

    def validate_history(self, history: History) -> None:
        last = -1
        for i, token in enumerate(history):
            if token == DUDO:
                if last < 0:
                    raise MalformedHistory(f"dudo: challenge before any claim in {history!r}")
                if i != len(history) - 1:
                    raise MalformedHistory(f"dudo: action after challenge in {history!r}")
                continue
            if token not in _CLAIM_INDEX:
                raise MalformedHistory(f"dudo: unknown action {token!r} in {history!r}")
            idx = _CLAIM_INDEX[token]
            if idx <= last:
                raise MalformedHistory(
                    f"dudo: claim {token!r} does not raise {CLAIMS[last].token!r}"
                )
            last = idx

    def _legal_actions(self, history: History) -> list[str]:
        last = _CLAIM_INDEX[history[-1]] if history else -1
        actions = [c.token for c in CLAIMS[last + 1:]]
        if history:
            actions.append(DUDO)
        return actions

    def _is_terminal(self, history: History) -> bool:
        return bool(history) and history[-1] == DUDO

    def _utility(self, history: History, private_to_move: int, private_other: int) -> float:
        claim = parse_claim(history[-2])
        return score_challenge(claim, (private_to_move, private_other))

    def chance_outcomes(self) -> list[Deal]:
        """All 36 ordered rolls of two dice, lexicographic order."""
        return [(a, b) for a in range(1, NUM_SIDES + 1) for b in range(1, NUM_SIDES + 1)]

    def all_actions(self) -> list[str]:
        return [c.token for c in CLAIMS] + [DUDO]

    def format_history(self, history: History) -> str:
        return " ".join(history) if history else "--"
