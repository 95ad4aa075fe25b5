"""Policy evaluation, best response and exploitability for fixed strategy profiles.

A strategy profile maps InfoSetKey → {action: probability}. Information sets
missing from the profile are played uniformly, which is what an untrained
solver would do there.

    profile_value(game, profile, player)
        — exact expected value for *player* when both sides follow profile,
          averaged over every chance outcome.
    best_response_value(game, profile, br_player)
        — value br_player earns by best-responding to the other side's
          profile strategy.
    compute_exploitability(game, profile)
        — best_response_value(.., 0) + best_response_value(.., 1).
          Zero exactly at a Nash equilibrium, positive otherwise.

The best response fixes the responder's private value and carries a weight
per possible opponent private value down the tree (chance probability times
the opponent's reach). At each of the responder's decision points the action
with the highest weighted value is taken; since the responder cannot see the
opponent's value, that one choice covers every opponent value at once.
"""

from __future__ import annotations

import math
from collections import Counter

from src.engine.game import Game, History
from src.solvers.information_sets import InfoSetKey

StrategyProfile = dict[InfoSetKey, dict[str, float]]


def action_probabilities(
    profile: StrategyProfile,
    key: InfoSetKey,
    actions: list[str],
) -> list[float]:
    """Return probabilities for *actions* at *key*; uniform if key is absent."""
    probs = profile.get(key)
    if probs is None:
        return [1.0 / len(actions)] * len(actions)
    return [probs.get(a, 0.0) for a in actions]


# ─── On-policy value ──────────────────────────────────────────────────────────


def _policy_value(
    game: Game,
    profile: StrategyProfile,
    deal: tuple[int, int],
    history: History,
    player: int,
) -> float:
    mover = len(history) % 2
    if game.is_terminal(history):
        u = game.terminal_utility(history, deal[mover], deal[1 - mover])
        return u if mover == player else -u

    actions = game.legal_actions(history)
    key = InfoSetKey(player=mover, private=deal[mover], history=history)
    value = 0.0
    for action, p in zip(actions, action_probabilities(profile, key, actions), strict=True):
        if p > 0.0:
            value += p * _policy_value(game, profile, deal, history + (action,), player)
    return value


def profile_value(game: Game, profile: StrategyProfile, player: int = 0) -> float:
    """Expected value of the game for *player* under *profile*.

    Enumerates every chance outcome (all equally likely) and traverses the
    tree with the profile's strategies. Read-only: the profile is not touched.
    """
    outcomes = game.chance_outcomes()
    total = 0.0
    for deal in outcomes:
        total += _policy_value(game, profile, deal, (), player)
    return total / len(outcomes)


# ─── Best response ────────────────────────────────────────────────────────────


def _best_response(
    game: Game,
    profile: StrategyProfile,
    br_player: int,
    mine: int,
    history: History,
    weights: dict[int, float],
) -> dict[int, float]:
    """Per-opponent-value payoff to br_player under best-response play."""
    mover = len(history) % 2
    if game.is_terminal(history):
        if mover == br_player:
            return {o: game.terminal_utility(history, mine, o) for o in weights}
        return {o: -game.terminal_utility(history, o, mine) for o in weights}

    actions = game.legal_actions(history)

    if mover == br_player:
        best: dict[int, float] = {}
        best_val = -math.inf
        for action in actions:
            child = _best_response(game, profile, br_player, mine, history + (action,), weights)
            val = sum(weights[o] * child[o] for o in weights)
            if val > best_val:
                best, best_val = child, val
        return best

    # Opponent node: the opponent's strategy depends on its own private value.
    probs_by_opp = {
        o: action_probabilities(
            profile, InfoSetKey(player=mover, private=o, history=history), actions
        )
        for o in weights
    }
    result = dict.fromkeys(weights, 0.0)
    for i, action in enumerate(actions):
        child_weights = {o: weights[o] * probs_by_opp[o][i] for o in weights}
        child = _best_response(
            game, profile, br_player, mine, history + (action,), child_weights
        )
        for o in weights:
            result[o] += probs_by_opp[o][i] * child[o]
    return result


def best_response_value(game: Game, profile: StrategyProfile, br_player: int) -> float:
    """Value br_player achieves by best-responding to the opponent's profile."""
    outcomes = game.chance_outcomes()
    prob = 1.0 / len(outcomes)

    opp_by_mine: dict[int, Counter] = {}
    for deal in outcomes:
        opp_by_mine.setdefault(deal[br_player], Counter())[deal[1 - br_player]] += 1

    total = 0.0
    for mine, opp_counts in sorted(opp_by_mine.items()):
        weights = {o: prob * n for o, n in opp_counts.items()}
        values = _best_response(game, profile, br_player, mine, (), weights)
        total += sum(weights[o] * values[o] for o in weights)
    return total


def compute_exploitability(game: Game, profile: StrategyProfile) -> float:
    """Total exploitability of *profile*: sum of both best-response values.

    At a Nash equilibrium br(0) = v and br(1) = -v, so the sum is 0.

    Examples:
        >>> from src.engine.kuhn import KuhnPoker
        >>> compute_exploitability(KuhnPoker(), {}) > 0   # uniform play
        True
    """
    br0 = best_response_value(game, profile, 0)
    br1 = best_response_value(game, profile, 1)
    return max(0.0, br0 + br1)
