"""Interactive Plotly strategy lookup for the CFR solver.

Four public functions:

    build_strategy_lookup_figure(result, player, max_rows)
        — heatmap for any game: rows = information sets, cols = actions,
          cells = average-strategy probability (blank where illegal).
    build_kuhn_lookup_figure(result)
        — 1×2 Kuhn P(bet) panels (player 1 / player 2).
    build_convergence_figure(result)
        — exploitability and average regret per convergence check.
    save_lookup_html(fig, path)
        — export any figure to a self-contained HTML file.

Hover over any cell to see the information set (private value, history) and
the action probability.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from src.analysis.heat_maps import build_kuhn_heatmap_data
from src.engine.kuhn import CARD_NAMES, DECK
from src.solvers.cfr import CfrResult
from src.solvers.information_sets import InfoSetKey

_COLORSCALE: str = "RdYlGn"

_KUHN_ROW_LABELS: list[str] = [CARD_NAMES[c] for c in DECK]
_KUHN_COL_LABELS: dict[int, list[str]] = {0: ["--", "cb"], 1: ["c", "b"]}


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _row_label(result: CfrResult, key: InfoSetKey) -> str:
    game = result.game
    return (
        f"P{key.player + 1} {game.format_private(key.private)} | "
        f"{game.format_history(key.history)}"
    )


def _to_plotly_z(data: np.ndarray) -> list[list[float | None]]:
    """NaN → None so Plotly renders blank cells."""
    return [[None if np.isnan(v) else v for v in row] for row in data.tolist()]


def build_strategy_matrix(
    result: CfrResult,
    player: int | None = None,
    max_rows: int | None = None,
) -> tuple[np.ndarray, list[InfoSetKey], list[str]]:
    """Return (matrix, row keys, column actions) for the lookup figure.

    Args:
        result:   CfrResult from cfr.solve().
        player:   0 or 1 to restrict rows to one player; None for both.
        max_rows: Optional cap on the number of rows.

    Returns:
        matrix of shape (rows, actions) with probabilities and NaN for
        actions not legal at that information set.
    """
    keys = sorted(
        (k for k in result.strategy if player is None or k.player == player),
        key=lambda k: (k.player, k.private, len(k.history), k.history),
    )
    if max_rows is not None:
        keys = keys[:max_rows]
    actions = result.game.all_actions()
    col = {a: j for j, a in enumerate(actions)}

    mat = np.full((len(keys), len(actions)), np.nan)
    for i, key in enumerate(keys):
        for action, p in result.strategy[key].items():
            mat[i, col[action]] = p
    return mat, keys, actions


# ─── Public figure builders ───────────────────────────────────────────────────


def build_strategy_lookup_figure(
    result: CfrResult,
    player: int | None = None,
    max_rows: int | None = 60,
) -> go.Figure:
    """Build an interactive heatmap of the average strategy.

    Args:
        result:   CfrResult from cfr.solve().
        player:   Restrict to one player (0 or 1); None shows both.
        max_rows: Row cap (Dudo has thousands of information sets).

    Returns:
        go.Figure with a single heatmap trace.
    """
    mat, keys, actions = build_strategy_matrix(result, player=player, max_rows=max_rows)
    row_labels = [_row_label(result, k) for k in keys]

    hover: list[list[str]] = []
    for i, label in enumerate(row_labels):
        row = []
        for j, action in enumerate(actions):
            val = mat[i, j]
            if np.isnan(val):
                row.append("")
            else:
                row.append(f"Info set: <b>{label}</b><br>Action: {action}<br>P: <b>{val:.3f}</b>")
        hover.append(row)

    fig = go.Figure(
        go.Heatmap(
            z=_to_plotly_z(mat),
            x=actions,
            y=row_labels,
            colorscale=_COLORSCALE,
            zmin=0.0,
            zmax=1.0,
            text=hover,
            hovertemplate="%{text}<extra></extra>",
            colorbar={"title": "P(action)"},
            name="strategy",
        )
    )
    who = "both players" if player is None else f"player {player + 1}"
    fig.update_layout(
        title_text=f"{result.game.name.capitalize()} Average Strategy — {who}",
        title_font_size=15,
        height=max(320, 18 * len(row_labels) + 140),
    )
    fig.update_yaxes(autorange="reversed", title_text="Information set")
    fig.update_xaxes(title_text="Action")
    return fig


def build_kuhn_lookup_figure(result: CfrResult) -> go.Figure:
    """Build a 1×2 Kuhn P(bet) figure (player 1, player 2)."""
    p1, p2 = build_kuhn_heatmap_data(result)
    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Player 1", "Player 2"],
        horizontal_spacing=0.12,
    )
    for col, (data, player) in enumerate(((p1, 0), (p2, 1)), start=1):
        hover = [
            [
                "" if np.isnan(data[r, c]) else
                f"Card: <b>{_KUHN_ROW_LABELS[r]}</b><br>"
                f"History: {_KUHN_COL_LABELS[player][c]}<br>"
                f"P(bet): <b>{data[r, c]:.3f}</b>"
                for c in range(data.shape[1])
            ]
            for r in range(data.shape[0])
        ]
        fig.add_trace(
            go.Heatmap(
                z=_to_plotly_z(data),
                x=_KUHN_COL_LABELS[player],
                y=_KUHN_ROW_LABELS,
                colorscale=_COLORSCALE,
                zmin=0.0,
                zmax=1.0,
                text=hover,
                hovertemplate="%{text}<extra></extra>",
                showscale=col == 2,
                colorbar={"title": "P(bet)"},
                name=f"Player {player + 1}",
            ),
            row=1,
            col=col,
        )
    fig.update_layout(
        title_text="Kuhn Poker Strategy Lookup — P(bet)",
        title_font_size=15,
        height=380,
        width=760,
    )
    fig.update_yaxes(title_text="Card", col=1)
    fig.update_xaxes(title_text="History")
    return fig


def build_convergence_figure(result: CfrResult) -> go.Figure:
    """Exploitability and average regret against iterations (log x-axis)."""
    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Exploitability", "Average regret"],
        horizontal_spacing=0.12,
    )
    for col, (series, name) in enumerate(
        ((result.exploitability_history, "Exploitability"),
         (result.regret_history, "Average regret")),
        start=1,
    ):
        its = [it for it, _ in series]
        vals = [v for _, v in series]
        fig.add_trace(go.Scatter(x=its, y=vals, mode="lines+markers", name=name), row=1, col=col)
    fig.update_xaxes(type="log", title_text="Iterations")
    fig.update_layout(
        title_text=f"CFR Convergence — {result.game.name}",
        title_font_size=15,
        height=380,
    )
    return fig


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Write *fig* to a self-contained HTML file (plotly.js inlined)."""
    fig.write_html(path, include_plotlyjs=True, full_html=True)
