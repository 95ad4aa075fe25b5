"""Strategy heat maps for the CFR solver.

Data builders return NumPy matrices that can be used programmatically or
passed to the plot helpers:

    build_kuhn_heatmap_data(result)   — (player 1, player 2) P(bet) matrices
    build_dudo_opening_data(result)   — player 1 opening-claim probabilities

Plot functions render matplotlib figures:

    plot_strategy_heatmaps(p1, p2, title, ...)  — 1×2 figure (one per player)
    plot_kuhn_strategy_heatmaps(result, ...)    — convenience Kuhn wrapper
    plot_dudo_opening_heatmap(result, ...)      — opening claims by die face
    plot_convergence(result, ...)               — exploitability / regret curves

Kuhn matrix convention:
    Shape  : (3, 2) — rows = cards [J, Q, K],
                      cols = the player's two decision histories
                      (player 1: '--', 'cb'; player 2: 'c', 'b')
    Values : P(bet) in [0, 1]; np.nan = information set absent
"""

from __future__ import annotations

import matplotlib
import matplotlib.axes
import matplotlib.colors
import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from src.engine.dudo import CLAIMS, NUM_SIDES
from src.engine.kuhn import BET, CARD_NAMES, DECK
from src.solvers.cfr import CfrResult
from src.solvers.information_sets import InfoSetKey

# ─── Constants ────────────────────────────────────────────────────────────────

_KUHN_HISTORIES: dict[int, list[tuple[str, ...]]] = {
    0: [(), ("c", "b")],
    1: [("c",), ("b",)],
}
_KUHN_ROW_LABELS: list[str] = [CARD_NAMES[c] for c in DECK]
_KUHN_COL_LABELS: dict[int, list[str]] = {
    0: ["--", "cb"],
    1: ["c", "b"],
}
_DUDO_ROW_LABELS: list[str] = [str(face) for face in range(1, NUM_SIDES + 1)]
_DUDO_COL_LABELS: list[str] = [c.token for c in CLAIMS]
_NAN_COLOR: str = "#cccccc"


def _make_continuous_cmap() -> matplotlib.colors.Colormap:
    """RdYlGn gradient: red=0, green=1, grey=absent (NaN)."""
    cmap = matplotlib.colormaps["RdYlGn"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_CONTINUOUS_CMAP: matplotlib.colors.Colormap = _make_continuous_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def build_kuhn_heatmap_data(result: CfrResult) -> tuple[np.ndarray, np.ndarray]:
    """Return (player1_matrix, player2_matrix) of P(bet) from a Kuhn result.

    Args:
        result: CfrResult from cfr.solve() on KuhnPoker.

    Returns:
        Two float64 arrays of shape (3, 2).

    Raises:
        ValueError: If result was not trained on Kuhn poker.
    """
    if result.game.name != "kuhn":
        raise ValueError(f"Kuhn heat map needs a kuhn result, got {result.game.name!r}.")

    matrices = []
    for player in (0, 1):
        mat = np.full((len(DECK), 2), np.nan)
        for r, card in enumerate(DECK):
            for c, history in enumerate(_KUHN_HISTORIES[player]):
                probs = result.strategy.get(InfoSetKey(player, card, history))
                if probs is not None:
                    mat[r, c] = probs.get(BET, 0.0)
        matrices.append(mat)
    return matrices[0], matrices[1]


def build_dudo_opening_data(result: CfrResult) -> np.ndarray:
    """Return a (6, 12) matrix: P(opening claim) by player 1's die face.

    Raises:
        ValueError: If result was not trained on Dudo.
    """
    if result.game.name != "dudo":
        raise ValueError(f"Dudo heat map needs a dudo result, got {result.game.name!r}.")

    mat = np.full((NUM_SIDES, len(CLAIMS)), np.nan)
    for r, face in enumerate(range(1, NUM_SIDES + 1)):
        probs = result.strategy.get(InfoSetKey(0, face, ()))
        if probs is None:
            continue
        for c, claim in enumerate(CLAIMS):
            mat[r, c] = probs.get(claim.token, 0.0)
    return mat


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    row_labels: list[str],
    col_labels: list[str],
    annotate: bool = True,
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage."""
    masked = np.ma.masked_invalid(data)
    im = ax.imshow(masked, cmap=_CONTINUOUS_CMAP, vmin=0.0, vmax=1.0, aspect="auto")

    ax.set_xticks(range(len(col_labels)))
    ax.set_xticklabels(col_labels, fontsize=9)
    ax.set_yticks(range(len(row_labels)))
    ax.set_yticklabels(row_labels, fontsize=9)

    if annotate:
        for r in range(data.shape[0]):
            for c in range(data.shape[1]):
                val = data[r, c]
                if np.isnan(val):
                    continue
                text_color = "black" if 0.25 < val < 0.75 else "white"
                ax.text(c, r, f"{val:.2f}", ha="center", va="center",
                        fontsize=9, color=text_color, fontweight="bold")
    return im


def _finish(fig: matplotlib.figure.Figure, show: bool, save_path: str | None) -> None:
    plt.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_strategy_heatmaps(
    p1_data: np.ndarray,
    p2_data: np.ndarray,
    title: str,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot player 1 and player 2 Kuhn P(bet) heat maps as a 1×2 figure.

    Args:
        p1_data:   (3, 2) P(bet) array for player 1. NaN = absent.
        p2_data:   (3, 2) P(bet) array for player 2.
        title:     Figure suptitle.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(8, 4))
    fig.suptitle(title, fontsize=13, fontweight="bold")

    _render_panel(ax1, p1_data, _KUHN_ROW_LABELS, _KUHN_COL_LABELS[0])
    im2 = _render_panel(ax2, p2_data, _KUHN_ROW_LABELS, _KUHN_COL_LABELS[1])

    ax1.set_title("Player 1", fontsize=10)
    ax1.set_xlabel("History", fontsize=9)
    ax1.set_ylabel("Card", fontsize=9)
    ax2.set_title("Player 2", fontsize=10)
    ax2.set_xlabel("History", fontsize=9)

    plt.colorbar(im2, ax=ax2, label="P(bet)", fraction=0.046, pad=0.04)
    _finish(fig, show, save_path)
    return fig


def plot_kuhn_strategy_heatmaps(
    result: CfrResult,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Convenience: build Kuhn data and render P(bet) heat maps."""
    p1, p2 = build_kuhn_heatmap_data(result)
    return plot_strategy_heatmaps(
        p1,
        p2,
        f"Kuhn Poker Average Strategy  ({result.n_iterations} iterations)",
        show=show,
        save_path=save_path,
    )


def plot_dudo_opening_heatmap(
    result: CfrResult,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Render player 1's opening-claim distribution for each die face."""
    data = build_dudo_opening_data(result)
    fig, ax = plt.subplots(figsize=(11, 4.5))
    fig.suptitle("Dudo Opening Claims  (player 1)", fontsize=13, fontweight="bold")
    im = _render_panel(ax, data, _DUDO_ROW_LABELS, _DUDO_COL_LABELS, annotate=False)
    ax.set_xlabel("Claim (quantity x rank)", fontsize=9)
    ax.set_ylabel("Die face", fontsize=9)
    plt.colorbar(im, ax=ax, label="P(claim)", fraction=0.046, pad=0.04)
    _finish(fig, show, save_path)
    return fig


def plot_convergence(
    result: CfrResult,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot exploitability and average regret against iterations (log-log)."""
    fig, (ax_expl, ax_reg) = plt.subplots(1, 2, figsize=(10, 4))
    fig.suptitle(f"CFR Convergence  ({result.game.name})", fontsize=13, fontweight="bold")

    if result.exploitability_history:
        its, expl = zip(*result.exploitability_history)
        ax_expl.plot(its, expl, marker="o", color="#d62728")
    if result.regret_history:
        its, reg = zip(*result.regret_history)
        ax_reg.plot(its, reg, marker="o", color="#1f77b4")

    for ax, label in ((ax_expl, "Exploitability"), (ax_reg, "Average regret")):
        ax.set_xscale("log")
        ax.set_yscale("symlog", linthresh=1e-4)
        ax.set_xlabel("Iterations", fontsize=9)
        ax.set_ylabel(label, fontsize=9)
        ax.grid(True, alpha=0.3)

    _finish(fig, show, save_path)
    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from src.solvers.cfr import solve

    n_iter = int(sys.argv[1]) if len(sys.argv) > 1 else 10_000
    print(f"Running CFR for {n_iter} iterations …")
    result = solve(n_iterations=n_iter, convergence_check_every=max(1, n_iter // 10))

    print("Generating strategy heat maps …")
    plot_kuhn_strategy_heatmaps(result, show=False, save_path="kuhn_strategy.png")
    plot_convergence(result, show=False, save_path="kuhn_convergence.png")
    print("Saved: kuhn_strategy.png, kuhn_convergence.png")
