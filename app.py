"""CFR Solver — Streamlit Dashboard.

Three-tab interactive dashboard for exploring trained equilibrium strategies:
  Tab 1 — Strategy Heat Maps   (matplotlib: Kuhn P(bet) / Dudo opening claims)
  Tab 2 — Interactive Lookup   (Plotly strategy table, convergence, bot move)
  Tab 3 — Strategy Report      (expected value, strategy tables, convergence)

Run:
    PYTHONPATH=. streamlit run app.py
"""

from __future__ import annotations

import contextlib
import io

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="CFR Solver",
    page_icon="🎲",
    layout="wide",
)

# ─── Lazy imports (inside functions to keep startup fast) ─────────────────────


@st.cache_resource
def _load_analysis_modules():
    """Import analysis modules once (cached for the process lifetime)."""
    import numpy as np

    from src.analysis.heat_maps import (
        plot_convergence,
        plot_dudo_opening_heatmap,
        plot_kuhn_strategy_heatmaps,
    )
    from src.analysis.plotly_lookup import (
        build_convergence_figure,
        build_kuhn_lookup_figure,
        build_strategy_lookup_figure,
    )
    from src.analysis.strategy_report import (
        print_convergence,
        print_expected_value,
        print_strategy,
    )
    from src.solvers.cfr import get_bot_action

    return {
        "np": np,
        "plot_kuhn_strategy_heatmaps": plot_kuhn_strategy_heatmaps,
        "plot_dudo_opening_heatmap": plot_dudo_opening_heatmap,
        "plot_convergence": plot_convergence,
        "build_strategy_lookup_figure": build_strategy_lookup_figure,
        "build_kuhn_lookup_figure": build_kuhn_lookup_figure,
        "build_convergence_figure": build_convergence_figure,
        "print_expected_value": print_expected_value,
        "print_strategy": print_strategy,
        "print_convergence": print_convergence,
        "get_bot_action": get_bot_action,
    }


@st.cache_resource
def _run_cfr(game_name: str, n_iterations: int, sampling: str, seed: int):
    """Run the CFR solver and cache the result per parameter set."""
    from src.config import make_game
    from src.solvers.cfr import solve

    return solve(
        make_game(game_name),
        n_iterations=n_iterations,
        convergence_check_every=max(1, n_iterations // 10),
        sampling=sampling,
        seed=seed,
    )


# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🎲 CFR Solver")
    st.markdown("---")

    game_name = st.selectbox("Game", options=["kuhn", "dudo"], index=0)

    if game_name == "kuhn":
        n_iterations = st.slider(
            "CFR iterations", min_value=1_000, max_value=200_000, value=20_000, step=1_000
        )
    else:
        n_iterations = st.slider(
            "CFR iterations", min_value=10, max_value=2_000, value=100, step=10
        )

    sampling = st.selectbox("Chance sampling", options=["enumerate", "uniform"], index=0)
    seed = int(st.number_input("Seed (uniform sampling)", min_value=0, value=0, step=1))

    run_cfr = st.button("Run CFR Solver", type="primary")

    st.markdown("---")
    st.caption("Vanilla CFR — Kuhn poker & two-dice Dudo")

# ─── CFR solver result ────────────────────────────────────────────────────────

state_key = f"cfr_result_cached_{game_name}"
cfr_result = None
if run_cfr or state_key in st.session_state:
    with st.spinner(f"Running CFR on {game_name} ({n_iterations} iterations) …"):
        cfr_result = _run_cfr(game_name, n_iterations, sampling, seed)
    st.session_state[state_key] = True
    st.sidebar.success(
        f"CFR done — P1 EV: {cfr_result.expected_value:+.4f} | "
        f"Exploitability: {cfr_result.exploitability:.4f}"
    )

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3 = st.tabs(
    [
        "Strategy Heat Maps",
        "Interactive Lookup",
        "Strategy Report",
    ]
)

m = _load_analysis_modules()

# ── Tab 1: Strategy Heat Maps ─────────────────────────────────────────────────

with tab1:
    st.header("Strategy Heat Maps")
    if cfr_result is not None:
        if game_name == "kuhn":
            st.caption("Rows = card | Cols = decision history | Cell = P(bet)")
            st.pyplot(m["plot_kuhn_strategy_heatmaps"](cfr_result, show=False))
        else:
            st.caption("Rows = die face | Cols = opening claim | Cell = P(claim)")
            st.pyplot(m["plot_dudo_opening_heatmap"](cfr_result, show=False))

        st.markdown("---")
        st.subheader("Convergence")
        st.pyplot(m["plot_convergence"](cfr_result, show=False))
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the strategy heat maps.")

# ── Tab 2: Interactive Lookup ─────────────────────────────────────────────────

with tab2:
    st.header("Interactive Strategy Lookup")
    if cfr_result is not None:
        if game_name == "kuhn":
            st.plotly_chart(m["build_kuhn_lookup_figure"](cfr_result), use_container_width=True)
        player_choice = st.radio("Player", options=[1, 2], horizontal=True)
        st.plotly_chart(
            m["build_strategy_lookup_figure"](cfr_result, player=player_choice - 1),
            use_container_width=True,
        )

        st.markdown("---")
        st.subheader("Bot move")
        keys = sorted(
            (k for k in cfr_result.strategy if k.player == player_choice - 1),
            key=lambda k: (k.private, len(k.history), k.history),
        )
        game = cfr_result.game
        labels = [
            f"{game.format_private(k.private)} | {game.format_history(k.history)}" for k in keys
        ]
        if labels:
            choice = st.selectbox("Information set", options=range(len(keys)),
                                  format_func=lambda i: labels[i])
            if st.button("Draw bot action"):
                rng = m["np"].random.default_rng()
                action = m["get_bot_action"](cfr_result, keys[choice], rng)
                st.success(f"Bot plays **{action}**")

        st.markdown("---")
        st.plotly_chart(m["build_convergence_figure"](cfr_result), use_container_width=True)

        import pandas as pd

        regrets = dict(cfr_result.regret_history)
        conv_rows = [
            {
                "Iteration": it,
                "Exploitability": f"{expl:.6f}",
                "Avg regret": f"{regrets.get(it, float('nan')):.6f}",
            }
            for it, expl in cfr_result.exploitability_history
        ]
        st.dataframe(pd.DataFrame(conv_rows), use_container_width=True, hide_index=True)
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the interactive lookup.")

# ── Tab 3: Strategy Report ────────────────────────────────────────────────────

with tab3:
    st.header("Strategy Report")
    if cfr_result is not None:
        max_rows = None if game_name == "kuhn" else 40
        for section_fn, label, kwargs in [
            (m["print_expected_value"], "Expected Game Value", {}),
            (m["print_strategy"], "Average Strategy", {"max_rows": max_rows}),
            (m["print_convergence"], "Convergence", {}),
        ]:
            st.subheader(label)
            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                section_fn(cfr_result, **kwargs)
            st.code(buf.getvalue(), language=None)
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the strategy report.")
