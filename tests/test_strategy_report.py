"""Tests for the strategy report (src/analysis/strategy_report.py).

Each print function is checked for its headers and a few known lines; the
shared session results keep the training cost down.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from src.analysis.strategy_report import (
    format_strategy_line,
    print_convergence,
    print_expected_value,
    print_strategy,
)
from src.solvers.cfr import CfrResult
from src.solvers.information_sets import InfoSetKey


# ─── format_strategy_line ─────────────────────────────────────────────────────


class TestFormatStrategyLine:
    def test_kuhn_line(self, kuhn_result: CfrResult) -> None:
        line = format_strategy_line(
            kuhn_result, InfoSetKey(0, 3, ("c", "b")), {"c": 0.0, "b": 1.0}
        )
        assert line == "Card: K, History: cb, Strategy: c 0.00% | b 100.00%"

    def test_dudo_line(self, dudo_result: CfrResult) -> None:
        line = format_strategy_line(
            dudo_result, InfoSetKey(1, 4, ("1x2",)), {"1x3": 0.25, "D": 0.75}
        )
        assert line == "Private: 4, History: 1x2, Strategy: 1x3 25.00% | D 75.00%"


# ─── print_expected_value ─────────────────────────────────────────────────────


class TestPrintExpectedValue:
    def test_headers(self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_expected_value(kuhn_result)
        out = capsys.readouterr().out
        assert "Expected Game Value (kuhn)" in out
        assert "Player 1 EV" in out
        assert "Player 2 EV" in out
        assert "Exploitability" in out

    def test_player_values_are_negatives(
        self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture
    ) -> None:
        print_expected_value(kuhn_result)
        out = capsys.readouterr().out
        assert f"{kuhn_result.expected_value:+.4f}" in out
        assert f"{-kuhn_result.expected_value:+.4f}" in out


# ─── print_strategy ───────────────────────────────────────────────────────────


class TestPrintStrategy:
    def test_all_kuhn_rows(self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy(kuhn_result)
        out = capsys.readouterr().out
        assert "Player 1 Strategy  (6 information sets)" in out
        assert "Player 2 Strategy  (6 information sets)" in out
        assert out.count("Card: ") == 12
        assert "more" not in out

    def test_rows_ordered_by_card(
        self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture
    ) -> None:
        print_strategy(kuhn_result)
        out = capsys.readouterr().out
        assert out.index("Card: J, History: --") < out.index("Card: Q, History: --")
        assert out.index("Card: Q, History: --") < out.index("Card: K, History: --")

    def test_max_rows_truncates(self, dudo_result: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy(dudo_result, max_rows=5)
        out = capsys.readouterr().out
        assert out.count("Private: ") == 10
        assert "more" in out


# ─── print_convergence ────────────────────────────────────────────────────────


class TestPrintConvergence:
    def test_one_row_per_check(self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_convergence(kuhn_result)
        out = capsys.readouterr().out
        assert "Convergence" in out
        for iteration, _ in kuhn_result.exploitability_history:
            assert f"{iteration:>10}" in out

    def test_no_checks(self, kuhn_result: CfrResult, capsys: pytest.CaptureFixture) -> None:
        empty = replace(kuhn_result, exploitability_history=[], regret_history=[])
        print_convergence(empty)
        assert "(no convergence checks recorded)" in capsys.readouterr().out
