"""
Unit tests for the profit ledger.
"""

import logging
from pathlib import Path

from roundtrip.core.types import ProfitEstimate
from roundtrip.strategy.calculator import evaluate_profit
from roundtrip.telemetry.ledger import LEDGER_LOGGER_NAME, ProfitLedger, format_entry


class TestFormatEntry:
    """Tests for ledger line formatting."""

    def test_gross_and_net(self) -> None:
        """Test the GROSS / NET layout."""
        line = format_entry(evaluate_profit(1.0, 1.035, 0.01))

        assert line.startswith("GROSS: 0.035000 - NET: 0.025000")
        assert "IN: 1.000000 OUT: 1.035000" in line
        assert "TX" not in line

    def test_negative_net(self) -> None:
        """Test a round trip that cleared the gain check but not the fee."""
        line = format_entry(ProfitEstimate(1.0, 1.001, 0.001, -0.009))

        assert "NET: -0.009000" in line

    def test_transaction_ids(self) -> None:
        """Test that known transaction ids are appended."""
        line = format_entry(evaluate_profit(1.0, 1.035, 0.01), ("sig1", None, "sig2"))

        assert line.endswith("| TX: sig1,sig2")


class TestProfitLedger:
    """Tests for ProfitLedger."""

    def test_record_writes_line(self, ledger: ProfitLedger, ledger_path: Path) -> None:
        """Test that a recorded round trip lands in the file."""
        ledger.record(evaluate_profit(1.0, 1.035, 0.01), ("sig1", "sig2"))
        ledger.stop()

        lines = ledger_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        assert "GROSS: 0.035000 - NET: 0.025000" in lines[0]
        assert lines[0].endswith("TX: sig1,sig2")
        assert ledger.entries == 1

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """Test that a missing log directory is created."""
        path = tmp_path / "a" / "b" / "profits.log"
        ledger = ProfitLedger(path)

        ledger.start()
        ledger.stop()

        assert path.parent.is_dir()

    def test_appends_across_sessions(self, ledger_path: Path) -> None:
        """Test that restarting never truncates earlier entries."""
        first = ProfitLedger(ledger_path)
        first.record(evaluate_profit(1.0, 1.02, 0.0))
        first.stop()

        second = ProfitLedger(ledger_path)
        second.record(evaluate_profit(1.0, 1.03, 0.0))
        second.stop()

        lines = ledger_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert "GROSS: 0.020000" in lines[0]
        assert "GROSS: 0.030000" in lines[1]

    def test_does_not_propagate(self, ledger: ProfitLedger) -> None:
        """Test that ledger lines stay out of the application log."""
        assert logging.getLogger(LEDGER_LOGGER_NAME).propagate is False

    def test_stop_is_idempotent(self, ledger: ProfitLedger) -> None:
        """Test stopping twice."""
        ledger.stop()
        ledger.stop()
