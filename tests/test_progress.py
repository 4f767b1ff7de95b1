"""
Tests for bankgen_core.progress.ProgressReporter.
"""

import io
import os
import sys
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bankgen_core.progress import ProgressReporter


class TestProgressReporter:
    def test_cumulative_updates(self):
        stream = io.StringIO()
        reporter = ProgressReporter(stream=stream)
        reporter.start("accounts", total=300)
        reporter.update("accounts", 100)
        reporter.update("accounts", 300)

        assert reporter.completed["accounts"] == 300
        assert reporter._bars["accounts"].n == 300
        reporter.close()
        assert "Accounts" in stream.getvalue()

    def test_disabled_still_counts(self):
        reporter = ProgressReporter(enabled=False)
        reporter.start("customers", total=10)
        reporter.update("customers", 10)
        assert reporter.completed["customers"] == 10
        reporter.close()

    def test_update_without_start(self):
        reporter = ProgressReporter(enabled=False)
        reporter.update("transactions", 5)
        assert reporter.completed["transactions"] == 5

    def test_phases_are_independent(self):
        reporter = ProgressReporter(enabled=False)
        reporter.start("customers", total=2)
        reporter.start("accounts", total=4)
        reporter.update("customers", 2)
        reporter.update("accounts", 1)
        assert reporter.completed == {"customers": 2, "accounts": 1}
        reporter.close()

    def test_restart_resets_counter(self):
        reporter = ProgressReporter(enabled=False)
        reporter.start("accounts", total=5)
        reporter.update("accounts", 5)
        reporter.start("accounts", total=5)
        assert reporter.completed["accounts"] == 0
        reporter.close()


class TestRenderingErrors:
    """Rendering failures are logged and never raised."""

    def test_bar_creation_failure(self, monkeypatch, caplog):
        def broken_tqdm(*args, **kwargs):
            raise OSError("terminal gone")

        monkeypatch.setattr("bankgen_core.progress.tqdm", broken_tqdm)
        reporter = ProgressReporter()

        with caplog.at_level("WARNING"):
            reporter.start("customers", total=10)
            reporter.update("customers", 5)

        assert reporter.completed["customers"] == 5
        assert "terminal gone" in caplog.text

    def test_bar_update_failure(self, caplog):
        reporter = ProgressReporter(enabled=False)
        bar = MagicMock(n=0)
        bar.update.side_effect = BrokenPipeError("stdout closed")
        reporter._bars["accounts"] = bar

        with caplog.at_level("WARNING"):
            reporter.update("accounts", 10)

        assert reporter.completed["accounts"] == 10
        assert "stdout closed" in caplog.text

    def test_close_failure(self, caplog):
        reporter = ProgressReporter(enabled=False)
        bar = MagicMock()
        bar.close.side_effect = ValueError("I/O operation on closed file")
        reporter._bars["accounts"] = bar

        with caplog.at_level("WARNING"):
            reporter.close()

        assert "closed file" in caplog.text
