"""
Tests for bankgen_core.batch_writer.

Batch slicing, retry termination, progress reporting and the
no-rollback behaviour on failure.
"""

import os
import sys
from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bankgen_core.adapters.memory import MemoryAdapter
from bankgen_core.batch_writer import BatchWriteError, BatchWriter, iter_batches
from bankgen_core.config import MAX_RETRIES
from bankgen_core.schema_defs import ColumnDef, ColumnType, TableDef

WIDGETS = TableDef(
    schema="test",
    name="widgets",
    columns=[
        ColumnDef("id", ColumnType.STRING, is_pk=True, nullable=False),
        ColumnDef("label", ColumnType.STRING),
    ],
)


@dataclass(frozen=True)
class Widget:
    id: str
    label: str

    def to_row(self):
        return (self.id, self.label)


def widgets(n):
    return [Widget(id=f"w{i:05d}", label=f"widget {i}") for i in range(n)]


class FlakyAdapter(MemoryAdapter):
    """Memory adapter whose inserts fail on selected calls."""

    def __init__(self, fail_calls):
        super().__init__()
        self.fail_calls = set(fail_calls)

    def bulk_insert(self, table_fqn, columns, rows, skip_duplicates=True):
        if self.insert_calls in self.fail_calls:
            self.insert_calls += 1
            raise ConnectionError("connection reset")
        return super().bulk_insert(table_fqn, columns, rows, skip_duplicates)


def no_sleep(seconds):
    pass


# ============================================================
# iter_batches
# ============================================================


class TestIterBatches:
    def test_sizes(self):
        assert [len(b) for b in iter_batches(list(range(2500)), 1000)] == [1000, 1000, 500]

    def test_order_preserved(self):
        batches = list(iter_batches(list(range(7)), 3))
        assert batches == [[0, 1, 2], [3, 4, 5], [6]]

    def test_empty(self):
        assert list(iter_batches([], 10)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(iter_batches([1], 0))


# ============================================================
# BatchWriter.write
# ============================================================


class TestBatchWriter:
    def test_one_insert_per_batch(self):
        adapter = MagicMock()
        adapter.bulk_insert.side_effect = lambda fqn, cols, rows, skip_duplicates: len(rows)
        writer = BatchWriter(adapter, batch_size=1000, sleep=no_sleep)

        written = writer.write(WIDGETS, widgets(2500), phase="widgets")

        assert written == 2500
        sizes = [len(c.args[2]) for c in adapter.bulk_insert.call_args_list]
        assert sizes == [1000, 1000, 500]
        for c in adapter.bulk_insert.call_args_list:
            assert c.args[0] == "test.widgets"
            assert list(c.args[1]) == ["id", "label"]
            assert c.kwargs["skip_duplicates"] is True

    def test_progress_is_cumulative(self):
        progress = MagicMock()
        writer = BatchWriter(MemoryAdapter(), batch_size=1000, progress=progress, sleep=no_sleep)

        writer.write(WIDGETS, widgets(2500), phase="widgets")

        assert [c.args for c in progress.update.call_args_list] == [
            ("widgets", 1000),
            ("widgets", 2000),
            ("widgets", 2500),
        ]

    def test_progress_offset(self):
        progress = MagicMock()
        writer = BatchWriter(MemoryAdapter(), batch_size=10, progress=progress, sleep=no_sleep)

        writer.write(WIDGETS, widgets(5), phase="widgets", already_written=20)

        progress.update.assert_called_once_with("widgets", 25)

    @pytest.mark.parametrize("failures", [1, 2, MAX_RETRIES])
    def test_transient_failures_recovered(self, failures):
        adapter = FlakyAdapter(fail_calls=range(failures))
        sleeps = []
        writer = BatchWriter(adapter, batch_size=100, sleep=sleeps.append)

        assert writer.write(WIDGETS, widgets(250), phase="widgets") == 250
        assert adapter.count("test.widgets") == 250
        assert len(sleeps) == failures

    def test_exhausted_retries_fail_batch(self):
        # batch 0 succeeds, batch 1 fails on every attempt
        adapter = FlakyAdapter(fail_calls=range(1, 1 + MAX_RETRIES + 1))
        writer = BatchWriter(adapter, batch_size=100, sleep=no_sleep)

        with pytest.raises(BatchWriteError) as exc_info:
            writer.write(WIDGETS, widgets(250), phase="widgets")

        err = exc_info.value
        assert err.batch_index == 1
        assert err.written == 100
        assert err.table == "test.widgets"
        assert isinstance(err.__cause__, ConnectionError)
        # no rollback of the committed batch, nothing after the failure
        assert adapter.count("test.widgets") == 100
        assert adapter.insert_calls == 1 + MAX_RETRIES + 1

    def test_fixed_retry_delay(self):
        adapter = FlakyAdapter(fail_calls=[0, 1])
        sleeps = []
        writer = BatchWriter(adapter, batch_size=10, sleep=sleeps.append)
        writer.write(WIDGETS, widgets(3), phase="widgets")
        assert sleeps == [1.0, 1.0]

    def test_batch_index_continues_across_calls(self):
        adapter = FlakyAdapter(fail_calls=range(100))
        writer = BatchWriter(adapter, batch_size=10, max_retries=0, sleep=no_sleep)

        with pytest.raises(BatchWriteError) as exc_info:
            writer.write(WIDGETS, widgets(10), phase="widgets", already_written=30)

        assert exc_info.value.batch_index == 3

    def test_duplicates_skipped(self):
        adapter = MemoryAdapter()
        writer = BatchWriter(adapter, batch_size=2, sleep=no_sleep)
        records = widgets(3)

        writer.write(WIDGETS, records, phase="widgets")
        writer.write(WIDGETS, records, phase="widgets")

        assert adapter.count("test.widgets") == 3

    def test_empty_records(self):
        adapter = MagicMock()
        writer = BatchWriter(adapter, batch_size=10)
        assert writer.write(WIDGETS, [], phase="widgets") == 0
        adapter.bulk_insert.assert_not_called()
