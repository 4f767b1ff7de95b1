"""
End-to-end tests for bankgen_core.runner.GenerationRunner.

Runs the whole pipeline against the in-memory adapter and a real DuckDB
database, with a thread pool standing in for worker processes.
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bankgen_core.adapters.duckdb import DuckDBAdapter
from bankgen_core.adapters.memory import MemoryAdapter
from bankgen_core.config import GenerationConfig
from bankgen_core.generators import generate_chunk
from bankgen_core.progress import ProgressReporter
from bankgen_core.runner import GenerationRunner, RunState
from bankgen_core.schema_defs import ACCOUNTS, CUSTOMERS, TRANSACTIONS
from bankgen_core.schema_manager import SchemaManager
from bankgen_core.stages.base import derive_seed
from bankgen_core.worker_pool import WorkerPool

# ============================================================
# Fixtures
# ============================================================


def thread_pool(workers=3, worker=generate_chunk):
    return WorkerPool(worker_count=workers, worker=worker, executor_factory=ThreadPoolExecutor)


def make_runner(adapter, pool=None, **overrides):
    settings = {"total_customers": 60, "batch_size": 25, "seed": 42, "retry_delay_seconds": 0}
    settings.update(overrides)
    return GenerationRunner(
        adapter,
        GenerationConfig(**settings),
        progress=ProgressReporter(enabled=False),
        pool=pool or thread_pool(),
        sleep=lambda s: None,
    )


class FailingInsertAdapter(MemoryAdapter):
    """Rejects every insert into one table."""

    def __init__(self, table_fqn):
        super().__init__()
        self.failing_table = table_fqn

    def bulk_insert(self, table_fqn, columns, rows, skip_duplicates=True):
        if table_fqn == self.failing_table:
            self.insert_calls += 1
            raise IOError("disk full")
        return super().bulk_insert(table_fqn, columns, rows, skip_duplicates)


@pytest.fixture
def duckdb_adapter():
    adapter = DuckDBAdapter(":memory:")
    SchemaManager(adapter).initialize()
    yield adapter
    adapter.close()


def assert_referential_integrity(adapter):
    customer_ids = set(adapter.list_ids(CUSTOMERS.fqn))
    account_owners = adapter.list_ids(ACCOUNTS.fqn, column="customer_id")
    account_ids = set(adapter.list_ids(ACCOUNTS.fqn))
    txn_accounts = adapter.list_ids(TRANSACTIONS.fqn, column="account_id")

    assert set(account_owners) <= customer_ids
    assert set(txn_accounts) <= account_ids


# ============================================================
# Successful runs
# ============================================================


class TestSuccessfulRun:
    def test_memory_end_to_end(self):
        adapter = MemoryAdapter()
        result = make_runner(adapter).run()

        assert result.status == "SUCCESS"
        assert result.succeeded
        assert result.state == RunState.DONE
        assert result.customers == 60
        assert 60 <= result.accounts <= 180
        assert result.accounts <= result.transactions <= result.accounts * 10
        assert result.completed_phases == [
            "clearing",
            "customers",
            "accounts",
            "transactions",
            "finalize",
        ]
        assert result.failed_phase is None
        assert result.error is None
        assert result.seed == 42
        assert_referential_integrity(adapter)

    def test_every_parent_gets_children(self):
        adapter = MemoryAdapter()
        make_runner(adapter).run()

        owners = set(adapter.list_ids(ACCOUNTS.fqn, column="customer_id"))
        assert owners == set(adapter.list_ids(CUSTOMERS.fqn))

    def test_duckdb_end_to_end(self, duckdb_adapter):
        result = make_runner(duckdb_adapter).run()

        assert result.status == "SUCCESS"
        assert result.customers == duckdb_adapter.count(CUSTOMERS.fqn) == 60
        assert result.accounts == duckdb_adapter.count(ACCOUNTS.fqn)
        assert result.transactions == duckdb_adapter.count(TRANSACTIONS.fqn)
        assert_referential_integrity(duckdb_adapter)

        indexes = duckdb_adapter.conn.execute("SELECT index_name FROM duckdb_indexes()").fetchall()
        assert "transactions_account_id_idx" in {row[0] for row in indexes}

    def test_rerun_clears_previous_data(self, duckdb_adapter):
        make_runner(duckdb_adapter).run()
        result = make_runner(duckdb_adapter, total_customers=10, seed=7).run()

        assert result.status == "SUCCESS"
        assert duckdb_adapter.count(CUSTOMERS.fqn) == 10

    def test_keep_existing_appends(self):
        adapter = MemoryAdapter()
        first = make_runner(adapter, total_customers=10, seed=1).run()
        result = make_runner(adapter, total_customers=10, seed=2, clear_existing=False).run()

        assert "clearing" not in result.completed_phases
        assert result.customers == 20
        assert result.written["customers"] == 10
        # children are generated for every stored parent, old and new
        assert result.written["accounts"] == result.accounts - first.accounts
        assert set(adapter.list_ids(ACCOUNTS.fqn, column="customer_id")) == set(
            adapter.list_ids(CUSTOMERS.fqn)
        )

    def test_same_seed_same_ids(self):
        first, second = MemoryAdapter(), MemoryAdapter()
        make_runner(first).run()
        make_runner(second).run()

        for table in (CUSTOMERS, ACCOUNTS, TRANSACTIONS):
            assert first.list_ids(table.fqn) == second.list_ids(table.fqn)

    def test_generated_seed_reported(self):
        result = make_runner(MemoryAdapter(), seed=None, total_customers=5).run()
        assert isinstance(result.seed, int)

    def test_account_sampling(self):
        adapter = MemoryAdapter()
        make_runner(adapter, total_customers=100, account_sample_rate=0.1).run()

        owners = set(adapter.list_ids(ACCOUNTS.fqn, column="customer_id"))
        assert len(owners) == 10

    def test_zero_customers(self):
        result = make_runner(MemoryAdapter(), total_customers=0).run()
        assert result.status == "SUCCESS"
        assert (result.customers, result.accounts, result.transactions) == (0, 0, 0)

    def test_stage_metrics_recorded(self):
        result = make_runner(MemoryAdapter(), total_customers=5).run()
        names = [m.stage_name for m in result.stage_metrics]
        assert names == ["clearing", "customers", "accounts", "transactions", "finalize"]
        assert all(m.ended_at is not None for m in result.stage_metrics)
        assert result.stage_metrics[1].rows_affected == 5

    def test_index_failure_is_a_warning(self):
        adapter = MemoryAdapter()
        adapter.create_index = MagicMock(side_effect=RuntimeError("not supported"))
        result = make_runner(adapter, total_customers=5).run()

        assert result.status == "SUCCESS"
        assert result.warnings
        assert "not supported" in result.warnings[0]

    def test_indexes_skipped_when_disabled(self):
        adapter = MemoryAdapter()
        adapter.create_index = MagicMock()
        make_runner(adapter, total_customers=5, create_indexes=False).run()
        adapter.create_index.assert_not_called()

    def test_progress_closed(self):
        progress = MagicMock()
        runner = GenerationRunner(
            MemoryAdapter(),
            GenerationConfig(total_customers=5, seed=1),
            progress=progress,
            pool=thread_pool(),
        )
        runner.run()
        progress.close.assert_called_once()
        started = [c.args[0] for c in progress.start.call_args_list]
        assert started == ["customers", "accounts", "transactions"]


# ============================================================
# Failed runs
# ============================================================


class TestFailedRun:
    def test_batch_failure_halts_run(self):
        adapter = FailingInsertAdapter(ACCOUNTS.fqn)
        result = make_runner(adapter, max_retries=2).run()

        assert result.status == "FAILED"
        assert result.state == RunState.FAILED
        assert result.failed_phase == "accounts"
        assert "failed after retries" in result.error
        assert result.completed_phases == ["clearing", "customers"]
        assert result.written == {"customers": 60}
        assert result.customers == 60
        # customers stay committed, transactions never start
        assert adapter.count(CUSTOMERS.fqn) == 60
        assert adapter.count(TRANSACTIONS.fqn) == 0
        # first accounts batch: one attempt plus two retries
        assert adapter.insert_calls == 60 // 25 + 1 + 3

    def test_worker_failure_halts_run(self):
        def broken_worker(task):
            raise MemoryError("worker ran out of memory")

        adapter = MemoryAdapter()
        result = make_runner(adapter, pool=thread_pool(worker=broken_worker)).run()

        assert result.status == "FAILED"
        assert result.failed_phase == "accounts"
        assert "worker ran out of memory" in result.error
        assert adapter.count(ACCOUNTS.fqn) == 0

    def test_clearing_failure(self):
        adapter = MemoryAdapter()
        adapter.delete_all = MagicMock(side_effect=RuntimeError("locked"))
        result = make_runner(adapter).run()

        assert result.failed_phase == "clearing"
        assert result.completed_phases == []


class TestDeriveSeed:
    def test_stable(self):
        assert derive_seed(1, "accounts", 0) == derive_seed(1, "accounts", 0)

    def test_varies_by_phase_and_chunk(self):
        seeds = {
            derive_seed(1, "accounts", 0),
            derive_seed(1, "accounts", 1),
            derive_seed(1, "transactions", 0),
            derive_seed(2, "accounts", 0),
        }
        assert len(seeds) == 4
