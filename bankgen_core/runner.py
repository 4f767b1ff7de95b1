"""
Generation runner - sequences the bulk load phases.

Works with any storage adapter. The phases are implemented in
bankgen_core.stages:
- ClearingStage: delete existing transactions, accounts, customers
- CustomerStage: generate customers on the control thread
- AccountStage / TransactionStage: fan out to the worker pool, then batch write
- FinalizeStage: performance indexes and persisted counts
"""

import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from .adapters.base import StorageAdapter
from .batch_writer import BatchWriter
from .config import GenerationConfig
from .logger_utils import get_logger
from .progress import ProgressReporter
from .retry import fixed_delay
from .stages.base import StageContext
from .stages.cleanup import ClearingStage
from .stages.finalize import FinalizeStage
from .stages.generation import AccountStage, CustomerStage, TransactionStage
from .worker_pool import WorkerPool


class RunState(Enum):
    IDLE = "IDLE"
    CLEARING_DATA = "CLEARING_DATA"
    GENERATING_CUSTOMERS = "GENERATING_CUSTOMERS"
    GENERATING_ACCOUNTS = "GENERATING_ACCOUNTS"
    GENERATING_TRANSACTIONS = "GENERATING_TRANSACTIONS"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class StageMetric:
    """Timing metric for a processing stage."""

    stage_name: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    rows_affected: int = 0

    @property
    def duration_seconds(self) -> float:
        if self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return 0.0


@dataclass
class RunResult:
    """Result of a generation run."""

    run_id: str
    status: str
    state: RunState
    customers: int = 0
    accounts: int = 0
    transactions: int = 0
    duration_seconds: float = 0.0
    seed: Optional[int] = None
    failed_phase: Optional[str] = None
    error: Optional[str] = None
    completed_phases: List[str] = field(default_factory=list)
    # Rows inserted by this run; the totals above are persisted counts on success
    written: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    stage_metrics: List[StageMetric] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCESS"


class GenerationRunner:
    """
    Orchestrates a bulk generation run.

    Example:
        from bankgen_core import GenerationRunner, GenerationConfig
        from bankgen_core.adapters.duckdb import DuckDBAdapter

        adapter = DuckDBAdapter("bank.duckdb")
        result = GenerationRunner(adapter, GenerationConfig(total_customers=1000)).run()
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        config: Optional[GenerationConfig] = None,
        progress: Optional[ProgressReporter] = None,
        pool: Optional[WorkerPool] = None,
        writer: Optional[BatchWriter] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize runner with a storage adapter.

        Args:
            adapter: Storage adapter (DuckDB, memory)
            config: Generation settings (defaults to GenerationConfig())
            progress: Progress reporter (defaults to an enabled tqdm reporter)
            pool: Worker pool (defaults to one sized by ``config.workers``)
            writer: Batch writer (defaults to one built from ``config``)
            sleep: Override for the retry delay sleep, used by tests
        """
        self.adapter = adapter
        self.config = config or GenerationConfig()
        self.progress = progress or ProgressReporter()
        self.pool = pool or WorkerPool(worker_count=self.config.workers)
        writer_kwargs = {"sleep": sleep} if sleep is not None else {}
        self.writer = writer or BatchWriter(
            adapter,
            batch_size=self.config.batch_size,
            max_retries=self.config.max_retries,
            delay=fixed_delay(self.config.retry_delay_seconds),
            progress=self.progress,
            **writer_kwargs,
        )
        self.run_id: Optional[str] = None
        self.state = RunState.IDLE
        self._stage_metrics: List[StageMetric] = []
        self._warnings: List[str] = []
        self._completed: List[str] = []
        self.logger = get_logger("GenerationRunner")

    def run(self) -> RunResult:
        """
        Execute the full generation pipeline.

        Returns:
            RunResult with status, counts and metrics. Failures are reported
            through the result, not raised.
        """
        config = self.config
        self.run_id = f"gen_{uuid.uuid4().hex[:12]}"
        start_time = datetime.now()
        self.state = RunState.IDLE
        self._warnings = []
        self._stage_metrics = []
        self._completed = []
        written: Dict[str, int] = {}

        seed = config.seed if config.seed is not None else random.SystemRandom().getrandbits(63)
        self.logger.info(
            f"Starting generation run for {config.total_customers:,} customers (seed={seed})",
            extra={"run_id": self.run_id, "event": "run_start", "workers": self.pool.worker_count},
        )

        ctx = StageContext(
            adapter=self.adapter,
            config=config,
            run_id=self.run_id,
            seed=seed,
            reference=start_time.replace(microsecond=0),
            logger=self.logger,
            writer=self.writer,
            pool=self.pool,
            progress=self.progress,
            warnings=self._warnings,
        )

        current = None
        try:
            # 1. Clear existing data
            if config.clear_existing:
                current = self._enter(RunState.CLEARING_DATA, "clearing")
                deleted = ClearingStage(ctx).run()
                self._finish(current, sum(deleted.values()))
            else:
                self.logger.info("Keeping existing data", extra={"run_id": self.run_id})

            # 2. Customers
            current = self._enter(RunState.GENERATING_CUSTOMERS, "customers")
            written["customers"] = CustomerStage(ctx).run()
            self._finish(current, written["customers"])

            # 3. Accounts
            current = self._enter(RunState.GENERATING_ACCOUNTS, "accounts")
            written["accounts"] = AccountStage(ctx).run()
            self._finish(current, written["accounts"])

            # 4. Transactions
            current = self._enter(RunState.GENERATING_TRANSACTIONS, "transactions")
            written["transactions"] = TransactionStage(ctx).run()
            self._finish(current, written["transactions"])

            # 5. Indexes and final counts
            current = "finalize"
            self._start_stage(current)
            finalize = FinalizeStage(ctx)
            created = finalize.create_indexes() if config.create_indexes else 0
            counts = finalize.count_rows()
            self._finish(current, created)

            self.state = RunState.DONE
            return self._complete_run(start_time, seed, counts, written, status="SUCCESS")

        except Exception as e:
            self.logger.error(
                f"Generation run failed in phase '{current}': {e}",
                exc_info=True,
                extra={"run_id": self.run_id, "event": "run_failed", "phase": current},
            )
            self.state = RunState.FAILED
            return self._complete_run(
                start_time,
                seed,
                written,
                written,
                status="FAILED",
                failed_phase=current,
                error=str(e),
            )
        finally:
            self.progress.close()

    # ===== Run Tracking =====

    def _enter(self, state: RunState, stage_name: str) -> str:
        self.state = state
        self._start_stage(stage_name)
        return stage_name

    def _finish(self, stage_name: str, rows_affected: int) -> None:
        self._end_stage(stage_name, rows_affected)
        self._completed.append(stage_name)

    def _start_stage(self, stage_name: str) -> None:
        """Record start of a processing stage."""
        self.logger.info(
            f"Starting stage: {stage_name}",
            extra={"run_id": self.run_id, "stage": stage_name, "event": "stage_start"},
        )
        self._stage_metrics.append(StageMetric(stage_name=stage_name, started_at=datetime.now()))

    def _end_stage(self, stage_name: str, rows_affected: int = 0) -> None:
        """Record end of a processing stage."""
        for metric in reversed(self._stage_metrics):
            if metric.stage_name == stage_name and metric.ended_at is None:
                metric.ended_at = datetime.now()
                metric.rows_affected = rows_affected

                self.logger.info(
                    f"Completed stage: {stage_name}",
                    extra={
                        "run_id": self.run_id,
                        "stage": stage_name,
                        "event": "stage_end",
                        "rows_affected": rows_affected,
                        "duration_seconds": metric.duration_seconds,
                    },
                )
                break

    def _complete_run(
        self,
        start_time: datetime,
        seed: int,
        counts: Dict[str, int],
        written: Dict[str, int],
        status: str,
        failed_phase: Optional[str] = None,
        error: Optional[str] = None,
    ) -> RunResult:
        """Log run completion and return result."""
        duration = (datetime.now() - start_time).total_seconds()

        self.logger.info(
            f"Run finished with status: {status}",
            extra={
                "run_id": self.run_id,
                "event": "run_complete",
                "duration_seconds": duration,
                "error": error,
            },
        )

        return RunResult(
            run_id=self.run_id,
            status=status,
            state=self.state,
            customers=counts.get("customers", 0),
            accounts=counts.get("accounts", 0),
            transactions=counts.get("transactions", 0),
            duration_seconds=duration,
            seed=seed,
            failed_phase=failed_phase,
            error=error,
            completed_phases=list(self._completed),
            written=dict(written),
            warnings=self._warnings,
            stage_metrics=list(self._stage_metrics),
        )
