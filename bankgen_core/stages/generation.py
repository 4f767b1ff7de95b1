"""
Generation stages: customers, then accounts, then transactions.

Each child phase reads the parent ids back from storage, so referential
integrity only depends on what the previous phase actually persisted.
"""

import random
from typing import List, Sequence, Tuple

from ..generators import (
    ACCOUNTS as ACCOUNT_KIND,
    TRANSACTIONS as TRANSACTION_KIND,
    ChunkTask,
    build_pools,
    generate_customers,
)
from ..schema_defs import ACCOUNTS, CUSTOMERS, TRANSACTIONS, TableDef
from ..worker_pool import Chunk
from .base import BaseStage


class CustomerStage(BaseStage):
    """Generates customers on the control thread, one batch at a time."""

    phase = "customers"

    def run(self) -> int:
        total = self.config.total_customers
        batch_size = self.config.batch_size
        seed = self.seed_for()
        rng = random.Random(seed)
        pools = build_pools(seed)

        self.progress.start(self.phase, total)
        written = 0
        while written < total:
            batch = list(
                generate_customers(min(batch_size, total - written), rng, pools, self.ctx.reference)
            )
            written += self.writer.write(CUSTOMERS, batch, self.phase, already_written=written)
        return written


class ChildStage(BaseStage):
    """Generates children for parent ids listed from storage, via the worker pool."""

    parent_table: TableDef
    child_table: TableDef
    kind: str
    # GenerationConfig fields holding the per-parent child count range
    min_setting: str
    max_setting: str

    def child_range(self) -> Tuple[int, int]:
        return getattr(self.config, self.min_setting), getattr(self.config, self.max_setting)

    def select_parents(self, parent_ids: List[str]) -> List[str]:
        return parent_ids

    def make_task(self, chunk: Chunk) -> ChunkTask:
        min_children, max_children = self.child_range()
        return ChunkTask(
            kind=self.kind,
            index=chunk.index,
            parent_ids=chunk.parent_ids,
            seed=self.seed_for(chunk.index),
            reference=self.ctx.reference,
            min_children=min_children,
            max_children=max_children,
        )

    def run(self) -> int:
        parent_ids = self.select_parents(self.adapter.list_ids(self.parent_table.fqn))
        self.logger.info(
            f"Generating {self.phase} for {len(parent_ids):,} {self.parent_table.name}",
            extra={"run_id": self.run_id, "stage": self.phase, "row_count": len(parent_ids)},
        )

        records: Sequence = self.pool.run(parent_ids, self.make_task)

        self.progress.start(self.phase, len(records))
        return self.writer.write(self.child_table, records, self.phase)


class AccountStage(ChildStage):
    phase = "accounts"
    parent_table = CUSTOMERS
    child_table = ACCOUNTS
    kind = ACCOUNT_KIND
    min_setting = "accounts_per_customer_min"
    max_setting = "accounts_per_customer_max"

    def select_parents(self, parent_ids: List[str]) -> List[str]:
        """Optionally keep a seeded random sample of customers to bound output size."""
        rate = self.config.account_sample_rate
        if rate >= 1.0 or not parent_ids:
            return parent_ids
        keep = max(1, int(len(parent_ids) * rate))
        rng = random.Random(self.seed_for(-1))
        sample = rng.sample(parent_ids, keep)
        self.logger.info(
            f"Sampled {keep:,} of {len(parent_ids):,} customers ({rate:.0%})",
            extra={"run_id": self.run_id, "stage": self.phase},
        )
        return sample


class TransactionStage(ChildStage):
    phase = "transactions"
    parent_table = ACCOUNTS
    child_table = TRANSACTIONS
    kind = TRANSACTION_KIND
    min_setting = "transactions_per_account_min"
    max_setting = "transactions_per_account_max"
