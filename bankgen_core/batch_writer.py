"""
Batch writer: persists generated records in bounded batches.

Each batch is one skip-duplicates bulk insert, wrapped in a bounded retry.
Batches already committed stay committed if a later batch fails.
"""

import time
from typing import Callable, Iterator, Optional, Sequence, TypeVar

from .adapters.base import StorageAdapter
from .config import MAX_RETRIES, RETRY_DELAY_SECONDS
from .generators import Record
from .logger_utils import get_logger
from .progress import ProgressReporter
from .retry import DelayStrategy, fixed_delay, retry_operation
from .schema_defs import TableDef

T = TypeVar("T")

logger = get_logger(__name__)


class BatchWriteError(RuntimeError):
    """A batch could not be written after exhausting its retries."""

    def __init__(self, table: str, batch_index: int, written: int, cause: Exception):
        super().__init__(
            f"Batch {batch_index} of {table} failed after retries "
            f"({written:,} records already written): {cause}"
        )
        self.table = table
        self.batch_index = batch_index
        self.written = written


def iter_batches(records: Sequence[T], batch_size: int) -> Iterator[Sequence[T]]:
    """Yield contiguous slices of at most ``batch_size`` records, in order."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(records), batch_size):
        yield records[start : start + batch_size]


class BatchWriter:
    """
    Writes record sequences to a storage adapter.

    Example:
        writer = BatchWriter(adapter, batch_size=1000, progress=ProgressReporter())
        writer.write(ACCOUNTS, accounts, phase="accounts")
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        batch_size: int,
        max_retries: int = MAX_RETRIES,
        delay: Optional[DelayStrategy] = None,
        progress: Optional[ProgressReporter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.adapter = adapter
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.delay = delay or fixed_delay(RETRY_DELAY_SECONDS)
        self.progress = progress
        self.sleep = sleep

    def write(
        self,
        table: TableDef,
        records: Sequence[Record],
        phase: str,
        already_written: int = 0,
    ) -> int:
        """
        Write ``records`` batch by batch.

        Args:
            table: Target table definition
            records: Records in write order
            phase: Phase name used for progress reporting
            already_written: Offset added to the cumulative progress count

        Returns:
            Number of records submitted

        Raises:
            BatchWriteError: If a batch still fails after ``max_retries`` retries
        """
        written = 0
        columns = table.column_names
        first_batch = already_written // self.batch_size

        for offset, batch in enumerate(iter_batches(records, self.batch_size)):
            batch_index = first_batch + offset
            rows = [record.to_row() for record in batch]
            try:
                self._write_batch(table, columns, rows, batch_index)
            except Exception as e:
                logger.error(
                    f"Giving up on batch {batch_index} of {table.fqn}",
                    extra={"phase": phase, "table": table.fqn, "batch": batch_index, "error": str(e)},
                )
                raise BatchWriteError(table.fqn, batch_index, already_written + written, e) from e

            written += len(rows)
            if self.progress is not None:
                self.progress.update(phase, already_written + written)

            logger.debug(
                f"Wrote batch {batch_index} to {table.fqn}",
                extra={"phase": phase, "batch": batch_index, "row_count": len(rows)},
            )

        return written

    def _write_batch(self, table: TableDef, columns, rows, batch_index: int) -> None:
        retry_operation(
            lambda: self.adapter.bulk_insert(table.fqn, columns, rows, skip_duplicates=True),
            retries=self.max_retries,
            delay=self.delay,
            sleep=self.sleep,
            description=f"Insert of batch {batch_index} into {table.fqn}",
        )
