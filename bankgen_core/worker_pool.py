"""
Worker pool for parallel record generation.

Parent ids are split into contiguous chunks, one per worker. Every chunk is
sent to its own process as a picklable task and the generated records come
back through the chunk's future. Nothing is shared between workers; the pool
owner is the only place results are combined.
"""

import os
from concurrent.futures import FIRST_EXCEPTION, Executor, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .generators import generate_chunk
from .logger_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Chunk:
    """Contiguous slice of parent ids assigned to exactly one worker."""

    index: int
    start: int
    parent_ids: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.parent_ids)


class WorkerError(RuntimeError):
    """A worker raised or died while generating its chunk."""

    def __init__(self, chunk_index: int, cause: BaseException):
        super().__init__(f"Worker for chunk {chunk_index} failed: {cause!r}")
        self.chunk_index = chunk_index


def default_worker_count() -> int:
    """Available parallelism minus one for the control thread, at least 1."""
    return max(1, (os.cpu_count() or 1) - 1)


def partition(parent_ids: Sequence[str], worker_count: int) -> List[Chunk]:
    """
    Split ``parent_ids`` into at most ``worker_count`` contiguous chunks.

    Chunk sizes differ by at most one; the remainder goes to the leading
    chunks (10 ids over 3 workers -> 4, 3, 3). Empty chunks are dropped, so
    fewer ids than workers yields one single-id chunk per id.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be >= 1, got {worker_count}")

    size, remainder = divmod(len(parent_ids), worker_count)
    chunks = []
    start = 0
    for index in range(worker_count):
        length = size + (1 if index < remainder else 0)
        if length == 0:
            continue
        chunks.append(Chunk(index=index, start=start, parent_ids=tuple(parent_ids[start : start + length])))
        start += length
    return chunks


class WorkerPool:
    """
    Fan a list of parent ids out to isolated workers and gather the results.

    Aggregation is fail-fast: the first failing chunk aborts the run with a
    WorkerError. Chunks that have not started yet are cancelled; chunks
    already running finish in the background and their output is dropped.

    Example:
        pool = WorkerPool(worker_count=4)
        accounts = pool.run(customer_ids, lambda chunk: ChunkTask(...))
    """

    def __init__(
        self,
        worker_count: Optional[int] = None,
        worker: Callable[[Any], List[Any]] = generate_chunk,
        executor_factory: Callable[..., Executor] = ProcessPoolExecutor,
    ):
        self.worker_count = worker_count or default_worker_count()
        self.worker = worker
        self.executor_factory = executor_factory

    def run(self, parent_ids: Sequence[str], make_task: Callable[[Chunk], Any]) -> List[Any]:
        """
        Generate children for ``parent_ids``.

        Args:
            parent_ids: Parent identifiers to partition across workers
            make_task: Builds the (picklable) task sent to the worker for a chunk

        Returns:
            Records of every chunk concatenated in chunk order

        Raises:
            WorkerError: If any worker fails
        """
        chunks = partition(parent_ids, self.worker_count)
        if not chunks:
            return []

        logger.info(
            f"Spawning {len(chunks)} workers for {len(parent_ids):,} parents",
            extra={"event": "pool_start", "workers": len(chunks), "row_count": len(parent_ids)},
        )

        executor = self.executor_factory(max_workers=len(chunks))
        succeeded = False
        try:
            futures: Dict[Future, Chunk] = {
                executor.submit(self.worker, make_task(chunk)): chunk for chunk in chunks
            }
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)

            failed = sorted(
                (futures[f] for f in done if f.exception() is not None), key=lambda c: c.index
            )
            if failed:
                chunk = failed[0]
                cause = next(f for f, c in futures.items() if c is chunk).exception()
                logger.error(
                    f"Worker for chunk {chunk.index} failed: {cause!r}",
                    extra={"event": "worker_failed", "chunk": chunk.index, "error": str(cause)},
                )
                raise WorkerError(chunk.index, cause) from cause

            by_index = {chunk.index: future.result() for future, chunk in futures.items()}
            results: List[Any] = []
            for chunk in chunks:
                results.extend(by_index[chunk.index])
            succeeded = True
            return results
        finally:
            executor.shutdown(wait=succeeded, cancel_futures=True)
