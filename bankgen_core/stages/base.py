"""
Base stage infrastructure for the generation pipeline.

Provides StageContext (shared collaborators) and BaseStage (helpers)
used by all pipeline stages.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import List

from ..adapters.base import StorageAdapter
from ..batch_writer import BatchWriter
from ..config import GenerationConfig
from ..progress import ProgressReporter
from ..worker_pool import WorkerPool


@dataclass
class StageContext:
    """Shared context passed to all pipeline stages.

    Contains everything a stage needs to generate and persist records.
    """

    adapter: StorageAdapter
    config: GenerationConfig
    run_id: str
    seed: int
    reference: datetime
    logger: logging.Logger
    writer: BatchWriter
    pool: WorkerPool
    progress: ProgressReporter
    warnings: List[str]


def derive_seed(run_seed: int, phase: str, index: int = 0) -> int:
    """Stable per-phase, per-chunk seed derived from the run seed."""
    return random.Random(f"{run_seed}:{phase}:{index}").getrandbits(63)


class BaseStage:
    """Base class for pipeline stages."""

    phase = "base"

    def __init__(self, ctx: StageContext):
        self.ctx = ctx
        self.adapter = ctx.adapter
        self.config = ctx.config
        self.run_id = ctx.run_id
        self.logger = ctx.logger
        self.writer = ctx.writer
        self.pool = ctx.pool
        self.progress = ctx.progress
        self._warnings = ctx.warnings

    def seed_for(self, index: int = 0) -> int:
        return derive_seed(self.ctx.seed, self.phase, index)
