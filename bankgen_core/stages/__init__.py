"""
Generation pipeline stages.

Each stage handles one phase of the bulk load.
"""

from .base import BaseStage, StageContext, derive_seed
from .cleanup import ClearingStage
from .finalize import FinalizeStage
from .generation import AccountStage, CustomerStage, TransactionStage

__all__ = [
    "StageContext",
    "BaseStage",
    "derive_seed",
    "ClearingStage",
    "CustomerStage",
    "AccountStage",
    "TransactionStage",
    "FinalizeStage",
]
