"""
Data clearing stage.

Removes existing rows child-first (transactions, accounts, customers) so
foreign keys are never violated.
"""

from typing import Dict

from ..schema_defs import BANK_TABLES
from .base import BaseStage


class ClearingStage(BaseStage):
    """Deletes all generated banking data."""

    phase = "clearing"

    def run(self) -> Dict[str, int]:
        deleted = {}
        for table in reversed(BANK_TABLES):
            deleted[table.name] = self.adapter.delete_all(table.fqn)
            self.logger.info(
                f"Cleared {deleted[table.name]:,} rows from {table.fqn}",
                extra={"run_id": self.run_id, "stage": self.phase, "rows_affected": deleted[table.name]},
            )
        return deleted
