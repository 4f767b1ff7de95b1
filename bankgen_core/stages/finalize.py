"""
Finalize stage: performance indexes and persisted row counts.
"""

from typing import Dict

from ..schema_defs import BANK_TABLES
from .base import BaseStage


class FinalizeStage(BaseStage):
    """Creates post-load indexes and counts what was persisted."""

    phase = "finalize"

    def create_indexes(self) -> int:
        """Create every table's indexes. Failures are logged and skipped.

        Returns:
            Number of indexes created
        """
        created = 0
        for table in BANK_TABLES:
            for index in table.indexes:
                try:
                    self.adapter.create_index(index.name, table.fqn, index.columns)
                    created += 1
                except Exception as e:
                    msg = f"Could not create index {index.name} on {table.fqn}: {e}"
                    self.logger.warning(msg, extra={"run_id": self.run_id, "stage": self.phase})
                    self._warnings.append(msg)
        return created

    def count_rows(self) -> Dict[str, int]:
        return {table.name: self.adapter.count(table.fqn) for table in BANK_TABLES}
