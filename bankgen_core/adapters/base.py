"""
Abstract base class for storage adapters.

The generation pipeline only needs a narrow storage contract: bulk insert
with skip-duplicates semantics, delete-all, count and id listing. Each
backend implements this interface to work with the generation runner.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence


class StorageAdapter(ABC):
    """
    Abstract interface for storage backends used by the generator.

    Each batch insert is treated as its own unit of work; the pipeline never
    opens a transaction spanning several calls.
    """

    @property
    @abstractmethod
    def dialect(self) -> str:
        """
        Return backend name: 'duckdb' or 'memory'.

        Used to pick dialect-specific DDL.
        """
        pass

    @abstractmethod
    def bulk_insert(
        self,
        table_fqn: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        skip_duplicates: bool = True,
    ) -> int:
        """
        Insert many rows in one call.

        Args:
            table_fqn: Fully qualified table name (schema.table)
            columns: Column names, in the order of each row's values
            rows: Row value tuples
            skip_duplicates: Silently ignore rows whose primary key already exists

        Returns:
            Number of rows submitted
        """
        pass

    @abstractmethod
    def delete_all(self, table_fqn: str) -> int:
        """
        Delete every row of a table.

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    def count(self, table_fqn: str) -> int:
        """Return the number of rows in a table."""
        pass

    @abstractmethod
    def list_ids(self, table_fqn: str, column: str = "id") -> List[str]:
        """
        List the identifier column of a table, ordered by that column.

        Args:
            table_fqn: Fully qualified table name
            column: Projected identifier column

        Returns:
            List of identifier values
        """
        pass

    def create_index(self, name: str, table_fqn: str, columns: Sequence[str]) -> None:
        """
        Create a secondary index if the backend supports them. No-op by default.
        """
        pass

    def close(self) -> None:
        """
        Close the underlying connection. Override if cleanup needed.
        """
        pass


# Dialect-specific DDL variations
DIALECT_CONFIG: Dict[str, Dict[str, Any]] = {
    "duckdb": {
        "string_type": "VARCHAR",
        "date_type": "DATE",
        "timestamp_type": "TIMESTAMP",
        "decimal_type": "DECIMAL(18, 2)",
        "insert_skip": "INSERT OR IGNORE INTO",
        "insert": "INSERT INTO",
    },
}


def get_dialect_config(dialect: str) -> Dict[str, Any]:
    """Get dialect-specific SQL configuration."""
    if dialect not in DIALECT_CONFIG:
        raise ValueError(f"Unknown dialect: {dialect}. Supported: {list(DIALECT_CONFIG.keys())}")
    return DIALECT_CONFIG[dialect]
