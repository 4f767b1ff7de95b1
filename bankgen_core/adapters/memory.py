"""
In-memory storage adapter.

Keeps rows in per-table dicts keyed by primary key. Used for dry runs
(``bankgen run --platform memory``) and as a real storage double in tests.
"""

from typing import Any, Dict, List, Sequence

from .base import StorageAdapter


class MemoryAdapter(StorageAdapter):
    """Dict-backed adapter; the first column of every insert is the primary key."""

    def __init__(self):
        self.tables: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self.insert_calls = 0

    @property
    def dialect(self) -> str:
        return "memory"

    def bulk_insert(
        self,
        table_fqn: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        skip_duplicates: bool = True,
    ) -> int:
        self.insert_calls += 1
        table = self.tables.setdefault(table_fqn, {})
        for row in rows:
            key = row[0]
            if key in table:
                if skip_duplicates:
                    continue
                raise ValueError(f"Duplicate key {key!r} in {table_fqn}")
            table[key] = dict(zip(columns, row))
        return len(rows)

    def delete_all(self, table_fqn: str) -> int:
        removed = len(self.tables.get(table_fqn, {}))
        self.tables[table_fqn] = {}
        return removed

    def count(self, table_fqn: str) -> int:
        return len(self.tables.get(table_fqn, {}))

    def list_ids(self, table_fqn: str, column: str = "id") -> List[str]:
        return sorted(row[column] for row in self.tables.get(table_fqn, {}).values())

    def rows(self, table_fqn: str) -> List[Dict[str, Any]]:
        """Return stored rows in insertion order."""
        return list(self.tables.get(table_fqn, {}).values())
