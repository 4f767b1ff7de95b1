"""
DuckDB adapter for the generator.

Provides bulk insert, delete, count and id listing for DuckDB databases,
supporting both file-based and in-memory databases.
"""

from typing import Any, Dict, List, Optional, Sequence

import duckdb

from .base import StorageAdapter, get_dialect_config


class DuckDBAdapter(StorageAdapter):
    """
    DuckDB-specific storage adapter.

    Example:
        adapter = DuckDBAdapter("bank.duckdb")
        # or for in-memory:
        adapter = DuckDBAdapter(":memory:")
    """

    def __init__(self, db_path_or_conn: Any):
        """
        Initialize DuckDB connection.

        Args:
            db_path_or_conn: Path to DuckDB file (str) or existing connection object
        """
        if isinstance(db_path_or_conn, str):
            self.db_path = db_path_or_conn
            self.conn = duckdb.connect(db_path_or_conn)
        else:
            self.db_path = ":existing_connection:"
            self.conn = db_path_or_conn
        self._dialect = get_dialect_config(self.dialect)

    @property
    def dialect(self) -> str:
        return "duckdb"

    def execute(self, sql: str, params: Optional[List[Any]] = None) -> None:
        """Execute a single SQL statement."""
        if params:
            self.conn.execute(sql, params)
        else:
            self.conn.execute(sql)

    def query_one(self, sql: str, params: Optional[List[Any]] = None) -> Any:
        """Execute SQL and return first value of first row."""
        if params:
            result = self.conn.execute(sql, params).fetchone()
        else:
            result = self.conn.execute(sql).fetchone()
        return result[0] if result else None

    def table_exists(self, table_fqn: str) -> bool:
        """Check if table exists."""
        try:
            self.conn.execute(f"SELECT 1 FROM {table_fqn} LIMIT 0")
            return True
        except duckdb.CatalogException:
            return False

    def get_table_columns(self, table_fqn: str) -> List[Dict[str, str]]:
        """Get column names for a table (lowercase)."""
        # DESCRIBE returns: column_name, column_type, null, key, default, extra
        result = self.conn.execute(f"DESCRIBE {table_fqn}").fetchall()
        return [{"name": row[0].lower(), "type": row[1]} for row in result]

    def bulk_insert(
        self,
        table_fqn: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        skip_duplicates: bool = True,
    ) -> int:
        """Insert rows with a single multi-row VALUES statement."""
        if not rows:
            return 0
        verb = self._dialect["insert_skip"] if skip_duplicates else self._dialect["insert"]
        placeholder = "(" + ", ".join("?" for _ in columns) + ")"
        values = ", ".join(placeholder for _ in rows)
        params = [value for row in rows for value in row]
        self.conn.execute(
            f"{verb} {table_fqn} ({', '.join(columns)}) VALUES {values}",
            params,
        )
        return len(rows)

    def delete_all(self, table_fqn: str) -> int:
        """Delete every row of a table and return how many were removed."""
        existing = self.count(table_fqn)
        self.conn.execute(f"DELETE FROM {table_fqn}")
        return existing

    def count(self, table_fqn: str) -> int:
        return int(self.query_one(f"SELECT COUNT(*) FROM {table_fqn}") or 0)

    def list_ids(self, table_fqn: str, column: str = "id") -> List[str]:
        rows = self.conn.execute(f"SELECT {column} FROM {table_fqn} ORDER BY {column}").fetchall()
        return [row[0] for row in rows]

    def create_index(self, name: str, table_fqn: str, columns: Sequence[str]) -> None:
        self.conn.execute(f"CREATE INDEX IF NOT EXISTS {name} ON {table_fqn} ({', '.join(columns)})")

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
