"""
Centralized schema management for the banking tables.
Handles DDL generation and execution for SQL backends.
"""

from typing import List

from .adapters.base import get_dialect_config
from .adapters.duckdb import DuckDBAdapter
from .logger_utils import get_logger
from .schema_defs import BANK_SCHEMA, BANK_TABLES, ColumnDef, TableDef

logger = get_logger(__name__)


class SchemaManager:
    """Manages the bank schema and its tables."""

    def __init__(self, adapter: DuckDBAdapter):
        self.adapter = adapter
        self.dialect_name = adapter.dialect
        self.dialect_config = get_dialect_config(self.dialect_name)

    def initialize(self, reset: bool = False) -> None:
        """
        Create the bank schema and tables.

        Args:
            reset: If True, drop the schema (and all data) before creating.
        """
        schemas = [BANK_SCHEMA]

        if reset:
            logger.info("Resetting schemas...")
            self._drop_schemas(schemas)

        self._create_schemas(schemas)

        for table_def in BANK_TABLES:
            self._create_table(table_def)
        logger.info(f"Schema '{BANK_SCHEMA}' ready ({len(BANK_TABLES)} tables)")

    def _drop_schemas(self, schemas: List[str]) -> None:
        """Drop schemas and all objects within them."""
        for schema in schemas:
            self.adapter.execute(f"DROP SCHEMA IF EXISTS {schema} CASCADE")

    def _create_schemas(self, schemas: List[str]) -> None:
        """Create schemas if they don't exist."""
        for schema in schemas:
            self.adapter.execute(f"CREATE SCHEMA IF NOT EXISTS {schema}")

    def _column_sql(self, col: ColumnDef) -> str:
        col_def = f"{col.name} {self.dialect_config[col.type.value]}"
        if not col.nullable and not col.is_pk:
            col_def += " NOT NULL"
        if col.references:
            col_def += f" REFERENCES {col.references}"
        return col_def

    def _create_table(self, table_def: TableDef) -> None:
        """Generate and execute CREATE TABLE DDL, or ALTER TABLE if columns missing."""
        if not self.adapter.table_exists(table_def.fqn):
            col_defs = [self._column_sql(col) for col in table_def.columns]
            pks = [col.name for col in table_def.columns if col.is_pk]
            if pks:
                col_defs.append(f"PRIMARY KEY ({', '.join(pks)})")

            self.adapter.execute(f"""
                CREATE TABLE IF NOT EXISTS {table_def.fqn} (
                    {", ".join(col_defs)}
                )
            """)
            return

        # Table exists: add columns missing from older layouts
        existing_cols = {c["name"] for c in self.adapter.get_table_columns(table_def.fqn)}
        for col in table_def.columns:
            if col.name.lower() not in existing_cols:
                logger.warning(f"Schema evolution: adding column {col.name} to {table_def.fqn}")
                sql_type = self.dialect_config[col.type.value]
                self.adapter.execute(f"ALTER TABLE {table_def.fqn} ADD COLUMN {col.name} {sql_type}")
