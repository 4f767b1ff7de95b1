"""
Centralized schema definitions for the generated banking tables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

BANK_SCHEMA = "bankgen"


class ColumnType(Enum):
    STRING = "string_type"
    DATE = "date_type"
    TIMESTAMP = "timestamp_type"
    DECIMAL = "decimal_type"


@dataclass
class ColumnDef:
    name: str
    type: ColumnType
    is_pk: bool = False
    nullable: bool = True
    references: Optional[str] = None
    description: Optional[str] = None


@dataclass
class IndexDef:
    name: str
    columns: List[str]


@dataclass
class TableDef:
    schema: str
    name: str
    columns: List[ColumnDef]
    indexes: List[IndexDef] = field(default_factory=list)
    description: Optional[str] = None

    @property
    def fqn(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]


CUSTOMERS = TableDef(
    schema=BANK_SCHEMA,
    name="customers",
    description="Synthetic bank customers.",
    columns=[
        ColumnDef("id", ColumnType.STRING, is_pk=True, nullable=False),
        ColumnDef("first_name", ColumnType.STRING, nullable=False),
        ColumnDef("last_name", ColumnType.STRING, nullable=False),
        ColumnDef("email", ColumnType.STRING, nullable=False),
        ColumnDef("phone", ColumnType.STRING),
        ColumnDef("address", ColumnType.STRING),
        ColumnDef("dob", ColumnType.DATE, description="Date of birth"),
        ColumnDef("created_at", ColumnType.TIMESTAMP, nullable=False),
        ColumnDef("updated_at", ColumnType.TIMESTAMP, nullable=False),
    ],
    indexes=[
        IndexDef("customers_first_name_last_name_idx", ["first_name", "last_name"]),
        IndexDef("customers_created_at_idx", ["created_at"]),
    ],
)

ACCOUNTS = TableDef(
    schema=BANK_SCHEMA,
    name="accounts",
    description="Accounts owned by customers; balance is assigned at creation.",
    columns=[
        ColumnDef("id", ColumnType.STRING, is_pk=True, nullable=False),
        ColumnDef("account_type", ColumnType.STRING, nullable=False),
        ColumnDef("balance", ColumnType.DECIMAL, nullable=False),
        ColumnDef(
            "customer_id",
            ColumnType.STRING,
            nullable=False,
            references=f"{BANK_SCHEMA}.customers(id)",
        ),
        ColumnDef("created_at", ColumnType.TIMESTAMP, nullable=False),
        ColumnDef("updated_at", ColumnType.TIMESTAMP, nullable=False),
    ],
    indexes=[
        IndexDef("accounts_customer_id_idx", ["customer_id"]),
        IndexDef("accounts_account_type_idx", ["account_type"]),
        IndexDef("accounts_created_at_idx", ["created_at"]),
        IndexDef("accounts_balance_account_type_idx", ["balance", "account_type"]),
    ],
)

TRANSACTIONS = TableDef(
    schema=BANK_SCHEMA,
    name="transactions",
    description="Transactions posted against accounts.",
    columns=[
        ColumnDef("id", ColumnType.STRING, is_pk=True, nullable=False),
        ColumnDef("amount", ColumnType.DECIMAL, nullable=False),
        ColumnDef("type", ColumnType.STRING, nullable=False),
        ColumnDef(
            "account_id",
            ColumnType.STRING,
            nullable=False,
            references=f"{BANK_SCHEMA}.accounts(id)",
        ),
        ColumnDef("description", ColumnType.STRING),
        ColumnDef("created_at", ColumnType.TIMESTAMP, nullable=False),
    ],
    indexes=[
        IndexDef("transactions_account_id_idx", ["account_id"]),
        IndexDef("transactions_created_at_type_idx", ["created_at", "type"]),
        IndexDef("transactions_amount_idx", ["amount"]),
    ],
)

# Creation order; deletion runs in reverse to respect foreign keys.
BANK_TABLES: List[TableDef] = [CUSTOMERS, ACCOUNTS, TRANSACTIONS]
