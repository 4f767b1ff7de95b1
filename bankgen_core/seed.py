"""
Seed mode: a small, sequential dataset for local development.

Unlike the bulk pipeline, account balances here are derived from the
account's generated transactions, so the seeded data is internally
consistent.
"""

import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .adapters.base import StorageAdapter
from .config import SeedConfig
from .generators import Account, Transaction, build_pools, make_customer, new_id, random_cents, touched_after
from .logger_utils import get_logger
from .schema_defs import ACCOUNTS, BANK_TABLES, CUSTOMERS, TRANSACTIONS

logger = get_logger(__name__)

SEED_ACCOUNT_TYPES = ["SAVINGS", "CHECKING", "BUSINESS", "INVESTMENT"]

SEED_DESCRIPTIONS = {
    "DEPOSIT": ["Salary", "Cash deposit", "Check deposit", "Transfer in", "Interest"],
    "WITHDRAWAL": ["ATM", "Cash", "Bill payment", "Purchase", "Transfer out"],
    "TRANSFER": ["To savings", "To checking", "To friend", "To family", "Monthly transfer"],
}

SEED_AMOUNT_RANGE = (50, 5000)
HISTORY_START = datetime(2023, 1, 1)


def derive_balance(transactions: Sequence[Transaction], rng: random.Random) -> Decimal:
    """
    Replay ``transactions`` in order to get an account balance.

    Deposits add; withdrawals subtract but never below zero; transfers move
    the amount in a random direction, also floored at zero.
    """
    balance = Decimal("0.00")
    for txn in transactions:
        if txn.type == "DEPOSIT":
            balance += txn.amount
        elif txn.type == "WITHDRAWAL":
            balance = max(Decimal("0.00"), balance - txn.amount)
        else:
            balance = max(Decimal("0.00"), balance + rng.choice((1, -1)) * txn.amount)
    return balance


def _seed_transactions(
    account_id: str, rng: random.Random, config: SeedConfig, reference: datetime
) -> List[Transaction]:
    span = max(0, int((reference - HISTORY_START).total_seconds()))
    transactions = []
    for _ in range(rng.randint(config.transactions_per_account_min, config.transactions_per_account_max)):
        txn_type = rng.choice(list(SEED_DESCRIPTIONS))
        transactions.append(
            Transaction(
                id=new_id(rng),
                amount=random_cents(rng, *SEED_AMOUNT_RANGE),
                type=txn_type,
                account_id=account_id,
                description=rng.choice(SEED_DESCRIPTIONS[txn_type]),
                created_at=HISTORY_START + timedelta(seconds=rng.randint(0, span)),
            )
        )
    return transactions


def run_seed(
    adapter: StorageAdapter, config: Optional[SeedConfig] = None, reference: Optional[datetime] = None
) -> Dict[str, int]:
    """
    Clear existing data and create a small seeded dataset.

    Args:
        adapter: Storage adapter
        config: Seed settings (defaults to SeedConfig())
        reference: "Now" for generated timestamps

    Returns:
        Persisted row counts per table
    """
    config = config or SeedConfig()
    reference = reference or datetime.now().replace(microsecond=0)
    seed = config.seed if config.seed is not None else random.SystemRandom().getrandbits(63)
    rng = random.Random(seed)
    pools = build_pools(seed)

    logger.info("Clearing existing data...")
    for table in reversed(BANK_TABLES):
        adapter.delete_all(table.fqn)

    logger.info(f"Creating {config.customers} customers (seed={seed})...")
    for i in range(config.customers):
        customer = make_customer(rng, pools, reference)
        adapter.bulk_insert(CUSTOMERS.fqn, CUSTOMERS.column_names, [customer.to_row()])

        for _ in range(rng.randint(config.accounts_per_customer_min, config.accounts_per_customer_max)):
            account_id = new_id(rng)
            transactions = _seed_transactions(account_id, rng, config, reference)
            created_at = min(txn.created_at for txn in transactions)
            account = Account(
                id=account_id,
                account_type=rng.choice(SEED_ACCOUNT_TYPES),
                balance=derive_balance(transactions, rng),
                customer_id=customer.id,
                created_at=created_at,
                updated_at=touched_after(rng, created_at, reference),
            )
            adapter.bulk_insert(ACCOUNTS.fqn, ACCOUNTS.column_names, [account.to_row()])
            adapter.bulk_insert(
                TRANSACTIONS.fqn, TRANSACTIONS.column_names, [txn.to_row() for txn in transactions]
            )

        if (i + 1) % 10 == 0:
            logger.info(f"Created {i + 1} customers...")

    counts = {table.name: adapter.count(table.fqn) for table in BANK_TABLES}
    logger.info(
        f"Seeding completed: {counts['customers']} customers, {counts['accounts']} accounts, "
        f"{counts['transactions']} transactions",
        extra={"event": "seed_complete"},
    )
    return counts
