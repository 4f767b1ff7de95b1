"""
Record generators for synthetic banking data.

Everything here is pure: given the same seed, pools and reference time the
same records come out. No I/O happens in this module, so chunks can be
generated in separate processes without coordination.
"""

import random
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterator, List, Tuple, Union

from faker import Faker


class AccountType(Enum):
    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"
    CREDIT = "CREDIT"
    INVESTMENT = "INVESTMENT"
    LOAN = "LOAN"


class TransactionType(Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
    FEE = "FEE"


# Inclusive balance ranges (whole currency units) per account type
BALANCE_RANGES: Dict[AccountType, Tuple[int, int]] = {
    AccountType.SAVINGS: (100, 10000),
    AccountType.CHECKING: (100, 10000),
    AccountType.CREDIT: (-10000, 5000),
    AccountType.INVESTMENT: (5000, 500000),
    AccountType.LOAN: (-50000, -1000),
}

# Inclusive amount ranges per transaction type
AMOUNT_RANGES: Dict[TransactionType, Tuple[int, int]] = {
    TransactionType.DEPOSIT: (10, 1000),
    TransactionType.WITHDRAWAL: (10, 1000),
    TransactionType.TRANSFER: (100, 10000),
    TransactionType.PAYMENT: (50, 5000),
    TransactionType.REFUND: (10, 1000),
    TransactionType.FEE: (1, 100),
}

DESCRIPTIONS = [
    "Monthly payment",
    "Grocery shopping",
    "Salary deposit",
    "Online purchase",
    "Bank transfer",
    "Withdrawal at ATM",
    "Bill payment",
    "Subscription fee",
    "Rent payment",
    "Interest credited",
]

POOL_SIZE = 500


@dataclass(frozen=True)
class Customer:
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    dob: date
    created_at: datetime
    updated_at: datetime

    def to_row(self) -> tuple:
        return (
            self.id,
            self.first_name,
            self.last_name,
            self.email,
            self.phone,
            self.address,
            self.dob,
            self.created_at,
            self.updated_at,
        )


@dataclass(frozen=True)
class Account:
    id: str
    account_type: str
    balance: Decimal
    customer_id: str
    created_at: datetime
    updated_at: datetime

    def to_row(self) -> tuple:
        return (
            self.id,
            self.account_type,
            self.balance,
            self.customer_id,
            self.created_at,
            self.updated_at,
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal
    type: str
    account_id: str
    description: str
    created_at: datetime

    def to_row(self) -> tuple:
        return (
            self.id,
            self.amount,
            self.type,
            self.account_id,
            self.description,
            self.created_at,
        )


Record = Union[Customer, Account, Transaction]


@dataclass(frozen=True)
class Pools:
    first_names: List[str]
    last_names: List[str]
    streets: List[str]
    email_domains: List[str]
    counterparties: List[str]


def build_pools(seed: int, size: int = POOL_SIZE) -> Pools:
    """Build Faker value pools; records then draw from them with the seeded rng."""
    fake = Faker("en_US")
    fake.seed_instance(seed)
    return Pools(
        first_names=[fake.first_name() for _ in range(size)],
        last_names=[fake.last_name() for _ in range(size)],
        streets=[fake.street_address() for _ in range(size)],
        email_domains=sorted({fake.free_email_domain() for _ in range(20)}),
        counterparties=[fake.company() for _ in range(size)],
    )


def new_id(rng: random.Random) -> str:
    """UUID4-formatted identifier drawn from the seeded random source."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def random_timestamp(rng: random.Random, reference: datetime, days_back: int) -> datetime:
    """A timestamp uniformly within ``days_back`` days before ``reference``."""
    return reference - timedelta(seconds=rng.randint(0, days_back * 86400))


def touched_after(rng: random.Random, created_at: datetime, reference: datetime) -> datetime:
    """A last-update timestamp between ``created_at`` and ``reference``."""
    span = max(0, int((reference - created_at).total_seconds()))
    return created_at + timedelta(seconds=rng.randint(0, span))


def random_cents(rng: random.Random, low: int, high: int) -> Decimal:
    """Uniform decimal with two fraction digits in [low, high] inclusive."""
    return Decimal(rng.randint(low * 100, high * 100)).scaleb(-2)


def balance_for(account_type: AccountType, rng: random.Random) -> Decimal:
    low, high = BALANCE_RANGES[account_type]
    return random_cents(rng, low, high)


def amount_for(transaction_type: TransactionType, rng: random.Random) -> Decimal:
    low, high = AMOUNT_RANGES[transaction_type]
    return random_cents(rng, low, high)


def make_customer(rng: random.Random, pools: Pools, reference: datetime) -> Customer:
    first_name = rng.choice(pools.first_names)
    last_name = rng.choice(pools.last_names)
    created_at = random_timestamp(rng, reference, 365)
    age_days = rng.randint(18 * 365, 70 * 365)
    return Customer(
        id=new_id(rng),
        first_name=first_name,
        last_name=last_name,
        email=(
            f"{first_name}.{last_name}{rng.randint(1, 9999)}@{rng.choice(pools.email_domains)}"
        ).lower(),
        phone=f"07{rng.randint(10, 99)}-{rng.randint(100, 999)}-{rng.randint(100, 999)}",
        address=rng.choice(pools.streets),
        dob=(reference - timedelta(days=age_days)).date(),
        created_at=created_at,
        updated_at=touched_after(rng, created_at, reference),
    )


def generate_customers(
    count: int, rng: random.Random, pools: Pools, reference: datetime
) -> Iterator[Customer]:
    for _ in range(count):
        yield make_customer(rng, pools, reference)


def make_accounts(
    customer_id: str,
    rng: random.Random,
    reference: datetime,
    min_count: int,
    max_count: int,
) -> List[Account]:
    """Between ``min_count`` and ``max_count`` accounts owned by ``customer_id``."""
    accounts = []
    account_types = list(AccountType)
    for _ in range(rng.randint(min_count, max_count)):
        account_type = rng.choice(account_types)
        created_at = random_timestamp(rng, reference, 365)
        accounts.append(
            Account(
                id=new_id(rng),
                account_type=account_type.value,
                balance=balance_for(account_type, rng),
                customer_id=customer_id,
                created_at=created_at,
                updated_at=touched_after(rng, created_at, reference),
            )
        )
    return accounts


def make_transactions(
    account_id: str,
    rng: random.Random,
    pools: Pools,
    reference: datetime,
    min_count: int,
    max_count: int,
) -> List[Transaction]:
    """Between ``min_count`` and ``max_count`` transactions posted to ``account_id``."""
    transactions = []
    transaction_types = list(TransactionType)
    for _ in range(rng.randint(min_count, max_count)):
        transaction_type = rng.choice(transaction_types)
        transactions.append(
            Transaction(
                id=new_id(rng),
                amount=amount_for(transaction_type, rng),
                type=transaction_type.value,
                account_id=account_id,
                description=f"{rng.choice(DESCRIPTIONS)} - {rng.choice(pools.counterparties)}",
                created_at=random_timestamp(rng, reference, 365),
            )
        )
    return transactions


@dataclass(frozen=True)
class ChunkTask:
    """Work descriptor sent to one worker: a chunk of parent ids plus generation settings."""

    kind: str
    index: int
    parent_ids: Tuple[str, ...]
    seed: int
    reference: datetime
    min_children: int
    max_children: int


ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"


def generate_chunk(task: ChunkTask) -> List[Record]:
    """
    Worker entry point: generate children for every parent id in the chunk.

    Runs in a separate process, so it only touches its own arguments.
    """
    rng = random.Random(task.seed)
    records: List[Record] = []

    if task.kind == ACCOUNTS:
        for customer_id in task.parent_ids:
            records.extend(
                make_accounts(
                    customer_id, rng, task.reference, task.min_children, task.max_children
                )
            )
    elif task.kind == TRANSACTIONS:
        pools = build_pools(task.seed)
        for account_id in task.parent_ids:
            records.extend(
                make_transactions(
                    account_id, rng, pools, task.reference, task.min_children, task.max_children
                )
            )
    else:
        raise ValueError(f"Unknown chunk kind: {task.kind}")

    return records
