"""
Configuration for bulk dataset generation.

Defaults mirror the constants of the stress-test generator. A YAML file with
a ``generation:`` section (and optionally a ``seed_mode:`` section) can
override them; CLI flags override the file.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Stress-test defaults
TOTAL_CUSTOMERS = 100000
BATCH_SIZE = 1000
ACCOUNTS_PER_CUSTOMER_MIN = 1
ACCOUNTS_PER_CUSTOMER_MAX = 3
TRANSACTIONS_PER_ACCOUNT_MIN = 1
TRANSACTIONS_PER_ACCOUNT_MAX = 10
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1.0


def validate_integer(value, name: str = "value", minimum: Optional[int] = None) -> int:
    """
    Validate and coerce a value to an integer.

    Args:
        value: Value to validate (int or numeric string)
        name: Name of the field (for error messages)
        minimum: Optional inclusive lower bound

    Returns:
        Validated integer

    Raises:
        ValueError: If value cannot be converted or is below ``minimum``
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer for {name}: '{value}'")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: '{value}'")
    if minimum is not None and result < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {result}")
    return result


def validate_float(
    value, name: str = "value", minimum: Optional[float] = None, maximum: Optional[float] = None
) -> float:
    """
    Validate and coerce a value to a float within optional inclusive bounds.

    Raises:
        ValueError: If value cannot be converted or is out of range
    """
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid float for {name}: '{value}'") from e
    if minimum is not None and result < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {result}")
    if maximum is not None and result > maximum:
        raise ValueError(f"{name} must be <= {maximum}, got {result}")
    return result


def validate_range(minimum: int, maximum: int, name: str) -> None:
    """Validate a per-parent [min, max] child count range."""
    if minimum < 1:
        raise ValueError(f"{name} minimum must be >= 1, got {minimum}")
    if minimum > maximum:
        raise ValueError(f"Invalid {name} range: min ({minimum}) > max ({maximum})")


@dataclass
class GenerationConfig:
    """Configuration for a bulk generation run."""

    total_customers: int = TOTAL_CUSTOMERS
    batch_size: int = BATCH_SIZE
    accounts_per_customer_min: int = ACCOUNTS_PER_CUSTOMER_MIN
    accounts_per_customer_max: int = ACCOUNTS_PER_CUSTOMER_MAX
    transactions_per_account_min: int = TRANSACTIONS_PER_ACCOUNT_MIN
    transactions_per_account_max: int = TRANSACTIONS_PER_ACCOUNT_MAX
    max_retries: int = MAX_RETRIES
    retry_delay_seconds: float = RETRY_DELAY_SECONDS
    workers: Optional[int] = None
    account_sample_rate: float = 1.0
    seed: Optional[int] = None
    clear_existing: bool = True
    create_indexes: bool = True

    def __post_init__(self):
        self.total_customers = validate_integer(self.total_customers, "total_customers", 0)
        self.batch_size = validate_integer(self.batch_size, "batch_size", 1)
        self.accounts_per_customer_min = validate_integer(
            self.accounts_per_customer_min, "accounts_per_customer_min"
        )
        self.accounts_per_customer_max = validate_integer(
            self.accounts_per_customer_max, "accounts_per_customer_max"
        )
        self.transactions_per_account_min = validate_integer(
            self.transactions_per_account_min, "transactions_per_account_min"
        )
        self.transactions_per_account_max = validate_integer(
            self.transactions_per_account_max, "transactions_per_account_max"
        )
        validate_range(
            self.accounts_per_customer_min, self.accounts_per_customer_max, "accounts_per_customer"
        )
        validate_range(
            self.transactions_per_account_min,
            self.transactions_per_account_max,
            "transactions_per_account",
        )
        self.max_retries = validate_integer(self.max_retries, "max_retries", 0)
        self.retry_delay_seconds = validate_float(
            self.retry_delay_seconds, "retry_delay_seconds", minimum=0.0
        )
        if self.workers is not None:
            self.workers = validate_integer(self.workers, "workers", 1)
        self.account_sample_rate = validate_float(
            self.account_sample_rate, "account_sample_rate", minimum=0.0, maximum=1.0
        )
        if self.account_sample_rate == 0.0:
            raise ValueError("account_sample_rate must be > 0")
        if self.seed is not None:
            self.seed = validate_integer(self.seed, "seed")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GenerationConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown generation settings: {', '.join(unknown)}")
        return cls(**data)

    def override(self, **overrides: Any) -> "GenerationConfig":
        """Return a copy with the non-None overrides applied (and re-validated)."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return GenerationConfig(**values)


@dataclass
class SeedConfig:
    """Configuration for the small-scale seed mode."""

    customers: int = 25
    accounts_per_customer_min: int = 1
    accounts_per_customer_max: int = 3
    transactions_per_account_min: int = 3
    transactions_per_account_max: int = 10
    seed: Optional[int] = None

    def __post_init__(self):
        self.customers = validate_integer(self.customers, "customers", 0)
        for name in (
            "accounts_per_customer_min",
            "accounts_per_customer_max",
            "transactions_per_account_min",
            "transactions_per_account_max",
        ):
            setattr(self, name, validate_integer(getattr(self, name), name))
        validate_range(
            self.accounts_per_customer_min, self.accounts_per_customer_max, "accounts_per_customer"
        )
        validate_range(
            self.transactions_per_account_min,
            self.transactions_per_account_max,
            "transactions_per_account",
        )
        if self.seed is not None:
            self.seed = validate_integer(self.seed, "seed")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SeedConfig":
        """Build a seed config from a ``seed_mode:`` mapping, rejecting unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown seed_mode settings: {', '.join(unknown)}")
        return cls(**data)

    def override(self, **overrides: Any) -> "SeedConfig":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return SeedConfig(**values)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        path: Path to YAML config file

    Returns:
        Parsed and validated configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    validate_config(config)
    return config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure.

    Args:
        config: Configuration dictionary

    Returns:
        True if valid

    Raises:
        ValueError: If configuration is invalid
    """
    if not config:
        raise ValueError("Configuration cannot be empty")
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed = {"generation", "seed_mode"}
    unknown = sorted(set(config) - allowed)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(unknown)}")

    if "generation" not in config:
        raise ValueError("Configuration must have 'generation' section")

    GenerationConfig.from_dict(config["generation"])

    if config.get("seed_mode") is not None:
        seed_section = config["seed_mode"]
        if not isinstance(seed_section, dict):
            raise ValueError("'seed_mode' section must be a mapping")
        SeedConfig.from_dict(seed_section)

    return True


def generation_config_from_file(path: str) -> GenerationConfig:
    """Load a YAML file and return its generation settings."""
    return GenerationConfig.from_dict(load_config(path)["generation"])


def seed_config_from_file(path: str) -> SeedConfig:
    """Load a YAML file and return its seed_mode settings (defaults if absent)."""
    return SeedConfig.from_dict(load_config(path).get("seed_mode"))
