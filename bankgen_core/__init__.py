"""
Bank Data Generator - Core Library

Bulk generation of referentially-consistent synthetic banking data
(customers, accounts, transactions) for load and performance testing.
Supports: DuckDB, in-memory

Usage:
    from bankgen_core import GenerationRunner, GenerationConfig
    from bankgen_core.adapters.duckdb import DuckDBAdapter

    adapter = DuckDBAdapter("bank.duckdb")
    result = GenerationRunner(adapter, GenerationConfig(total_customers=1000)).run()
"""

__version__ = "0.1.0"

from .config import GenerationConfig, SeedConfig, load_config, validate_config
from .runner import GenerationRunner, RunResult, RunState

__all__ = [
    "GenerationRunner",
    "GenerationConfig",
    "SeedConfig",
    "RunResult",
    "RunState",
    "load_config",
    "validate_config",
    "__version__",
]
