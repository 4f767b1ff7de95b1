"""
Command-line interface for the bank data generator.

Provides the bulk load, the small seed and schema/config helpers.
"""

import argparse
import os
from typing import Optional

from bankgen_core.logger_utils import configure_logging, get_logger

logger = get_logger(__name__)


def main(args: Optional[list] = None) -> int:
    """Main CLI entry point."""
    # Configure logging (defaults to text, JSON if BANKGEN_JSON_LOGS=1)
    configure_logging()

    parser = argparse.ArgumentParser(
        prog="bankgen",
        description="Bulk banking dataset generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Full stress-test load into DuckDB
    bankgen run --db=bank.duckdb

    # Small reproducible run from a config file
    bankgen run --db=bank.duckdb --config=config/performance_test.yaml --seed=42

    # Dry run without a database
    bankgen run --platform=memory --customers=1000 --quiet

    # Development seed data
    bankgen seed --db=bank.duckdb
    bankgen seed --db=bank.duckdb --config=config/stress_test.yaml

    # Validate configuration
    bankgen config validate --file=config/stress_test.yaml
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # === bankgen version ===
    subparsers.add_parser("version", help="Show version info")

    # === bankgen run ===
    run_parser = subparsers.add_parser("run", help="Generate a bulk dataset")
    run_parser.add_argument(
        "--platform",
        "-p",
        choices=["duckdb", "memory"],
        default="duckdb",
        help="Storage backend (default: duckdb)",
    )
    run_parser.add_argument("--db", help="DuckDB database path")
    run_parser.add_argument("--config", help="YAML configuration file")
    run_parser.add_argument("--customers", type=int, help="Number of customers to generate")
    run_parser.add_argument("--batch-size", type=int, help="Records per insert batch")
    run_parser.add_argument("--workers", type=int, help="Worker processes (default: CPUs - 1)")
    run_parser.add_argument("--seed", type=int, help="Random seed for a reproducible dataset")
    run_parser.add_argument(
        "--sample-rate", type=float, help="Fraction of customers that get accounts (0-1]"
    )
    run_parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Do not clear existing data first. Accounts and transactions are then also "
        "generated for previously stored customers and accounts, and the summary totals "
        "include the earlier rows",
    )
    run_parser.add_argument(
        "--reset", action="store_true", help="Delete the database file before running"
    )
    run_parser.add_argument("--quiet", "-q", action="store_true", help="Hide progress bars")

    # === bankgen seed ===
    seed_parser = subparsers.add_parser("seed", help="Create a small development dataset")
    seed_parser.add_argument(
        "--platform", "-p", choices=["duckdb", "memory"], default="duckdb", help="Storage backend"
    )
    seed_parser.add_argument("--db", help="DuckDB database path")
    seed_parser.add_argument("--config", help="YAML configuration file (seed_mode section)")
    seed_parser.add_argument("--customers", type=int, help="Number of customers (default: 25)")
    seed_parser.add_argument("--seed", type=int, help="Random seed")

    # === bankgen init ===
    init_parser = subparsers.add_parser("init", help="Create the bank schema and tables")
    init_parser.add_argument(
        "--platform", "-p", choices=["duckdb"], default="duckdb", help="Storage backend"
    )
    init_parser.add_argument("--db", help="DuckDB database path")
    init_parser.add_argument("--reset", action="store_true", help="Drop and recreate tables")

    # === bankgen config ===
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_cmd")

    validate_parser = config_subparsers.add_parser("validate", help="Validate config file")
    validate_parser.add_argument("--file", "-f", required=True, help="Config file path")

    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 0

    if parsed_args.command == "version":
        from bankgen_core import __version__

        print(f"bank-datagen v{__version__}")
        return 0

    if parsed_args.command == "config":
        return handle_config(parsed_args)

    if parsed_args.command == "init":
        return handle_init(parsed_args)

    if parsed_args.command == "run":
        return handle_run(parsed_args)

    if parsed_args.command == "seed":
        return handle_seed(parsed_args)

    return 0


def get_adapter(args):
    """Helper to create adapter from args. DuckDB adapters get the schema created."""
    if args.platform == "memory":
        from bankgen_core.adapters.memory import MemoryAdapter

        return MemoryAdapter()

    elif args.platform == "duckdb":
        db_path = args.db or os.environ.get("BANKGEN_DATABASE")
        if not db_path:
            raise ValueError("--db required for DuckDB (or set BANKGEN_DATABASE)")
        from bankgen_core.adapters.duckdb import DuckDBAdapter

        return DuckDBAdapter(db_path)

    else:
        raise ValueError(f"Unknown platform {args.platform}")


def remove_database_files(db_path: str) -> None:
    """Delete a DuckDB file and its WAL. Failures are logged, not raised."""
    if not db_path or db_path == ":memory:":
        return
    for path in (db_path, f"{db_path}.wal"):
        if not os.path.exists(path):
            continue
        try:
            os.remove(path)
            logger.info(f"Removed {path}")
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")


def handle_init(args) -> int:
    """Handle init command."""
    from bankgen_core.schema_manager import SchemaManager

    try:
        adapter = get_adapter(args)
    except Exception as e:
        print(f"Error creating adapter: {e}")
        return 1

    try:
        print("Initializing bank tables...")
        SchemaManager(adapter).initialize(reset=args.reset)
        print("✅ Bank tables initialized.")
        return 0
    except Exception as e:
        print(f"❌ Initialization failed: {e}")
        return 1
    finally:
        adapter.close()


def handle_config(args) -> int:
    """Handle config subcommands."""
    from bankgen_core.config import load_config

    if args.config_cmd == "validate":
        try:
            load_config(args.file)
            print(f"✅ Configuration valid: {args.file}")
            return 0
        except Exception as e:
            print(f"❌ Configuration invalid: {e}")
            return 1

    return 0


def build_config(args):
    """Defaults, then the YAML file, then command-line flags."""
    from bankgen_core.config import GenerationConfig, generation_config_from_file

    config = generation_config_from_file(args.config) if args.config else GenerationConfig()
    return config.override(
        total_customers=args.customers,
        batch_size=args.batch_size,
        workers=args.workers,
        seed=args.seed,
        account_sample_rate=args.sample_rate,
        clear_existing=False if args.keep_existing else None,
    )


def handle_run(args) -> int:
    """Handle run command."""
    from bankgen_core.progress import ProgressReporter
    from bankgen_core.runner import GenerationRunner

    try:
        config = build_config(args)
    except Exception as e:
        print(f"❌ Configuration invalid: {e}")
        return 1

    if args.reset and args.platform == "duckdb":
        remove_database_files(args.db or os.environ.get("BANKGEN_DATABASE"))

    try:
        adapter = get_adapter(args)
        if args.platform == "duckdb":
            from bankgen_core.schema_manager import SchemaManager

            SchemaManager(adapter).initialize()
    except Exception as e:
        print(f"Error: {e}")
        return 1

    try:
        runner = GenerationRunner(adapter, config, progress=ProgressReporter(enabled=not args.quiet))
        result = runner.run()

        # Print summary
        print(f"\n{'=' * 60}")
        print(f"  Generation Complete - {result.status}")
        print(f"{'=' * 60}")
        print(f"  Run ID:          {result.run_id}")
        print(f"  Seed:            {result.seed}")
        print(f"  Customers:       {result.customers:,}")
        print(f"  Accounts:        {result.accounts:,}")
        print(f"  Transactions:    {result.transactions:,}")
        if not config.clear_existing and result.written:
            written = ", ".join(f"{count:,} {name}" for name, count in result.written.items())
            print(f"  Written:         {written} (totals include existing rows)")
        print(f"  Duration:        {result.duration_seconds:.1f}s")
        if result.completed_phases:
            print(f"  Completed:       {', '.join(result.completed_phases)}")
        for warning in result.warnings:
            print(f"  Warning:         {warning}")
        if result.error:
            print(f"  Phase '{result.failed_phase}' failed: {result.error}")
        print(f"{'=' * 60}\n")

        return 0 if result.succeeded else 1

    finally:
        adapter.close()


def handle_seed(args) -> int:
    """Handle seed command."""
    from bankgen_core.config import SeedConfig, seed_config_from_file
    from bankgen_core.seed import run_seed

    try:
        config = seed_config_from_file(args.config) if args.config else SeedConfig()
        config = config.override(customers=args.customers, seed=args.seed)
        adapter = get_adapter(args)
    except Exception as e:
        print(f"Error: {e}")
        return 1

    try:
        if args.platform == "duckdb":
            from bankgen_core.schema_manager import SchemaManager

            SchemaManager(adapter).initialize()

        counts = run_seed(adapter, config)

        print("\nSeeding completed!")
        print("-" * 19)
        print(f"Created {counts['customers']} customers")
        print(f"Created {counts['accounts']} accounts")
        print(f"Created {counts['transactions']} transactions")
        return 0
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        return 1
    finally:
        adapter.close()
