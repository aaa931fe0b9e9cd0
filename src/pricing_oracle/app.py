# src/pricing_oracle/app.py
"""
Application Entry Point - Command Line Interface

This module serves as the composition root for the pricing oracle.
It parses arguments, wires settings, sources and services, runs one pricing
pass and prints (and optionally submits) the resulting ConversionTable.

Files that USE this module:
- pricing-oracle console script (pyproject entry point)
- python -m pricing_oracle

Files that this module USES:
- pricing_oracle.shared.logging_conf (setup_logging for logging configuration)
- pricing_oracle.config (settings and the YAML loader)
- pricing_oracle.adapters.providers.registry (enabled price / forex sources)
- pricing_oracle.adapters.ledger (ledger client for --submit)
- pricing_oracle.adapters.formatting (tables and JSON)
- pricing_oracle.application (PricingService, ForexAggregator)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from pricing_oracle import __version__
from pricing_oracle.adapters.formatting.formatter import (
    format_forex_table,
    format_results_table,
    table_to_json,
)
from pricing_oracle.adapters.ledger.client import LedgerClient, LedgerGatewayClient
from pricing_oracle.adapters.providers.registry import build_forex_sources, build_price_sources
from pricing_oracle.application.forex_aggregator import ForexAggregator
from pricing_oracle.application.pricing_service import PricingRun, PricingService
from pricing_oracle.config import settings
from pricing_oracle.config.loader import RunConfig, load_config
from pricing_oracle.domain.errors import ConfigError, SubmissionError
from pricing_oracle.shared.logging_conf import setup_logging

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_SUBMISSION_FAILED = 2
EXIT_INTERRUPTED = 130

log = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pricing-oracle",
        description="Fetch token prices, validate, build ConversionTable, and optionally submit it to the ledger",
    )
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config YAML file")
    parser.add_argument(
        "-o", "--output", choices=("table", "json"), default="table",
        help="Output format: 'table' (default) or 'json'",
    )
    parser.add_argument("-u", "--unit", type=int, default=None, help="Only fetch for a specific unit index")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--submit", action="store_true",
        help="Submit the ConversionTable to the ledger",
    )
    mode.add_argument(
        "--dry-run", action="store_true",
        help="Build and print the ConversionTable JSON without contacting the ledger",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _names(config: RunConfig) -> dict[int, str]:
    return {u.unit_index: u.name for u in config.units}


def submit(service: PricingService, run: PricingRun, config: RunConfig, ledger: LedgerClient) -> int:
    """
    Fetch the global definition, print the table and submit it.

    The table is always printed before the submission is attempted, so a
    failed submission still leaves the operator with the computed table.
    """
    try:
        global_definition = ledger.fetch_global_definition()
    except SubmissionError as e:
        log.error("Fetching current GlobalDefinition failed: %s", e)
        print("--- ConversionTable (preview, not submitted) ---")
        print(table_to_json(service.build_table(run, config)))
        return EXIT_SUBMISSION_FAILED

    table = service.build_table(run, config, global_definition)
    print("--- ConversionTable to submit ---")
    print(table_to_json(table))

    try:
        confirmation = ledger.submit_conversion_table(table)
    except SubmissionError as e:
        log.error("Submitting ConversionTable failed: %s", e)
        return EXIT_SUBMISSION_FAILED

    print(f"Submitted ConversionTable: {confirmation}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run one pricing pass.

    This function:
    1. Parses arguments, sets up logging and loads the YAML configuration
    2. Registers the enabled price and forex sources
    3. Fetches, aggregates and resolves every configured unit
    4. Prints the operator table, the ConversionTable JSON, or submits it

    Returns:
        Process exit code
    """
    args = create_parser().parse_args(argv)

    # JSON on stdout must stay machine readable
    printing_json = args.output == "json" or args.dry_run or args.submit
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        log_to_stdout=settings.log_stdout and not printing_json,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        log.error("Loading config from %s failed: %s", args.config, e)
        return EXIT_CONFIG_ERROR

    forex = ForexAggregator(
        build_forex_sources(
            use_twelve_data=config.forex.use_twelve_data,
            use_coinapi=config.forex.use_coinapi,
            cfg=settings,
        ),
        policy=config.forex.batch_policy,
    )
    service = PricingService(build_price_sources(settings), forex)

    try:
        run = asyncio.run(service.run(config, unit_filter=args.unit))
    except KeyboardInterrupt:
        log.warning("Interrupted - no ConversionTable emitted")
        return EXIT_INTERRUPTED

    if args.submit:
        return submit(service, run, config, LedgerGatewayClient(settings))

    if args.dry_run:
        print(table_to_json(service.build_table(run, config)))
        return EXIT_OK

    if args.output == "json":
        print(table_to_json(service.build_table(run, config)))
    else:
        print()
        print(format_results_table(run.results.values(), _names(config)))
        print()
        print(format_forex_table(run.forex_rates))
        print()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
