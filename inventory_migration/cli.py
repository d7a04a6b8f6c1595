"""Command line entry point for the inventory migration."""

import argparse
import logging
import sys
from typing import List, Optional

from .exceptions import MigrationError
from .models.migration import MigrationConfig, MigrationRun, RunAction
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inventory Migration Tool - Move application inventory between REST services"
    )
    parser.add_argument(
        "action",
        nargs="+",
        choices=[a.value for a in RunAction],
        help="One or more actions, run in the given order",
    )
    parser.add_argument(
        "-c", "--config",
        default="./migration-config.json",
        help="Path to the JSON configuration file",
    )
    parser.add_argument(
        "-d", "--data-dir",
        default="./migration-data",
        help="Directory holding the per-type snapshot files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-s", "--skip-destination-check",
        action="store_true",
        help="Skip destination seed preload on export and collision check on import",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Log destination creates and deletes without sending them",
    )
    return parser


def print_summary(run: MigrationRun) -> None:
    print("\n" + "=" * 60)
    print(f"{run.action.value.upper()} COMPLETE")
    print("=" * 60)
    print(f"Status: {run.status.value}")
    print(f"Records Processed: {run.total_records_processed}")
    print(f"Succeeded: {run.total_records_succeeded}")
    print(f"Failed: {run.total_records_failed}")
    warnings = [w for step in run.steps for w in step.warnings]
    if warnings:
        print(f"Warnings: {len(warnings)}")
        for warning in warnings:
            print(f"  - {warning}")
    if run.duration_seconds:
        print(f"Duration: {run.duration_seconds:.2f} seconds")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = MigrationConfig.from_json_file(args.config)
        orchestrator = MigrationOrchestrator(
            config,
            data_dir=args.data_dir,
            skip_destination_check=args.skip_destination_check,
            dry_run=args.dry_run,
        )
        for action in args.action:
            run = orchestrator.run(RunAction(action))
            print_summary(run)
    except MigrationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
