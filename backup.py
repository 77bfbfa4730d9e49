#!/usr/bin/env python3
"""
Confluence Page Backup - Main CLI Entry Point

Exports a list of Confluence pages into a local directory tree: one directory
per page holding a Markdown rendering of the page body and copies of the
images it embeds.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from config_loader import ConfigLoader, get_nested
from errors import ConfigError
from logger import log_config, log_section, setup_logging
from orchestrator import ExportOrchestrator, ExportReport

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Back up Confluence pages as Markdown files with their images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Back up two pages into ./backup
  python backup.py --api-url https://example.atlassian.net/wiki/rest/api \\
      --email me@example.com --api-token $TOKEN --page-ids 12345,67890

  # Read settings from a YAML file, override the output directory
  python backup.py --config config.yaml --backup-dir ./snapshots

  # Verbose logging
  python backup.py --config config.yaml -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--backup-dir',
        type=str,
        help='Directory to save backups (default: ./backup)'
    )

    parser.add_argument(
        '--api-url',
        type=str,
        help='Base URL of the Confluence API (required)'
    )

    parser.add_argument(
        '--email',
        type=str,
        help='Email address for API authentication (required)'
    )

    parser.add_argument(
        '--api-token',
        type=str,
        help='API token for authentication (required)'
    )

    parser.add_argument(
        '--page-ids',
        action='append',
        help='Comma-separated Confluence page IDs to fetch; may be repeated (required)'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write a JSON report of the run to this path'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable the progress bar'
    )

    parser.add_argument(
        '--insecure',
        action='store_true',
        help='Skip SSL certificate verification'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def run_backup(config: dict, logger: logging.Logger) -> int:
    """Execute the backup pipeline and report the results."""
    page_ids = get_nested(config, 'export.page_ids', [])
    start_time = time.time()

    with ExportOrchestrator(config, logger=logging.getLogger('confluence_page_backup.orchestrator')) as orchestrator:
        outcomes = orchestrator.export_pages(page_ids)

    report_generator = ExportReport()
    report = report_generator.generate_report(outcomes, time.time() - start_time)
    print("\n" + report_generator.format_console_report(report))

    report_path = get_nested(config, 'report.path')
    if report_path:
        try:
            report_generator.export_json_report(report, report_path)
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {str(e)}")

    failed = report['summary']['pages_failed']
    if failed > 0:
        logger.warning(f"Backup completed with {failed} failed page(s)")
        return 1

    logger.info("Backup completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(verbosity=args.verbose, log_file=args.log_file)
    log_section("Confluence Page Backup")
    logger.info(f"Version: {__version__}")

    try:
        config = ConfigLoader.load(args.config)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}. Use --help for usage.", file=sys.stderr)
        return 2

    # A level from the config file applies unless -v was given
    config_level = get_nested(config, 'logging.level')
    if config_level and not args.verbose:
        try:
            logger = setup_logging(level=config_level, log_file=get_nested(config, 'logging.file'))
        except ValueError as e:
            print(f"ERROR: Configuration error: {e}", file=sys.stderr)
            return 2
    elif get_nested(config, 'logging.file') and not args.log_file:
        logger = setup_logging(verbosity=args.verbose, log_file=get_nested(config, 'logging.file'))

    log_config(config)

    try:
        return run_backup(config, logger)
    except KeyboardInterrupt:
        print("\nBackup interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
