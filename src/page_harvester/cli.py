"""
Command line interface for the paginated page harvester

page-harvester --url https://api.example.com/items --pagination-type offset --page-size 100
"""

import argparse
import logging
import signal
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config_loader import ConfigLoader, ConfigurationError, RunConfig
from .run_controller import CancellationToken, ProbeError, RunStatus, run_harvest

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger("page_harvester")


def setup_logging(logging_config: Dict[str, Any], verbose: bool = False) -> None:
    """Configure root logging with console and optional file output"""
    level_name = 'DEBUG' if verbose else str(logging_config.get('level', 'INFO')).upper()
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    log_file_name = logging_config.get('log_file_name')
    if log_file_name:
        log_path = Path(log_file_name)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page-harvester",
        description="Download every page of a paginated JSON API into page_<N>.json files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Page/pageSize pagination with defaults from a schema file
  page-harvester --schema configs/example.toml

  # Offset pagination configured entirely on the command line
  page-harvester --url https://api.example.com/items --pagination-type offset -p 100 -H Accept=application/json

  # Validate configuration only
  page-harvester --schema configs/example.toml --validate-only

  # Run as a Prefect flow
  page-harvester --schema configs/example.toml --prefect
        """
    )

    parser.add_argument("-s", "--schema", help="Path to schema file (TOML, YAML or JSON)")
    parser.add_argument("-u", "--url", help="Base URL for the API")
    parser.add_argument("-a", "--api-key", help="API key, sent as X-API-Key")
    parser.add_argument("-H", "--header", dest="headers", action="append", default=[],
                        metavar="KEY=VALUE", help="Extra request header, may be repeated")
    parser.add_argument("-o", "--output-dir", help="Output directory (default: output)")
    parser.add_argument("-p", "--page-size", type=int, help="Items per page (default: 250)")
    parser.add_argument("-r", "--rate-limit", type=int, dest="rate_limit_ms",
                        help="Delay before each page request in milliseconds (default: 100)")
    parser.add_argument("--pagination-type", choices=["offset", "cursor", "page"],
                        type=str.lower, help="Pagination convention (default: page)")
    parser.add_argument("--data-path", help="Response field holding the data array (default: data)")
    parser.add_argument("--total-count-path",
                        help="Response field holding the total item count (default: totalCount)")
    parser.add_argument("--cache", action="store_true", help="Enable development response caching")
    parser.add_argument("--validate-only", action="store_true", help="Only validate configuration")
    parser.add_argument("--prefect", action="store_true", help="Run as a Prefect flow")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect command line values that override the schema"""
    return {
        'base_url': args.url,
        'api_key': args.api_key,
        'headers': args.headers,
        'output_dir': args.output_dir,
        'page_size': args.page_size,
        'rate_limit_ms': args.rate_limit_ms,
        'pagination_type': args.pagination_type,
        'data_path': args.data_path,
        'total_count_path': args.total_count_path,
        'cache_enabled': args.cache or None
    }


def install_signal_handlers(token: CancellationToken) -> None:
    def handle(signum, frame):
        logger.warning(f"Received signal {signum}, cancelling after the current page")
        token.cancel()
        # A second Ctrl-C interrupts immediately
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, handle)
    signal.signal(signal.SIGTERM, handle)


def print_config_summary(run_config: RunConfig) -> None:
    endpoint = run_config.endpoint
    print("Configuration validation passed!")
    print(f"API: {run_config.name}")
    print(f"Base URL: {endpoint.base_url}")
    print(f"Pagination: {endpoint.pagination.pagination_type.value} ({endpoint.pagination.page_size} per page)")
    print(f"Rate limit: {int(endpoint.rate_limit.total_seconds() * 1000)} ms between pages")
    print(f"Output: {run_config.output_dir}")


def run_with_prefect(schema_path: Optional[str], overrides: Dict[str, Any]) -> int:
    from .prefect_flow import page_harvest_flow

    result = page_harvest_flow(schema_path=schema_path, overrides=overrides)
    if result.get('pipeline_status') != 'SUCCESS':
        print(f"Pipeline failed: {result.get('error', 'Unknown error')}")
        return EXIT_FAILURE
    print(f"Pages saved: {result.get('pages_saved', 0)}/{result.get('total_pages', 0)}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function; returns the process exit code"""
    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = overrides_from_args(args)

    try:
        run_config = ConfigLoader.load_run_config(Path(args.schema) if args.schema else None, overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(run_config.logging, verbose=args.verbose)

    if args.validate_only:
        print_config_summary(run_config)
        return EXIT_OK

    if args.prefect:
        return run_with_prefect(args.schema, overrides)

    token = CancellationToken()
    install_signal_handlers(token)

    try:
        summary = run_harvest(run_config, cancel_token=token)
    except ProbeError as e:
        logger.error(f"Run aborted: {e}")
        if args.verbose:
            logger.debug(f"Traceback: {traceback.format_exc()}")
        return EXIT_FAILURE

    if summary.status == RunStatus.CANCELLED:
        return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
