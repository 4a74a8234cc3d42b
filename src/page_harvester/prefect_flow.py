"""
Prefect orchestration for the paginated page harvester
Wraps configuration validation and the page loop as Prefect tasks and a flow

page-harvester --schema configs/example.toml --prefect
"""

from pathlib import Path
from typing import Any, Dict, Optional

from prefect import flow, task, get_run_logger

from .config_loader import ConfigLoader, ConfigurationError
from .run_controller import ProbeError, run_harvest
from .run_observer import LoggingObserver

# ===================================================================
# PREFECT TASKS
# ===================================================================

@task(
    name="validate_configuration",
    description="Load the schema document and validate the merged configuration",
    retries=0  # Configuration validation should not retry
)
def validate_configuration(schema_path: Optional[str] = None,
                           overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Validate schema and overrides without touching the network

    Args:
        schema_path: Optional path to a TOML, YAML or JSON schema document
        overrides: Command line values that take precedence over the schema

    Returns:
        Validation results and config summary
    """
    logger = get_run_logger()
    logger.info(f"Validating configuration: {schema_path or '<command line only>'}")

    run_config = ConfigLoader.load_run_config(Path(schema_path) if schema_path else None, overrides)
    endpoint = run_config.endpoint

    logger.info("Configuration validation passed")
    return {
        'status': 'valid',
        'config_summary': {
            'api_name': run_config.name,
            'base_url': endpoint.base_url,
            'pagination_strategy': endpoint.pagination.pagination_type.value,
            'page_size': endpoint.pagination.page_size,
            'rate_limit_ms': int(endpoint.rate_limit.total_seconds() * 1000),
            'output_dir': str(run_config.output_dir)
        }
    }


@task(
    name="harvest_pages",
    description="Probe the endpoint, then fetch and persist every page",
    retries=0  # Failed pages are skipped, never retried
)
def harvest_pages(schema_path: Optional[str] = None,
                  overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Run the page loop and return the run summary as a dictionary

    Raises:
        ConfigurationError: If the configuration is invalid
        ProbeError: If the total count cannot be discovered
    """
    logger = get_run_logger()
    run_config = ConfigLoader.load_run_config(Path(schema_path) if schema_path else None, overrides)

    summary = run_harvest(run_config, observer=LoggingObserver(logger))
    logger.info(f"Saved {summary.pages_saved} of {summary.total_pages} pages")
    return summary.to_dict()


# ===================================================================
# PREFECT FLOWS
# ===================================================================

@flow(
    name="page-harvest-pipeline",
    description="Paginated REST API download with one JSON artifact per page",
    version="1.0.0",
    log_prints=True
)
def page_harvest_flow(schema_path: Optional[str] = None,
                      overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Complete harvest workflow using Prefect orchestration

    Returns:
        Dictionary with pipeline_status SUCCESS or FAILED
    """
    logger = get_run_logger()
    logger.info("Starting page harvest pipeline")

    try:
        validation_results = validate_configuration(schema_path, overrides)
        run_results = harvest_pages(schema_path, overrides)
    except (ConfigurationError, ProbeError) as e:
        logger.error(f"Pipeline execution failed: {e}")
        return {
            'pipeline_status': 'FAILED',
            'error': str(e),
            'error_type': type(e).__name__
        }

    logger.info("Page harvest pipeline completed")
    return {
        'pipeline_status': 'SUCCESS',
        'config_summary': validation_results['config_summary'],
        **run_results
    }
