"""
ConfigLoader module for loading and validating API schema documents
"""

import json
import os
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Any, List, Mapping, Optional, Tuple

import yaml

from .pagination_strategy import PaginationType


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


@dataclass(frozen=True)
class PaginationConfig:
    """Pagination settings for a single endpoint"""
    pagination_type: PaginationType
    page_size: int
    data_path: str
    total_count_path: str


@dataclass(frozen=True)
class EndpointConfig:
    """Immutable endpoint description consumed by the engine and controller"""
    base_url: str
    headers: Mapping[str, str]
    pagination: PaginationConfig
    rate_limit: timedelta
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class RunConfig:
    """Everything needed for one harvesting run"""
    name: str
    endpoint: EndpointConfig
    output_dir: Path
    cache: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads schema documents and merges them with command line overrides"""

    # Defaults mirror the command line defaults
    DEFAULTS = {
        'name': 'api',
        'pagination_type': 'page',
        'page_size': 250,
        'data_path': 'data',
        'total_count_path': 'totalCount',
        'rate_limit_ms': 100,
        'timeout_seconds': 30.0,
        'output_dir': 'output',
    }

    SUPPORTED_AUTH_TYPES = ('api_key', 'bearer_token')

    @staticmethod
    def load_schema(schema_path: Path) -> Dict[str, Any]:
        """
        Load a schema document from TOML, YAML or JSON depending on suffix

        Args:
            schema_path: Path to the schema file

        Returns:
            Parsed schema document

        Raises:
            ConfigurationError: If the file is missing, unreadable or malformed
        """
        if not schema_path.exists():
            raise ConfigurationError(f"Schema file not found: {schema_path}")

        suffix = schema_path.suffix.lower()
        try:
            if suffix == '.toml':
                with open(schema_path, 'rb') as f:
                    schema = tomllib.load(f)
            elif suffix in ('.yaml', '.yml'):
                with open(schema_path, 'r', encoding='utf-8') as f:
                    schema = yaml.safe_load(f) or {}
            elif suffix == '.json':
                with open(schema_path, 'r', encoding='utf-8') as f:
                    schema = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported schema format '{suffix}' for {schema_path}")
        except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid schema syntax in {schema_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Unable to read schema file {schema_path}: {e}") from e

        if not isinstance(schema, dict):
            raise ConfigurationError(f"Schema document must be a mapping: {schema_path}")

        return schema

    @staticmethod
    def build_run_config(schema: Dict[str, Any],
                         overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
        """
        Build a validated RunConfig from a schema document and overrides

        Args:
            schema: Parsed schema document (may be empty)
            overrides: Values supplied on the command line; None entries are ignored

        Returns:
            RunConfig with immutable endpoint configuration

        Raises:
            ConfigurationError: If any value is missing or invalid
        """
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        api_section = ConfigLoader._section(schema, 'api')
        pagination_section = ConfigLoader._section(schema, 'pagination')
        rate_section = ConfigLoader._section(schema, 'rate_limits')
        http_section = ConfigLoader._section(schema, 'http')
        output_section = ConfigLoader._section(schema, 'output')

        def pick(key: str, section_value: Any) -> Any:
            if key in overrides:
                return overrides[key]
            if section_value is not None:
                return section_value
            return ConfigLoader.DEFAULTS.get(key)

        base_url = pick('base_url', api_section.get('base_url'))
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigurationError("Missing required configuration item: base_url")

        pagination_type = ConfigLoader.parse_pagination_type(
            pick('pagination_type', pagination_section.get('strategy'))
        )
        page_size = ConfigLoader._validate_page_size(
            pick('page_size', pagination_section.get('page_size'))
        )
        data_path = ConfigLoader._validate_path(
            'data_path', pick('data_path', pagination_section.get('data_path'))
        )
        total_count_path = ConfigLoader._validate_path(
            'total_count_path', pick('total_count_path', pagination_section.get('total_count_path'))
        )
        rate_limit_ms = ConfigLoader._validate_rate_limit(
            pick('rate_limit_ms', rate_section.get('delay_ms'))
        )

        timeout_seconds = pick('timeout_seconds', http_section.get('timeout_seconds'))
        if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)) \
                or timeout_seconds <= 0:
            raise ConfigurationError(f"timeout_seconds must be a positive number, got {timeout_seconds!r}")

        headers = ConfigLoader._build_headers(schema, overrides)

        endpoint = EndpointConfig(
            base_url=base_url,
            headers=MappingProxyType(headers),
            pagination=PaginationConfig(
                pagination_type=pagination_type,
                page_size=page_size,
                data_path=data_path,
                total_count_path=total_count_path,
            ),
            rate_limit=timedelta(milliseconds=rate_limit_ms),
            timeout_seconds=float(timeout_seconds),
        )

        cache = dict(ConfigLoader._section(schema, 'cache'))
        if overrides.get('cache_enabled'):
            cache['enabled'] = True

        return RunConfig(
            name=str(pick('name', api_section.get('name'))),
            endpoint=endpoint,
            output_dir=Path(pick('output_dir', output_section.get('directory'))),
            cache=cache,
            logging=dict(ConfigLoader._section(schema, 'logging')),
        )

    @staticmethod
    def load_run_config(schema_path: Optional[Path],
                        overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
        """Load the schema (if any) and build the RunConfig in one step"""
        schema = ConfigLoader.load_schema(schema_path) if schema_path else {}
        return ConfigLoader.build_run_config(schema, overrides)

    @staticmethod
    def parse_pagination_type(value: Any) -> PaginationType:
        """
        Parse a pagination strategy name, case-insensitively

        Raises:
            ConfigurationError: If the name is not offset, cursor or page
        """
        if isinstance(value, PaginationType):
            return value
        try:
            return PaginationType(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(t.value for t in PaginationType)
            raise ConfigurationError(
                f"Unsupported pagination strategy: {value!r} (expected one of: {valid})"
            ) from None

    @staticmethod
    def parse_header(raw: str) -> Tuple[str, str]:
        """
        Parse a 'KEY=value' header argument

        Raises:
            ConfigurationError: If no '=' is present or the key is empty
        """
        key, sep, value = raw.partition('=')
        if not sep:
            raise ConfigurationError(f"invalid KEY=value: no `=` found in `{raw}`")
        if not key:
            raise ConfigurationError(f"invalid KEY=value: empty key in `{raw}`")
        return key, value

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value with proper error handling

        Raises:
            ConfigurationError: If environment variable is not set
        """
        value = os.getenv(env_var_name)
        if value is None:
            raise ConfigurationError(f"Environment variable '{env_var_name}' is not set")
        return value

    @staticmethod
    def authentication_headers(auth_config: Dict[str, Any]) -> Dict[str, str]:
        """
        Translate an authentication section into request headers

        Args:
            auth_config: Section with 'type' and either literal or *_env credentials

        Returns:
            Headers carrying the credentials

        Raises:
            ConfigurationError: If the type is unsupported or a credential is missing
        """
        auth_type = auth_config.get('type')

        if auth_type == 'api_key':
            return {'X-API-Key': ConfigLoader._credential(auth_config, 'api_key')}

        elif auth_type == 'bearer_token':
            return {'Authorization': f"Bearer {ConfigLoader._credential(auth_config, 'token')}"}

        raise ConfigurationError(f"Unsupported authentication type: {auth_type}")

    @staticmethod
    def _credential(auth_config: Dict[str, Any], key: str) -> str:
        if auth_config.get(key):
            return str(auth_config[key])
        env_name = auth_config.get(f"{key}_env")
        if env_name:
            return ConfigLoader.get_environment_value(env_name)
        raise ConfigurationError(f"Missing '{key}' or '{key}_env' in [authentication]")

    @staticmethod
    def _build_headers(schema: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        cli_api_key = overrides.get('api_key')

        # A command line key replaces schema authentication, so its env vars are never resolved
        auth_section = ConfigLoader._section(schema, 'authentication')
        if auth_section and not cli_api_key:
            headers.update(ConfigLoader.authentication_headers(auth_section))

        for key, value in ConfigLoader._section(schema, 'headers').items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ConfigurationError(f"Header names and values must be strings: {key!r}={value!r}")
            headers[key] = value

        if cli_api_key:
            headers.update(ConfigLoader.authentication_headers(
                {'type': 'api_key', 'api_key': cli_api_key}
            ))

        header_args: List[str] = overrides.get('headers', [])
        for raw in header_args:
            key, value = ConfigLoader.parse_header(raw)
            headers[key] = value

        return headers

    @staticmethod
    def _section(schema: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = schema.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Section [{name}] must be a table")
        return section

    @staticmethod
    def _validate_page_size(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigurationError(f"page_size must be a positive integer, got {value!r}")
        return value

    @staticmethod
    def _validate_rate_limit(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigurationError(f"rate limit must be a non-negative integer of milliseconds, got {value!r}")
        return value

    @staticmethod
    def _validate_path(name: str, value: Any) -> str:
        if not isinstance(value, str) or not value.strip('/'):
            raise ConfigurationError(f"{name} must be a non-empty field path, got {value!r}")
        return value
