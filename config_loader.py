"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml

from errors import ConfigError

DEFAULT_BACKUP_DIR = './backup'

DEFAULT_CONFIG: Dict[str, Any] = {
    'confluence': {
        'verify_ssl': True
    },
    'export': {
        'backup_dir': DEFAULT_BACKUP_DIR,
        'page_ids': [],
        'show_progress': True,
        'chunk_size': 8192
    },
    'advanced': {
        'request_timeout': 30
    },
    'logging': {},
    'report': {}
}


class ConfigLoader:
    """Handles loading, merging and validation of configuration."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file; None yields the defaults

        Returns:
            Configuration dictionary layered over the defaults

        Raises:
            ConfigError: If the file is missing, unreadable or not a mapping
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        if config_path is None:
            return config

        if not os.path.exists(config_path):
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)
        config = _deep_merge(config, config_data)

        # YAML reads bare numeric IDs as int; page IDs are opaque strings
        page_ids = get_nested(config, 'export.page_ids')
        if isinstance(page_ids, (str, int)):
            page_ids = [page_ids]
        if isinstance(page_ids, list) and isinstance(config.get('export'), dict):
            config['export']['page_ids'] = parse_page_ids(page_ids)

        return config

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: argparse namespace

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)
        for section in ('confluence', 'export', 'advanced', 'logging', 'report'):
            if not isinstance(merged.get(section), dict):
                merged[section] = {}

        if getattr(args, 'api_url', None):
            merged['confluence']['api_url'] = args.api_url

        if getattr(args, 'email', None):
            merged['confluence']['email'] = args.email

        if getattr(args, 'api_token', None):
            merged['confluence']['api_token'] = args.api_token

        if getattr(args, 'insecure', False):
            merged['confluence']['verify_ssl'] = False

        if getattr(args, 'backup_dir', None):
            merged['export']['backup_dir'] = args.backup_dir

        if getattr(args, 'page_ids', None):
            merged['export']['page_ids'] = parse_page_ids(args.page_ids)

        if getattr(args, 'no_progress', False):
            merged['export']['show_progress'] = False

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        if getattr(args, 'report', None):
            merged['report']['path'] = args.report

        return merged

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ConfigError: Listing every missing required value, or the first invalid one
        """
        missing = []
        for field in ('confluence.api_url', 'confluence.email', 'confluence.api_token'):
            value = get_nested(config, field)
            if value is None or value == '':
                missing.append(field)
            else:
                cls._check_unsubstituted(field, value)

        page_ids = get_nested(config, 'export.page_ids') or []
        if not page_ids:
            missing.append('export.page_ids')

        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        if not isinstance(page_ids, list) or not all(isinstance(page_id, str) and page_id for page_id in page_ids):
            raise ConfigError("export.page_ids must be a list of non-empty strings")

        cls._validate_url(get_nested(config, 'confluence.api_url'), 'confluence.api_url')

        backup_dir = get_nested(config, 'export.backup_dir') or DEFAULT_BACKUP_DIR
        if os.path.exists(backup_dir) and not os.path.isdir(backup_dir):
            raise ConfigError(f"export.backup_dir '{backup_dir}' is not a directory")

        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("advanced.request_timeout must be a positive number")

        chunk_size = get_nested(config, 'export.chunk_size', 8192)
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ConfigError("export.chunk_size must be a positive integer")

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @classmethod
    def _check_unsubstituted(cls, field: str, value: Any) -> None:
        if isinstance(value, str):
            match = cls.ENV_VAR_PATTERN.search(value)
            if match:
                raise ConfigError(
                    f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                    f"Please set the {match.group(1)} environment variable or provide a value."
                )

    @staticmethod
    def _validate_url(url: Any, field_name: str) -> None:
        """Validate URL format."""
        parsed = urlparse(str(url))
        if parsed.scheme not in ('http', 'https'):
            raise ConfigError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ConfigError(f"{field_name} missing hostname: {url}")


def parse_page_ids(values: List[str]) -> List[str]:
    """Split repeated and comma-separated page ID arguments into one ordered list."""
    page_ids = []
    for value in values:
        page_ids.extend(part.strip() for part in str(value).split(',') if part.strip())
    return page_ids


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "confluence.api_url")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config
    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


__all__ = ['ConfigLoader', 'get_nested', 'parse_page_ids', 'DEFAULT_CONFIG', 'DEFAULT_BACKUP_DIR']
