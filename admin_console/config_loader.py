"""
Configuration loading utilities for the property admin console.

This module loads config.yaml, deep-merges it over the built-in defaults and
exposes helpers for reading single values. The API base URL can be overridden
through the ADMIN_API_BASE_URL environment variable.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")
BASE_URL_ENV = "ADMIN_API_BASE_URL"

# Global configuration cache
_config_cache: Optional[Dict[str, Any]] = None


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Property Admin',
            'version': '1.0.0',
            'debug': False
        },
        'api': {
            'base_url': 'http://localhost:8000',
            'timeout': 15
        },
        'ui': {
            'page_title': 'ADMIN',
            'sidebar_title': 'Navigation',
            'page_size': 5
        },
        'schema': {
            'directory': 'schemas',
            'property_create': 'property_schema.yaml',
            'property_edit': 'property_edit_schema.yaml',
            'user_create': 'user_schema.yaml',
            'user_edit': 'user_edit_schema.yaml'
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }
    }


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    base_url = os.environ.get(BASE_URL_ENV)
    if base_url:
        config.setdefault('api', {})['base_url'] = base_url
        logger.info(f"API base URL overridden from {BASE_URL_ENV}")
    return config


def load_config(config_path: Optional[Path] = None, use_cache: bool = True) -> Dict[str, Any]:
    """
    Load application configuration.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)
        use_cache: Return the cached configuration when available

    Returns:
        Complete configuration dictionary
    """
    global _config_cache

    if config_path is None and use_cache and _config_cache is not None:
        return _config_cache

    path = config_path or CONFIG_FILE
    default_config = get_default_config()

    if not path.exists():
        logger.warning(f"Configuration file not found: {path}")
        logger.info("Using default configuration")
        config = default_config
    else:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f)

            if user_config is None:
                logger.warning(f"Configuration file is empty: {path}")
                config = default_config
            elif not isinstance(user_config, dict):
                logger.error(f"Configuration file is not a valid dictionary: {path}")
                config = default_config
            else:
                config = deep_merge(default_config, user_config)
                logger.info(f"Successfully loaded configuration from {path}")

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error in {path}: {e}")
            logger.info("Using default configuration")
            config = default_config

        except (IOError, OSError) as e:
            logger.error(f"Failed to read configuration file {path}: {e}")
            logger.info("Using default configuration")
            config = default_config

    config = _apply_env_overrides(config)

    if config_path is None:
        _config_cache = config
    return config


def clear_config_cache() -> None:
    """Forget the cached configuration so the next load re-reads config.yaml."""
    global _config_cache
    _config_cache = None


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Read one value from the loaded configuration.

    Args:
        section: Top-level section name (e.g. 'api')
        key: Key inside the section
        default: Value returned when the section or key is missing
    """
    config = load_config()
    section_values = config.get(section)
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and required fields.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ['app', 'api', 'ui', 'schema', 'logging']

    for section in required_sections:
        if not isinstance(config.get(section), dict):
            logger.warning(f"Missing required configuration section: {section}")
            return False

    base_url = config['api'].get('base_url')
    if not isinstance(base_url, str) or not base_url.startswith(('http://', 'https://')):
        logger.warning("api.base_url must be an http(s) URL")
        return False

    try:
        timeout = float(config['api'].get('timeout', 15))
        if timeout <= 0:
            logger.warning("api.timeout must be positive")
            return False
    except (ValueError, TypeError):
        logger.warning("api.timeout must be a valid number")
        return False

    try:
        page_size = int(config['ui'].get('page_size', 5))
        if page_size <= 0:
            logger.warning("ui.page_size must be positive")
            return False
    except (ValueError, TypeError):
        logger.warning("ui.page_size must be a valid integer")
        return False

    for key in ('property_create', 'property_edit', 'user_create', 'user_edit'):
        if not isinstance(config['schema'].get(key), str):
            logger.warning(f"Missing schema file name: schema.{key}")
            return False

    return True


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get a summary of the current configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary with configuration summary
    """
    return {
        'app_name': config.get('app', {}).get('name', 'Unknown'),
        'app_version': config.get('app', {}).get('version', 'Unknown'),
        'debug_mode': config.get('app', {}).get('debug', False),
        'api_base_url': config.get('api', {}).get('base_url', 'Unknown'),
        'api_timeout': config.get('api', {}).get('timeout', 15),
        'page_size': config.get('ui', {}).get('page_size', 5),
        'log_level': config.get('logging', {}).get('level', 'INFO')
    }
