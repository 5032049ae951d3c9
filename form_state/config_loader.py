"""
Configuration loading utilities for form state applications.

Loads config.yaml, merges it over defaults and applies the logging settings.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


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
            'name': 'Form State Demo',
            'version': '1.0.0',
            'debug': False
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        },
        'forms': {
            'schemas_dir': 'schemas',
            'default_schema': 'signup_form.yaml',
            'state_prefix': 'form_'
        }
    }


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.
    
    Missing, empty or unreadable files fall back to the defaults.
    
    Args:
        config_path: Optional path to config file (defaults to config.yaml)
        
    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    
    default_config = get_default_config()
    
    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config
    
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
        
        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return default_config
        
        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            logger.info("Using default configuration")
            return default_config
        
        config = deep_merge(default_config, user_config)
        
        logger.info(f"Successfully loaded configuration from {config_path}")
        return config
        
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config
        
    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and required fields.
    
    Args:
        config: Configuration dictionary to validate
        
    Returns:
        True if configuration is valid, False otherwise
    """
    for section in ('app', 'logging', 'forms'):
        if not isinstance(config.get(section), dict):
            logger.warning(f"Missing required configuration section: {section}")
            return False
    
    level = config['logging'].get('level', 'INFO')
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        logger.warning(f"Unknown logging level: {level}")
        return False
    
    forms = config['forms']
    for key in ('schemas_dir', 'default_schema', 'state_prefix'):
        if not isinstance(forms.get(key), str):
            logger.warning(f"forms.{key} must be a string")
            return False
    
    if not forms['default_schema'].endswith(('.yaml', '.yml')):
        logger.warning(f"forms.default_schema is not a YAML file: {forms['default_schema']}")
        return False
    
    return True


def get_logging_level(level_str: str) -> int:
    """Map string logging level to logging constant."""
    return LOG_LEVELS.get(str(level_str).upper(), logging.INFO)


def configure_logging(config: Dict[str, Any]) -> int:
    """
    Apply the logging section of a configuration.
    
    Args:
        config: Configuration dictionary
        
    Returns:
        The logging level that was applied
    """
    logging_config = config.get('logging', {})
    level = get_logging_level(logging_config.get('level', 'INFO'))
    log_format = logging_config.get('format', get_default_config()['logging']['format'])
    
    logging.basicConfig(level=level, format=log_format)
    logging.getLogger('form_state').setLevel(level)
    
    logger.debug(f"Logging configured at level {logging.getLevelName(level)}")
    return level


def get_schema_path(config: Dict[str, Any], schema_name: Optional[str] = None) -> Path:
    """Resolve a form definition file inside the configured schemas directory."""
    forms = config.get('forms', {})
    schemas_dir = Path(forms.get('schemas_dir', 'schemas'))
    return schemas_dir / (schema_name or forms.get('default_schema', 'signup_form.yaml'))


def get_state_prefix(config: Dict[str, Any], form_name: str) -> str:
    """Session state prefix for one form, so several forms can share a session."""
    prefix = config.get('forms', {}).get('state_prefix', 'form_')
    return f"{prefix}{form_name}_"
