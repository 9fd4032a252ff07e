# fleet_gps_sync/config/loader.py
"""
Configuration loading logic.

Bridges the YAML file on disk and the typed models in `config_models.py`:

    1.  File I/O: locating and reading the configuration file.
    2.  Parsing: YAML text to Python dictionaries.
    3.  Environment: filling the vault key from ENCRYPTION_KEY when the file
        does not carry one.
    4.  Validation: instantiating `SyncServiceConfig`.
    5.  Error handling: logging low-level failures with context before
        re-raising.
"""

import logging
import os
from pathlib import Path
from typing import Any, Final

import yaml

from fleet_gps_sync.config.config_models import SyncServiceConfig

logger: logging.Logger = logging.getLogger(__name__)

__all__: list[str] = ['ENCRYPTION_KEY_ENV_VAR', 'load_config']

DEFAULT_CONFIG_PATH: Final[Path] = Path('config/sync_config.yaml')
ENCRYPTION_KEY_ENV_VAR: Final[str] = 'ENCRYPTION_KEY'


def _apply_environment_overrides(raw_config: dict[str, Any]) -> dict[str, Any]:
    """Fill vault.encryption_key from the environment if the file omits it."""
    vault_section: Any = raw_config.get('vault')
    if vault_section is None:
        vault_section = {}
        raw_config['vault'] = vault_section

    if isinstance(vault_section, dict) and not vault_section.get('encryption_key'):
        env_key: str | None = os.environ.get(ENCRYPTION_KEY_ENV_VAR)
        if env_key:
            logger.debug(
                'vault.encryption_key not in config file, using %s',
                ENCRYPTION_KEY_ENV_VAR,
            )
            vault_section['encryption_key'] = env_key

    return raw_config


def load_config(config_path: Path | str | None = None) -> SyncServiceConfig:
    """Load and validate the sync service configuration from a YAML file.

    Args:
        config_path: Path to the YAML file. Defaults to
            'config/sync_config.yaml' relative to the working directory.

    Returns:
        Validated SyncServiceConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file cannot be parsed.
        ValueError: If the content fails validation, including a missing
            vault key in both the file and the environment.

    Example:
        >>> config = load_config('config/sync_config.yaml')
        >>> config.database.url
        'sqlite:///fleet.db'
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        logger.debug('No config path provided, using default: %s', config_path)
    else:
        config_path = Path(config_path)

    logger.info('Loading sync service configuration from: %s', config_path)

    if not config_path.exists():
        error_message: str = f'Configuration file not found: {config_path}'
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    try:
        with Path.open(config_path, encoding='utf-8') as config_file:
            raw_config_data: Any = yaml.safe_load(config_file)
    except yaml.YAMLError as error:
        error_message = f'Failed to parse YAML configuration: {error}'
        logger.error(error_message)
        raise yaml.YAMLError(error_message) from error

    if raw_config_data is None:
        raw_config_data = {}
    if not isinstance(raw_config_data, dict):
        error_message = (
            f'Configuration root must be a mapping, got {type(raw_config_data).__name__}'
        )
        logger.error(error_message)
        raise ValueError(error_message)

    raw_config_data = _apply_environment_overrides(raw_config_data)

    try:
        validated_config = SyncServiceConfig(**raw_config_data)
    except ValueError as error:
        error_message = f'Configuration validation failed: {error}'
        logger.error(error_message)
        raise ValueError(error_message) from error

    logger.info('Configuration loaded and validated successfully')
    return validated_config
