"""
Configuration Management System for Archon
"""

import os
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger('archon.core.config_manager')

COMMANDS_DIR = Path(__file__).resolve().parent.parent / "commands" / "slash_commands"


class Environment(Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class BotConfiguration(BaseModel):
    """Main bot configuration model with Pydantic validation"""

    # Discord Configuration
    bot_token: str = ""
    client_id: str = ""
    dev_guild_id: str = ""
    command_prefix: str = "^"
    reply_unknown_commands: bool = False
    slash_commands_dir: str = str(COMMANDS_DIR)

    # Logging Configuration
    log_level: str = "INFO"
    log_file_path: Optional[str] = None
    log_max_bytes: int = 32 * 1024 * 1024  # 32MB
    log_backup_count: int = 5

    # Webhook Server
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 3030

    # Clockify
    clockify_api_url: str = "https://api.clockify.me/api/v1"
    clockify_api_key: str = ""
    clockify_workspace_id: str = ""
    clockify_timeout: int = 10

    # Channel Mappings
    channel_mappings_path: str = "./config/channelMappings.json"
    default_channel_id: str = ""
    log_channel_id: str = ""
    announcement_channel_id: str = ""
    clockify_channel_id: str = ""
    dev_commands_channel_id: str = ""

    @field_validator(
        'client_id', 'dev_guild_id', 'default_channel_id', 'log_channel_id',
        'announcement_channel_id', 'clockify_channel_id', 'dev_commands_channel_id',
        mode='before'
    )
    @classmethod
    def coerce_snowflake(cls, v):
        # YAML reads unquoted ids as integers
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    @field_validator('command_prefix')
    @classmethod
    def validate_command_prefix(cls, v):
        if not v or v.strip() != v:
            raise ValueError('command_prefix must be non-empty and contain no surrounding whitespace')
        return v

    @field_validator('webhook_port')
    @classmethod
    def validate_webhook_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError('webhook_port must be between 1 and 65535')
        return v


# Environment variable -> configuration key
ENV_MAPPINGS = {
    'BOT_TOKEN': 'bot_token',
    'CLIENT_ID': 'client_id',
    'DEV_GUILD_ID': 'dev_guild_id',
    'COMMAND_PREFIX': 'command_prefix',
    'REPLY_UNKNOWN_COMMANDS': 'reply_unknown_commands',
    'SLASH_COMMANDS_DIR': 'slash_commands_dir',
    'LOG_LEVEL': 'log_level',
    'LOG_FILE_PATH': 'log_file_path',
    'WEBHOOK_HOST': 'webhook_host',
    'WEBHOOK_PORT': 'webhook_port',
    'CLOCKIFY_API_URL': 'clockify_api_url',
    'CLOCKIFY_API_KEY': 'clockify_api_key',
    'CLOCKIFY_WORKSPACE_ID': 'clockify_workspace_id',
    'CHANNEL_MAPPINGS_PATH': 'channel_mappings_path',
    'DEFAULT_CHANNEL_ID': 'default_channel_id',
    'LOG_CHANNEL_ID': 'log_channel_id',
    'ANNOUNCEMENT_CHANNEL_ID': 'announcement_channel_id',
    'CLOCKIFY_CHANNEL_ID': 'clockify_channel_id',
    'DEV_COMMANDS_CHANNEL_ID': 'dev_commands_channel_id',
}

INTEGER_KEYS = {'webhook_port'}
BOOLEAN_KEYS = {'reply_unknown_commands'}


class ConfigurationManager:
    """
    Centralized configuration management.

    Sources, lowest priority first: ``config/default.yaml``,
    ``config/<environment>.yaml``, then environment variables (with ``.env``
    loaded into the environment beforehand).
    """

    def __init__(self, base_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self.base_path = base_path or Path.cwd()
        self.config_dir = self.base_path / "config"
        self._environ = environ
        self._configuration: Optional[BotConfiguration] = None

        if environ is None:
            load_dotenv(self.base_path / '.env')

        self.environment = self._detect_environment()
        logger.info(f"ConfigurationManager initialized for environment: {self.environment.value}")

    def load_configuration(self) -> BotConfiguration:
        """
        Load and validate configuration from all sources.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_data = self._load_yaml_file(self.config_dir / "default.yaml")
        config_data = self._deep_merge(
            config_data,
            self._load_yaml_file(self.config_dir / f"{self.environment.value}.yaml")
        )
        config_data = self._apply_environment_variables(config_data)

        try:
            self._configuration = BotConfiguration(**config_data)
        except ValidationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}") from e

        logger.info("Configuration loaded successfully")
        return self._configuration

    def _getenv(self, key: str, default: Optional[str] = None) -> Optional[str]:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(key, default)

    def _detect_environment(self) -> Environment:
        env_var = (self._getenv('ARCHON_ENVIRONMENT') or '').lower()
        if env_var:
            try:
                return Environment(env_var)
            except ValueError:
                logger.warning(f"Unknown ARCHON_ENVIRONMENT '{env_var}', using development")
        return Environment.DEVELOPMENT

    def _apply_environment_variables(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        for env_var, config_key in ENV_MAPPINGS.items():
            env_value = self._getenv(env_var)
            if env_value is None:
                continue

            if config_key in INTEGER_KEYS:
                try:
                    config_data[config_key] = int(env_value)
                except ValueError:
                    raise ConfigurationError(f"Invalid integer value for {env_var}: {env_value}")
            elif config_key in BOOLEAN_KEYS:
                config_data[config_key] = env_value.lower() in ('true', '1', 'yes', 'on')
            else:
                config_data[config_key] = env_value

            logger.debug(f"Applied environment variable {env_var} -> {config_key}")

        return config_data

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load YAML file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")

        logger.debug(f"Loaded configuration from {path}")
        return data

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
