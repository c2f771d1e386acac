"""Project configuration loading and validation.

This module loads the site-publish project configuration from
.site-publish/config.yaml. Every field is optional; a missing file means
the defaults apply.

Configuration file structure:
    store_path: "pages.yaml"
    output_dir: "dist"
    strategies: [archive_build, direct_upload, manual_archive]
    poll_interval: 5
    poll_timeout: 300
    max_upload_workers: 10
    checkout_fields_url: "https://api.example.com/checkout/fields"
    site_url_suffix: "netlify.app"
"""

import os
from typing import Any, Dict, List

import yaml

from src.deployment.models import StrategyKind

from .errors import ConfigError
from .models import PublishConfig


class ConfigLoader:
    """Handles configuration file loading, validation, and saving."""

    DEFAULT_CONFIG_DIR = '.site-publish'
    DEFAULT_CONFIG_FILE = 'config.yaml'
    DEFAULT_CONFIG_PATH = os.path.join(DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_FILE)

    KNOWN_FIELDS = {
        'store_path', 'output_dir', 'strategies', 'poll_interval', 'poll_timeout',
        'max_upload_workers', 'checkout_fields_url', 'site_url_suffix',
    }

    @classmethod
    def load(cls, config_path: str = DEFAULT_CONFIG_PATH) -> PublishConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            PublishConfig with parsed values (defaults when the file is missing)

        Raises:
            ConfigError: If the file cannot be read or holds invalid values
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return PublishConfig()
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}")

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return PublishConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: PublishConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            ConfigError: If the file cannot be written
        """
        config_dict = {
            'store_path': config.store_path,
            'output_dir': config.output_dir,
            'strategies': [kind.value for kind in config.strategies],
            'poll_interval': config.poll_interval,
            'poll_timeout': config.poll_timeout,
            'max_upload_workers': config.max_upload_workers,
            'checkout_fields_url': config.checkout_fields_url,
            'site_url_suffix': config.site_url_suffix,
        }
        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        try:
            config_dir = os.path.dirname(config_path)
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except OSError as e:
            raise ConfigError(f"Cannot write {config_path}: {e}")

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> PublishConfig:
        unknown = sorted(set(config_dict) - cls.KNOWN_FIELDS)
        if unknown:
            raise ConfigError(f"Unknown field(s): {', '.join(unknown)}")

        config = PublishConfig()

        for name in ('store_path', 'output_dir', 'site_url_suffix'):
            if name in config_dict:
                setattr(config, name, cls._require_text(config_dict[name], name))

        if config_dict.get('checkout_fields_url') is not None:
            config.checkout_fields_url = cls._require_text(
                config_dict['checkout_fields_url'], 'checkout_fields_url'
            )

        for name in ('poll_interval', 'poll_timeout'):
            if name in config_dict:
                value = config_dict[name]
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                    raise ConfigError(f"Must be a positive number, got {value!r}", name)
                setattr(config, name, value)

        if 'max_upload_workers' in config_dict:
            value = config_dict['max_upload_workers']
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"Must be a positive integer, got {value!r}", 'max_upload_workers')
            config.max_upload_workers = value

        if 'strategies' in config_dict:
            config.strategies = cls._parse_strategies(config_dict['strategies'])

        return config

    @staticmethod
    def _require_text(value: Any, name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Must be a non-empty string, got {value!r}", name)
        return value.strip()

    @staticmethod
    def _parse_strategies(value: Any) -> List[StrategyKind]:
        if not isinstance(value, list) or not value:
            raise ConfigError("Must be a non-empty list", 'strategies')

        strategies = []
        for item in value:
            try:
                kind = StrategyKind(item)
            except ValueError:
                valid = ", ".join(k.value for k in StrategyKind)
                raise ConfigError(f"Unknown strategy '{item}' (expected one of: {valid})", 'strategies')
            if kind in strategies:
                raise ConfigError(f"Strategy '{item}' listed twice", 'strategies')
            strategies.append(kind)
        return strategies
