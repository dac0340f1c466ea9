#!/usr/bin/env python3
"""
Settings loader for Blarf.
Supports configuration from blarf.yml, blarf.yaml, or blarf.json files.
"""

import os
import json
import logging
import yaml
from typing import Dict, Any, Optional

from .errors import ConfigurationError
from .render import DEFAULT_SITE_TITLE

SAMPLE_YAML = """# Blarf Configuration File
# Configure your static site generator settings here

# Source directories
articles: articles
static: public

# Output
destination: site

# Site information
site_title: {site_title}
email: me@example.com

# Stylesheet (leave empty to use the bundled default)
css:

# Logging
log_level: INFO
log_file:
"""


class BlarfSettings:
    """Load and manage Blarf configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'articles': 'articles',
        'static': None,
        'destination': 'site',
        'email': None,
        'css': None,
        'site_title': DEFAULT_SITE_TITLE,
        'staging': None,
        'log_level': 'INFO',
        'log_file': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['blarf.yml', 'blarf.yaml', 'blarf.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None
        self.logger = logging.getLogger('blarf.settings')

    def load_settings(self, config_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Load settings from a configuration file if one exists.

        Args:
            config_file: Explicit config file path. When omitted the first of
                CONFIG_FILES found in config_dir is used.

        Returns:
            Dictionary of configuration settings
        """
        if config_file and not os.path.exists(config_file):
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        config_file = config_file or self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            unknown = sorted(set(loaded_settings) - set(self.DEFAULT_SETTINGS))
            if unknown:
                self.logger.warning(f"Ignoring unknown settings in {config_file}: {', '.join(unknown)}")
            self.settings.update({k: v for k, v in loaded_settings.items() if k in self.DEFAULT_SETTINGS})
            self.logger.debug(f"Loaded configuration from: {os.path.relpath(config_file)}")

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    loaded = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    loaded = json.load(f) or {}
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_ext}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}") from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error reading configuration file {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
        return loaded

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        if file_format not in ('yml', 'yaml', 'json'):
            raise ConfigurationError(f"Unsupported config file format: {file_format}")

        config_path = os.path.join(self.config_dir, f'blarf.{file_format}')
        if os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file already exists: {config_path}")

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write(SAMPLE_YAML.format(site_title=DEFAULT_SITE_TITLE))
                else:
                    sample_config = self.DEFAULT_SETTINGS.copy()
                    sample_config.update({'static': 'public', 'email': 'me@example.com'})
                    json.dump(sample_config, f, indent=2)
                    f.write('\n')
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error writing configuration file {config_path}: {e}") from e

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is not None and key in self.DEFAULT_SETTINGS:
                merged[key] = value

        # Paths in a config file are relative to the directory holding it
        if self.config_file_path:
            base_dir = os.path.dirname(os.path.abspath(self.config_file_path))
            for key in ('articles', 'static', 'destination', 'css', 'staging', 'log_file'):
                value = merged.get(key)
                if key in args_dict and args_dict[key] is not None:
                    continue
                if isinstance(value, str) and value and not os.path.isabs(value):
                    merged[key] = os.path.join(base_dir, os.path.expanduser(value))

        for key in ('articles', 'static', 'destination', 'css', 'staging', 'log_file'):
            if isinstance(merged.get(key), str) and merged[key].startswith('~'):
                merged[key] = os.path.expanduser(merged[key])

        return merged
