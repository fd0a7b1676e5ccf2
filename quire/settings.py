#!/usr/bin/env python3
"""
Settings loader for Quire.
Supports configuration from quire.yml, quire.yaml, or quire.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class QuireSettings:
    """Load and manage Quire configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'output': '_site',
        'themes': [],
        'builtin': None,
        'scripts': [],
        'site': {},
        'summary_words': 30,
        'default_page_extension': '.html',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['quire.yml', 'quire.yaml', 'quire.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = {key: (value.copy() if isinstance(value, (list, dict)) else value)
                         for key, value in self.DEFAULT_SETTINGS.items()}
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                if not isinstance(loaded_settings, dict):
                    raise ValueError(f"Configuration file {config_file} must contain a mapping")
                # Merge with defaults, giving preference to loaded settings
                self.settings.update(loaded_settings)

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
        try:
            file_ext = os.path.splitext(config_path)[1].lower()

            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        sample_config = {
            'output': '_site',
            'themes': [],
            'scripts': [],
            'summary_words': 30,
            'default_page_extension': '.html',
            'site': {
                'title': 'My Quire Site',
                'base_url': 'https://example.com',
            },
        }

        filename = f'quire.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    # Custom YAML output with comments
                    f.write("# Quire Configuration File\n\n")
                    f.write("# Build settings\n")
                    f.write("output: _site\n")
                    f.write("default_page_extension: .html\n\n")
                    f.write("# Theme directories, highest priority first\n")
                    f.write("themes: []\n\n")
                    f.write("# Scripts imported into the site variables before loading\n")
                    f.write("scripts: []\n\n")
                    f.write("# Content settings\n")
                    f.write("summary_words: 30\n\n")
                    f.write("# Variables exposed to templates as site.<name>\n")
                    f.write("site:\n")
                    f.write("  title: My Quire Site\n")
                    f.write("  base_url: https://example.com\n")
                elif file_format == 'json':
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")

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

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is None or key not in self.DEFAULT_SETTINGS:
                continue
            if key == 'themes' and isinstance(value, str):
                # Convert comma-separated string to list
                merged[key] = [theme.strip() for theme in value.split(',') if theme.strip()]
            else:
                merged[key] = value

        return merged
