#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import List, Optional

import logging
import sys

import yaml

from .errors import ConfigLoadError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("pubstatus")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. PUBSTATUS_CONFIG environment variable
    2. ~/.pubstatus/ directory
    """
    if 'PUBSTATUS_CONFIG' in os.environ:
        path = Path(os.environ['PUBSTATUS_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.pubstatus'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 10:  # Not empty/trivial
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def _read_structured_file(path: Path):
    """Read a JSON, TOML or YAML file based on its suffix."""
    suffix = path.suffix.lower()
    if suffix == '.toml':
        with open(path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(path, 'r') as f:
            return yaml.safe_load(f)
    with open(path, 'r') as f:
        return json.load(f)


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            file_config = _read_structured_file(config_path) or {}
            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            if config_path.suffix.lower() == '.toml':
                # tomllib is read-only
                logger.warning("TOML config is read-only. Saving as JSON instead.")
                config_path = config_path.with_suffix('.json')
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Error saving config to {config_path}: {e}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "projects_file": "igs.yaml",
        },
        "github": {
            "token": "",
            "graphql_url": "https://api.github.com/graphql",
            "timeout_seconds": 30,
            "page_size": 100,
        },
        "manifest": {
            "proxy_base_url": "http://localhost:8080/",
            "timeout_seconds": 30,
        },
        "fleet": {
            "max_concurrency": 8,
            "stale_after_days": 90,
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
        "display": {
            "show_stale_branches": False,
            "show_unpublished_tags": True,
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: PUBSTATUS_SECTION_KEY
    For example: PUBSTATUS_FLEET_MAX_CONCURRENCY=4
    """
    env_prefix = "PUBSTATUS_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config


def configure_logging(config, verbose: bool = False):
    """Apply the logging section of the config to the pubstatus logger."""
    level_name = 'DEBUG' if verbose else str(config.get('logging', {}).get('level', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)

    fmt = config.get('logging', {}).get('format')
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def get_github_token(config) -> Optional[str]:
    """GitHub token from config, then PUBSTATUS_GITHUB_TOKEN, then GITHUB_TOKEN."""
    token = config.get('github', {}).get('token')
    if token:
        return token
    return os.environ.get('PUBSTATUS_GITHUB_TOKEN') or os.environ.get('GITHUB_TOKEN') or None


def load_projects(path) -> List['TrackedProject']:
    """
    Load the tracked project list.

    The file (YAML or JSON) must look like:

        igs:
          - name: ANC
            repo: WorldHealthOrganization/smart-anc
            published: https://smart.who.int/anc

    Raises:
        ConfigLoadError: if the file is missing, unreadable or malformed
    """
    from .domain import TrackedProject

    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigLoadError(f"Project list not found: {path}")

    try:
        if path.suffix.lower() == '.json':
            with open(path, 'r') as f:
                data = json.load(f)
        else:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Could not parse project list {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get('igs'), list):
        raise ConfigLoadError(f"Project list {path} must contain an 'igs' list")

    projects = []
    for index, entry in enumerate(data['igs']):
        if not isinstance(entry, dict):
            raise ConfigLoadError(f"Project list {path}: entry {index} is not a mapping")
        try:
            projects.append(TrackedProject.from_dict(entry))
        except ValueError as e:
            raise ConfigLoadError(f"Project list {path}: entry {index}: {e}") from e

    logger.debug(f"Loaded {len(projects)} projects from {path}")
    return projects
