#!/usr/bin/env python3
"""
Configuration access for the web application.

The API reads the same config.yaml (plus DATABASE_URL, BASE_URL, WEB_HOST
and WEB_PORT overrides) as the CLI.
"""

from functools import lru_cache

from core.config_loader import AppConfig, load_config


@lru_cache()
def get_config() -> AppConfig:
    """Load the repo-root config once per process."""
    return load_config(None)
