"""
Configuration loader for SOAP Metrics.
Reads settings from config.yaml so you don't need to edit core files.
Automatically loads .env file if present for secure API key management.
"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any

from dotenv import load_dotenv

# Project root is the parent of the package directory
PROJECT_ROOT = Path(__file__).parent.parent

env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)
    print(f"✅ Loaded environment variables from {env_path}")

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"

_config_cache = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Security: API keys are never loaded from config.yaml if they exist in environment variables.
    This prevents accidental exposure of keys in version control.

    Args:
        config_path: Path to config file (default: config.yaml in project root)

    Returns:
        Dict with configuration settings (API keys from env vars override config values)
    """
    global _config_cache

    if _config_cache is not None:
        return _config_cache

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        print(f"Warning: Config file not found at {config_path}, using defaults")
        return get_default_config()

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    # Env vars always take precedence over keys written in config.yaml
    for key_name, env_var in (('gemini_api_key', 'GEMINI_API_KEY'), ('openai_api_key', 'OPENAI_API_KEY')):
        if key_name not in config:
            continue
        if os.getenv(env_var):
            config[key_name] = ''
        elif config.get(key_name):
            print(f"⚠️  Warning: {env_var} found in config.yaml. Consider using environment variable instead.")

    _config_cache = config
    return config


def get_default_config() -> Dict[str, Any]:
    """Return default configuration if config.yaml is missing."""
    return {
        'embeddings': {
            'provider': 'local',
            'model': 'all-MiniLM-L6-v2',
            'timeout_seconds': 30
        },
        'evaluation': {
            'decimals': 3,
            'max_workers': 4
        },
        'output': {
            'results_dir': 'results'
        }
    }


def get_evaluation_config() -> Dict[str, Any]:
    """Get just the evaluation settings."""
    config = load_config()
    return config.get('evaluation', get_default_config()['evaluation'])


def reload_config():
    """Force reload config from file (useful if you changed config.yaml)."""
    global _config_cache
    _config_cache = None
    return load_config()
