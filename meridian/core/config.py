"""Configuration module for loading dashboard settings and environment variables."""

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

load_dotenv()

API_KEY_ENV = "GEMINI_API_KEY"


def load_config(config_path: str | Path = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from the specified YAML file.

    Args:
        config_path (str | Path): Path to the configuration file. Defaults to "config.yaml".

    Returns:
        Dict[str, Any]: A dictionary containing the configuration settings.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_file, "r", encoding="utf-8") as file:
        try:
            config_data = yaml.safe_load(file)
        except yaml.YAMLError as exc:
            raise ValueError(f"Configuration file {config_path} is not valid YAML: {exc}") from exc

    if not config_data or not isinstance(config_data, dict):
        raise ValueError(f"Configuration file {config_path} is empty or invalid.")

    return config_data


def get_api_key(config: Dict[str, Any]) -> str:
    """Return the generative-AI API key.

    The ``GEMINI_API_KEY`` environment variable (or ``.env`` entry) takes
    precedence over ``gemini.api_key`` in the YAML config.
    """
    env_key = os.getenv(API_KEY_ENV, "").strip()
    if env_key:
        return env_key
    gemini_cfg = config.get("gemini") or {}
    return str(gemini_cfg.get("api_key") or "").strip()
