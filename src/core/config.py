import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml

# Initialize logger
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 12.0
DEFAULT_THRESHOLD = 0.6
STRATEGIES = ("remote", "local")


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """
    Loads the YAML configuration file from the project root.

    Args:
        config_path (str): Relative path to the config file.

    Returns:
        Dict[str, Any]: The configuration dictionary.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    # Current working directory first (Docker / root run), then the project root
    path = Path(config_path)

    if not path.exists():
        base_dir = Path(__file__).resolve().parent.parent.parent
        path = base_dir / config_path

    if not path.exists():
        logger.critical(f"Configuration file not found at: {path.absolute()}")
        raise FileNotFoundError(f"Config file '{config_path}' is missing.")

    try:
        with open(path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
            logger.info(f"Configuration loaded successfully from {path}")
            return config

    except yaml.YAMLError as e:
        logger.critical(f"Error parsing YAML configuration: {e}")
        sys.exit(1)


def get_categories(config: Dict[str, Any]) -> List[str]:
    """
    Helper to extract the remote classifier vocabulary safely.
    """
    try:
        return list(config["triage"]["categories"])
    except (KeyError, TypeError):
        logger.critical("Invalid Config: 'triage.categories' key is missing.")
        sys.exit(1)


def get_classifier_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Returns the classifier section with defaults applied.

    Shape:
        {"strategy": "remote" | "local", "timeout_seconds": float}
    """
    section = config.get("classifier") or {}
    strategy = str(section.get("strategy", "remote")).lower()

    if strategy not in STRATEGIES:
        logger.critical(f"Invalid Config: unknown classifier strategy '{strategy}'. Use one of {STRATEGIES}.")
        sys.exit(1)

    remote = section.get("remote") or {}
    return {
        "strategy": strategy,
        "timeout_seconds": float(remote.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
    }


def get_ui_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    section = config.get("ui") or {}
    return {
        "api_url": str(section.get("api_url", "http://localhost:8000")).rstrip("/"),
        "default_threshold": float(section.get("default_threshold", DEFAULT_THRESHOLD)),
        "timeout_seconds": float(section.get("timeout_seconds", 15)),
    }


def get_server_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    section = config.get("server") or {}
    return {
        "host": section.get("host", "0.0.0.0"),
        "port": int(section.get("port", 8000)),
    }
