import os

from services.common.core.logging_config import setup_logging as common_setup_logging


def setup_logging(config_path: str = None):
    """
    Load the YAML config and initialize logging.
    """
    if config_path is None:
        config_path = os.getenv("LOG_CONFIG_PATH", "config/logging.yml")
    common_setup_logging(config_path)
