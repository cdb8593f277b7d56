"""Common utilities for schooladmin."""

from .logger import setup_logger, get_logger
from .config import load_config, load_access_level_documents

__all__ = ["get_logger", "load_access_level_documents", "load_config", "setup_logger"]
