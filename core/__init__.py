"""
==========================================
Core infrastructure package for DataMage.
==========================================

This package provides centralized configuration management and logging
infrastructure used by the query engine and the connection factories.

Modules:
    config: Driver and logging configuration from environment variables
    logger: Centralized logging configuration and utilities

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db.render_url()}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config', 'ConfigurationError']

from core.config import Config, ConfigurationError, config
from core.logger import get_logger, setup_logging
