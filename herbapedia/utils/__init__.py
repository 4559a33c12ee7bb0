"""Utility modules for the Herbapedia tools."""
from .config import Config, ScraperConfig, StoreConfig, VerifyConfig, PRIMARY_FIELDS
from .logger import get_logger, setup_logging, add_logging_arguments, setup_logging_from_args
from .exceptions import (
    HerbapediaError,
    FetchError,
    ExtractionError,
    StoreError,
    ConfigError,
)

__all__ = [
    # Config
    'Config',
    'ScraperConfig',
    'StoreConfig',
    'VerifyConfig',
    'PRIMARY_FIELDS',
    # Logger
    'get_logger',
    'setup_logging',
    'add_logging_arguments',
    'setup_logging_from_args',
    # Exceptions
    'HerbapediaError',
    'FetchError',
    'ExtractionError',
    'StoreError',
    'ConfigError',
]
