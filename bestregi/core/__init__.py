"""
Core utilities for BestRegi.

This package provides core functionality including logging configuration,
monitoring and the database layer.
"""

from bestregi.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
