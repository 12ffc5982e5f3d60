"""
Core utilities and configuration for Conductor.

This package provides core functionality including logging configuration,
the error table, database setup, and other shared utilities.
"""

from conductor.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
