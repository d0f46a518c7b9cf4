"""Logging and metrics helpers."""

from .logger import setup_logger, setup_from_config, create_session_log_file
from .metrics import PerformanceMetrics

__all__ = ['setup_logger', 'setup_from_config', 'create_session_log_file', 'PerformanceMetrics']
