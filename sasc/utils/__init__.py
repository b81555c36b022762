"""Utility helpers for SASC."""

from .logging_setup import get_logger, setup_logging, log_operation, log_phase

__all__ = ['get_logger', 'setup_logging', 'log_operation', 'log_phase']
