"""
Error types for SASC runs.

Every failure in a run is fatal: nothing is retried and no partial
report is produced.
"""

from typing import Optional, Any, Dict


class SascError(Exception):
    """
    Base exception for all SASC errors.
    
    Provides common functionality for error tracking and reporting.
    """
    
    exit_code = 1
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize error.
        
        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class SourceReadError(SascError, OSError):
    """Raised when a source file cannot be opened or fully read."""
    
    def __init__(self, message: str, path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.path = path
        self.details.update({'path': path})


class DiscoveryError(SascError, OSError):
    """Raised when the base directory cannot be walked."""
    
    def __init__(self, message: str, root: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.root = root
        self.details.update({'root': root})


class ReportWriteError(SascError, OSError):
    """Raised when a CSV or JSON report file cannot be created."""
    
    def __init__(self, message: str, path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.path = path
        self.details.update({'path': path})


class InvalidArgumentError(SascError, ValueError):
    """
    Raised when a user-supplied value is malformed.
    
    Covers thresholds that are not numbers, negative or not finite,
    worker counts below one and invalid configuration values.
    """
    
    exit_code = 2
    
    def __init__(self, message: str,
                 argument: Optional[str] = None,
                 value: Any = None,
                 hint: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize invalid argument error.
        
        Args:
            message: Error message
            argument: Name of the offending argument or config key
            value: The rejected value
            hint: Guidance shown to the user
            details: Additional error context
        """
        super().__init__(message, details)
        self.argument = argument
        self.value = value
        self.hint = hint
        
        self.details.update({
            'argument': argument,
            'value': value,
            'hint': hint
        })


def is_fatal_io_error(error: Exception) -> bool:
    """Check if error is one of the I/O failures that abort a run."""
    return isinstance(error, (SourceReadError, DiscoveryError, ReportWriteError))


def is_usage_error(error: Exception) -> bool:
    """Check if error was caused by bad user input."""
    return isinstance(error, InvalidArgumentError)
