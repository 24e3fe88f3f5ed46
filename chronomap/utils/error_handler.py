"""
Error Handler Utility
=====================

This module provides the exception hierarchy raised by the clustering and
viewport engine, together with a centralized error handler that renderers use
to log failures and relay them to the user interface.

The engine itself never displays errors. Pure computations (scale, cluster,
layout, fit) raise one of the exceptions below and the caller decides how to
report it.

Author: chronomap
Version: 1.0
"""

import logging
import sys
import traceback
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

# Configure logger
logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ErrorSeverity:
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class TimelineError(Exception):
    """Base exception for timeline engine errors."""

    def __init__(self, message: str, details: Optional[str] = None,
                 severity: str = ErrorSeverity.ERROR):
        """
        Initialize timeline error.

        Args:
            message: User-friendly error message
            details: Technical details for logging
            severity: Error severity level
        """
        super().__init__(message)
        self.message = message
        self.details = details or message
        self.severity = severity


class InvalidInstant(TimelineError):
    """Raised when an event or intent carries a non-finite or unparseable date."""

    def __init__(self, message: str, value=None):
        details = f"{message}\nValue: {value!r}" if value is not None else message
        super().__init__(message, details)
        self.value = value


class OutOfRangeInput(TimelineError):
    """Raised when a scale receives a value it cannot map (NaN or infinity)."""

    def __init__(self, message: str, value=None):
        details = f"{message}\nValue: {value!r}" if value is not None else message
        super().__init__(message, details)
        self.value = value


class InvalidThreshold(TimelineError):
    """Raised when clustering is requested with a non-positive threshold."""

    def __init__(self, threshold):
        message = f"Clustering threshold must be a positive number, got {threshold!r}"
        super().__init__(message)
        self.threshold = threshold


class EmptyTargetSet(TimelineError):
    """Raised when zoom-to-fit is requested for an empty set of events."""

    def __init__(self, message: str = "Cannot fit a transform to an empty set of events"):
        super().__init__(message, severity=ErrorSeverity.WARNING)


class DegenerateViewport(TimelineError):
    """Raised when a viewport or pixel range has no usable extent."""

    def __init__(self, width, height=None):
        if height is None:
            message = f"Viewport width must be positive, got {width!r}"
        else:
            message = f"Viewport size must be positive, got {width!r}x{height!r}"
        super().__init__(message)
        self.width = width
        self.height = height


class InvalidDomain(TimelineError):
    """Raised when a date domain does not satisfy min < max."""
    pass


class InvalidTransform(TimelineError):
    """Raised when a transform has a non-positive or non-finite scale."""
    pass


class InvalidCoordinate(TimelineError):
    """Raised when an event latitude or longitude is outside its valid range."""
    pass


class GeographyNotLoaded(TimelineError):
    """Raised when the map projection is requested before it has been loaded."""

    def __init__(self, message: str = "Map geography has not been loaded yet"):
        super().__init__(message, severity=ErrorSeverity.WARNING)


class GeographyAlreadyLoaded(TimelineError):
    """Raised when the map projection is loaded a second time."""

    def __init__(self, message: str = "Map geography is already loaded and cannot be replaced"):
        super().__init__(message)


def setup_logging(log_level: int = logging.INFO, log_file: Optional[str] = None,
                  logger_name: str = 'chronomap') -> logging.Logger:
    """
    Configure logging for the chronomap package.

    Args:
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)
        log_file: Optional file to write logs to
        logger_name: Name of the logger to configure

    Returns:
        logging.Logger: The configured package logger
    """
    package_logger = logging.getLogger(logger_name)

    # Clear any existing handlers
    package_logger.handlers = []
    package_logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            package_logger.error(f"Failed to set up file logging: {str(e)}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    return package_logger


class ErrorHandler(QObject):
    """
    Centralized error handler for renderers built on the engine.

    Logs errors at a level matching their severity, keeps a short history
    and re-emits them so the user interface can decide how to present them.

    Signals:
        error_occurred: Emitted when an error is handled (severity, message, details)
    """

    error_occurred = pyqtSignal(str, str, str)  # severity, message, details

    def __init__(self, parent=None, max_stored_errors: int = 10):
        """
        Initialize error handler.

        Args:
            parent: Parent QObject
            max_stored_errors: Number of recent errors kept in history
        """
        super().__init__(parent)
        self._error_count = 0
        self._last_errors = []
        self._max_stored_errors = max_stored_errors

    def handle_error(self, error: Exception, context: str = "") -> str:
        """
        Log an error and notify listeners.

        Args:
            error: The exception that occurred
            context: Context description (e.g., "applying zoom")

        Returns:
            str: Severity the error was handled with
        """
        self._error_count += 1

        if isinstance(error, TimelineError):
            message = error.message
            details = error.details
            severity = error.severity
        else:
            message = f"An unexpected error occurred while {context}" if context else "An unexpected error occurred"
            error_traceback = ''.join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            details = f"Context: {context}\n{type(error).__name__}: {str(error)}\n{error_traceback}"
            severity = ErrorSeverity.ERROR

        log_message = f"Error in {context}: {details}" if context else f"Error: {details}"

        if severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

        self._store_error(severity, message, details)
        self.error_occurred.emit(severity, message, details)
        return severity

    def _store_error(self, severity: str, message: str, details: str):
        self._last_errors.append({
            'severity': severity,
            'message': message,
            'details': details,
        })
        if len(self._last_errors) > self._max_stored_errors:
            self._last_errors.pop(0)

    def get_error_count(self) -> int:
        """Get the total number of errors handled."""
        return self._error_count

    def get_recent_errors(self) -> list:
        """
        Get the most recent errors, oldest first.

        Returns:
            list: Dicts with 'severity', 'message' and 'details' keys
        """
        return list(self._last_errors)

    def clear_error_history(self):
        """Clear stored error history and reset the counter."""
        self._last_errors = []
        self._error_count = 0
