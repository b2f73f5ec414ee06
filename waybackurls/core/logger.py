"""
Logging and Error Handling System

This module provides centralized logging configuration and error tracking
for the Wayback URL extractor.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
import traceback
from pathlib import Path


class WaybackLogger:
    """
    Centralized logging system for the extractor.

    Sends concise status lines to the console and detailed records to
    rotating log files.
    """

    def __init__(self, log_dir: Optional[str] = "logs", app_name: str = "waybackurls"):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files, or None for console only
            app_name: Name of the application for log formatting
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.setup_logger()

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Set up the main application logger with file and console handlers.

        Args:
            level: Console logging level (default: INFO)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Reconfiguring replaces any handlers from a previous setup
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        if self.log_dir is not None:
            log_file = self.log_dir / f"{self.app_name}.log"
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)

            error_file = self.log_dir / f"{self.app_name}_errors.log"
            error_handler = logging.handlers.RotatingFileHandler(
                error_file,
                maxBytes=5*1024*1024,  # 5MB
                backupCount=3,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)

            logger.addHandler(file_handler)
            logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific module.

        Args:
            name: Name of the module/component

        Returns:
            Logger instance for the module
        """
        full_name = name if name.startswith(f"{self.app_name}.") else f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            logger = logging.getLogger(full_name)
            logger.setLevel(logging.DEBUG)
            self.loggers[full_name] = logger

        return self.loggers[full_name]

    def log_system_info(self):
        """Log system information for debugging."""
        logger = self.get_logger('system')

        logger.debug("=== Wayback URL Extractor Started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        if self.log_dir is not None:
            logger.debug(f"Log directory: {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Tracks and categorizes errors that occur during a run.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: list = []
        self.warnings: list = []

    def log_error(self,
                  error: Exception,
                  context: str = None,
                  domain: str = None,
                  additional_info: Dict[str, Any] = None) -> str:
        """
        Log an error with context information.

        The console gets one line; the traceback only goes to the debug log.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            domain: Domain being processed when the error occurred
            additional_info: Additional information about the error

        Returns:
            Error ID for tracking
        """
        error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.errors):03d}"

        error_data = {
            'id': error_id,
            'timestamp': datetime.now(),
            'type': type(error).__name__,
            'message': str(error),
            'context': context,
            'domain': domain,
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
            'additional_info': additional_info or {}
        }

        self.errors.append(error_data)

        log_message = f"[{error_id}] {error_data['type']}: {error_data['message']}"
        if context:
            log_message += f" (Context: {context})"
        if domain:
            log_message += f" (Domain: {domain})"

        self.logger.error(log_message)
        self.logger.debug(f"[{error_id}] Full traceback:\n{error_data['traceback']}")

        return error_id

    def log_warning(self,
                    message: str,
                    context: str = None,
                    domain: str = None) -> str:
        """
        Log a warning with context information.

        Args:
            message: Warning message
            context: Context where the warning occurred
            domain: Domain being processed when the warning occurred

        Returns:
            Warning ID for tracking
        """
        warning_id = f"WARN_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.warnings):03d}"

        self.warnings.append({
            'id': warning_id,
            'timestamp': datetime.now(),
            'message': message,
            'context': context,
            'domain': domain
        })

        log_message = f"[{warning_id}] {message}"
        if context:
            log_message += f" (Context: {context})"
        if domain:
            log_message += f" (Domain: {domain})"

        self.logger.warning(log_message)

        return warning_id

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all errors and warnings.

        Returns:
            Dictionary with error statistics and details
        """
        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'error_types': self._count_error_types(),
            'recent_errors': self.errors[-5:],
            'recent_warnings': self.warnings[-5:]
        }

    def _count_error_types(self) -> Dict[str, int]:
        """Count errors by type."""
        type_counts: Dict[str, int] = {}
        for error in self.errors:
            type_counts[error['type']] = type_counts.get(error['type'], 0) + 1
        return type_counts


# Global logger instance
_logger_instance: Optional[WaybackLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Name of the module/component (optional)

    Returns:
        Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = WaybackLogger()

    if name:
        return _logger_instance.get_logger(name)
    else:
        return _logger_instance.loggers['main']


def initialize_logging(log_dir: Optional[str] = "logs", level: int = logging.INFO):
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files, or None to log to the console only
        level: Console logging level
    """
    global _logger_instance
    _logger_instance = WaybackLogger(log_dir)
    _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()


def create_error_tracker(logger_name: str = None) -> ErrorTracker:
    """
    Create an error tracker instance.

    Args:
        logger_name: Name of the logger to use

    Returns:
        ErrorTracker instance
    """
    logger = get_logger(logger_name)
    return ErrorTracker(logger)
