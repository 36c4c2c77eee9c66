"""Structured logging helpers shared by the application entry points."""

from typing import Any, Dict, Optional

from household_hub.managers.logging_manager import get_logger

lifecycle_logger = get_logger(prefix="[LIFECYCLE]")
error_logger = get_logger(prefix="[ERROR]")


def log_application_lifecycle(event: str, data: Optional[Dict[str, Any]] = None) -> None:
    """Log an application lifecycle event (startup, shutdown, index bootstrap, ...)."""
    lifecycle_logger.info("Lifecycle event '%s': %s", event, data or {})


def log_error_with_context(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception together with the operation context it occurred in."""
    error_logger.error(
        "%s: %s - Context: %s",
        type(error).__name__,
        error,
        context or {},
        exc_info=error,
    )
