"""
Error Handling Utilities
This module provides the diagram error types, the result object used to surface
rejected operations without raising, and a small error recorder shared by the
components of one diagram surface.
"""

import logging
import time
import traceback
from typing import Dict, List, Optional, Any, Callable, Tuple
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    MALFORMED_GRAPH = "malformed_graph"
    GEOMETRY = "geometry"
    INTERACTION = "interaction"
    CONFIGURATION = "configuration"
    CALLBACK = "callback"
    UNKNOWN = "unknown"


class DiagramError(Exception):
    """Base exception for diagram surface errors."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to structured dictionary for logging/reporting"""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp,
            "context": self.context,
        }


class MalformedGraphError(DiagramError):
    """Raised when a batch names unknown node ids or reuses an existing id."""

    def __init__(self, message: str, entity_id: Optional[str] = None,
                 missing_ids: Optional[List[str]] = None):
        context: Dict[str, Any] = {}
        if entity_id is not None:
            context["entity_id"] = entity_id
        if missing_ids:
            context["missing_ids"] = list(missing_ids)
        super().__init__(
            message=message,
            category=ErrorCategory.MALFORMED_GRAPH,
            severity=ErrorSeverity.WARNING,
            context=context,
        )


@dataclass
class OperationResult:
    """Outcome of a model mutation. Rejections carry the error instead of raising it."""
    success: bool
    affected_ids: List[str] = field(default_factory=list)
    error: Optional[DiagramError] = None

    @classmethod
    def ok(cls, affected_ids: Optional[List[str]] = None) -> 'OperationResult':
        return cls(success=True, affected_ids=list(affected_ids or []))

    @classmethod
    def rejected(cls, error: DiagramError) -> 'OperationResult':
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ErrorRecord:
    """Record of an error occurrence."""
    error_id: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    component: str
    operation: str
    timestamp: datetime
    context: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None


class ErrorHandlingSystem:
    """
    Collects errors raised or returned by the diagram components.
    Keeps a bounded history, per-category counters and notifies listeners.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the error handling system.

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}

        self.error_history: List[ErrorRecord] = []
        self.max_history_size = self.config.get('max_error_history', 100)
        self.error_counter: int = 0
        self.error_statistics: Dict[str, Any] = {
            'total_errors': 0,
            'by_category': {},
            'by_severity': {},
            'by_component': {},
        }

        self.notification_callbacks: List[Callable[[ErrorRecord], None]] = []

    def handle_error(self, error: Exception, component: str, operation: str) -> ErrorRecord:
        """
        Record an error and notify listeners.

        Args:
            error: The exception that occurred or was returned in a result
            component: Name of the component reporting it
            operation: Operation that failed

        Returns:
            The stored ErrorRecord
        """
        category, severity, context = self._classify(error)

        self.error_counter += 1
        record = ErrorRecord(
            error_id=f"ERR_{self.error_counter:05d}",
            category=category,
            severity=severity,
            message=str(error),
            component=component,
            operation=operation,
            timestamp=datetime.now(),
            context=context,
            stack_trace=self._format_trace(error),
        )

        self._add_to_history(record)
        self._update_statistics(record)
        self._log(record)

        for callback in self.notification_callbacks:
            try:
                callback(record)
            except Exception as e:
                logger.error(f"Error in error notification callback: {e}")

        return record

    def _classify(self, error: Exception) -> Tuple[ErrorCategory, ErrorSeverity, Dict[str, Any]]:
        if isinstance(error, DiagramError):
            return error.category, error.severity, dict(error.context)
        if isinstance(error, (ValueError, TypeError)):
            return ErrorCategory.CONFIGURATION, ErrorSeverity.ERROR, {}
        return ErrorCategory.UNKNOWN, ErrorSeverity.ERROR, {}

    @staticmethod
    def _format_trace(error: Exception) -> Optional[str]:
        if error.__traceback__ is None:
            return None
        return ''.join(traceback.format_exception(type(error), error, error.__traceback__))

    def _add_to_history(self, record: ErrorRecord):
        self.error_history.append(record)
        if len(self.error_history) > self.max_history_size:
            self.error_history.pop(0)

    def _update_statistics(self, record: ErrorRecord):
        stats = self.error_statistics
        stats['total_errors'] += 1
        for key, value in (('by_category', record.category.value),
                           ('by_severity', record.severity.value),
                           ('by_component', record.component)):
            stats[key][value] = stats[key].get(value, 0) + 1

    def _log(self, record: ErrorRecord):
        message = f"[{record.component}.{record.operation}] {record.message}"
        if record.severity == ErrorSeverity.CRITICAL:
            logger.critical(message)
        elif record.severity == ErrorSeverity.ERROR:
            logger.error(message)
        elif record.severity == ErrorSeverity.WARNING:
            logger.warning(message)
        else:
            logger.info(message)

    def add_notification_callback(self, callback: Callable[[ErrorRecord], None]):
        """Register a listener called with every new ErrorRecord."""
        self.notification_callbacks.append(callback)

    def get_recent_errors(self, limit: int = 10) -> List[ErrorRecord]:
        """Get the most recent error records."""
        return self.error_history[-limit:]

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get a copy of the error statistics."""
        return {
            'total_errors': self.error_statistics['total_errors'],
            'by_category': dict(self.error_statistics['by_category']),
            'by_severity': dict(self.error_statistics['by_severity']),
            'by_component': dict(self.error_statistics['by_component']),
        }

    def clear_history(self):
        """Clear error history and statistics."""
        self.error_history = []
        self.error_statistics = {
            'total_errors': 0,
            'by_category': {},
            'by_severity': {},
            'by_component': {},
        }
        logger.info("Error history cleared")
