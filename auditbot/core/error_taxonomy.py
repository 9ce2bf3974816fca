"""
Error Taxonomy for the Report Assistant

Provides systematic classification of failure modes with:
- Error categories aligned to the request pipeline (understand, load, filter, export)
- Recoverability indicators
- Suggested recovery actions
- User-facing messages

The parser itself never raises; it returns a failed ParseResult carrying
USAGE_GUIDANCE. The assistant classifies such request-side failures (empty
request, nothing extracted, nothing matched) without raising. Exceptions here
are for loading action data, writing reports and reading option files.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import logging
import traceback

from auditbot.core.responses import EXPORT_FAILED_REPLY, NO_MATCH_REPLY

logger = logging.getLogger(__name__)

USAGE_GUIDANCE = (
    "Could not extract filters from your request. Please use these examples:\n"
    "• \"Export all actions with Open status\"\n"
    "• \"How many actions with Critical risk?\"\n"
    "• \"Completed actions for year 2024\""
)


class ErrorCategory(Enum):
    """Systematic classification of failure modes."""
    # Request understanding
    EMPTY_REQUEST = auto()
    NO_FILTERS_EXTRACTED = auto()
    INVALID_PREVIOUS_FILTERS = auto()

    # Action data
    DATA_FILE_NOT_FOUND = auto()
    DATA_FORMAT_ERROR = auto()
    NO_MATCHING_DATA = auto()

    # Report export
    EXPORT_FAILED = auto()
    FILE_SYSTEM_ERROR = auto()

    # System errors
    CONFIGURATION_ERROR = auto()
    UNKNOWN_ERROR = auto()


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class RecoveryAction:
    """Suggested action to recover from an error."""
    action_type: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def retry(max_attempts: int = 1) -> "RecoveryAction":
        return RecoveryAction(
            action_type="retry",
            description=f"Retry the operation (max {max_attempts} attempts)",
            parameters={"max_attempts": max_attempts}
        )

    @staticmethod
    def rephrase(message: str) -> "RecoveryAction":
        return RecoveryAction(
            action_type="rephrase",
            description="Ask the user to rephrase the request",
            parameters={"message": message}
        )

    @staticmethod
    def abort(reason: str) -> "RecoveryAction":
        return RecoveryAction(
            action_type="abort",
            description=f"Abort operation: {reason}",
            parameters={"reason": reason}
        )


@dataclass
class ClassifiedError:
    """A classified error with full context."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    recoverable: bool
    recovery_actions: List[RecoveryAction]

    original_exception: Optional[Exception] = None
    pipeline_phase: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    user_message: Optional[str] = None

    def __post_init__(self):
        if self.original_exception and not self.stack_trace:
            self.stack_trace = ''.join(traceback.format_exception(
                type(self.original_exception),
                self.original_exception,
                self.original_exception.__traceback__
            ))

        if not self.user_message:
            self.user_message = self._generate_user_message()

    def _generate_user_message(self) -> str:
        """Generate a user-friendly error message."""
        messages = {
            ErrorCategory.EMPTY_REQUEST: USAGE_GUIDANCE,
            ErrorCategory.NO_FILTERS_EXTRACTED: USAGE_GUIDANCE,
            ErrorCategory.INVALID_PREVIOUS_FILTERS: "Previous filters must be a JSON object of filter values.",
            ErrorCategory.DATA_FILE_NOT_FOUND: "I couldn't find the action data file.",
            ErrorCategory.DATA_FORMAT_ERROR: "The action data file could not be read.",
            ErrorCategory.NO_MATCHING_DATA: NO_MATCH_REPLY,
            ErrorCategory.EXPORT_FAILED: EXPORT_FAILED_REPLY,
            ErrorCategory.CONFIGURATION_ERROR: "The assistant is not configured correctly.",
        }
        return messages.get(self.category, f"An error occurred: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.name,
            "severity": self.severity.value,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "recovery_actions": [
                {"type": a.action_type, "description": a.description}
                for a in self.recovery_actions
            ],
            "pipeline_phase": self.pipeline_phase,
            "context": self.context,
        }


class ReportAssistantError(Exception):
    """Base exception for report assistant errors with classification."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        recoverable: bool = False,
        recovery_actions: List[RecoveryAction] = None,
        context: Dict[str, Any] = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.recoverable = recoverable
        self.recovery_actions = recovery_actions or []
        self.context = context or {}

    def classify(self) -> ClassifiedError:
        return ClassifiedError(
            category=self.category,
            severity=self.severity,
            message=str(self),
            recoverable=self.recoverable,
            recovery_actions=self.recovery_actions,
            original_exception=self,
            context=self.context,
        )


def classify_error(
    exception: Exception,
    pipeline_phase: str = None,
    context: Dict[str, Any] = None,
) -> ClassifiedError:
    """Classify an exception into a structured error."""
    context = context or {}

    if isinstance(exception, ReportAssistantError):
        classified = exception.classify()
        classified.pipeline_phase = pipeline_phase
        classified.context.update(context)
        return classified

    if isinstance(exception, FileNotFoundError):
        return ClassifiedError(
            category=ErrorCategory.DATA_FILE_NOT_FOUND,
            severity=ErrorSeverity.HIGH,
            message=str(exception),
            recoverable=False,
            recovery_actions=[RecoveryAction.abort("Data file is missing")],
            original_exception=exception,
            pipeline_phase=pipeline_phase,
            context=context,
        )

    if isinstance(exception, PermissionError):
        return ClassifiedError(
            category=ErrorCategory.FILE_SYSTEM_ERROR,
            severity=ErrorSeverity.HIGH,
            message=str(exception),
            recoverable=False,
            recovery_actions=[RecoveryAction.abort("No permission to access the file")],
            original_exception=exception,
            pipeline_phase=pipeline_phase,
            context=context,
        )

    error_str = str(exception).lower()

    # Parsing errors from pandas / json / yaml readers
    if isinstance(exception, (ValueError, KeyError)) and (
        "parse" in error_str or "decode" in error_str or "column" in error_str or "expecting" in error_str
    ):
        return ClassifiedError(
            category=ErrorCategory.DATA_FORMAT_ERROR,
            severity=ErrorSeverity.MEDIUM,
            message=str(exception),
            recoverable=False,
            recovery_actions=[],
            original_exception=exception,
            pipeline_phase=pipeline_phase,
            context=context,
        )

    if isinstance(exception, OSError):
        return ClassifiedError(
            category=ErrorCategory.FILE_SYSTEM_ERROR,
            severity=ErrorSeverity.MEDIUM,
            message=str(exception),
            recoverable=True,
            recovery_actions=[RecoveryAction.retry()],
            original_exception=exception,
            pipeline_phase=pipeline_phase,
            context=context,
        )

    # Default
    return ClassifiedError(
        category=ErrorCategory.UNKNOWN_ERROR,
        severity=ErrorSeverity.HIGH,
        message=str(exception),
        recoverable=False,
        recovery_actions=[],
        original_exception=exception,
        pipeline_phase=pipeline_phase,
        context=context,
    )
