"""Error taxonomy for the Redis-backed Bloom filter."""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Standardized error codes for the library."""

    CONFIGURATION_ERROR = "configuration_error"
    BACKEND_SELECTION_ERROR = "backend_selection_error"
    SCRIPT_NOT_CACHED = "script_not_cached"
    REMOTE_COMMUNICATION_ERROR = "remote_communication_error"


class BloomfilterError(Exception):
    """
    Structured library error.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert error to a serializable dictionary.

        Returns:
            Dictionary with code, title, detail and optional errors
        """
        problem = {
            "code": self.code.value,
            "title": self.code.value.replace("_", " ").title(),
            "detail": self.message,
        }
        if self.details:
            problem["errors"] = self.details
        return problem


class ConfigurationError(BloomfilterError):
    """Invalid filter options or degenerate filter parameters."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details=details,
        )


class BackendSelectionError(BloomfilterError):
    """Error when the requested driver is not one of the known variants."""

    def __init__(self, driver: Any, reason: str = "Unknown bloomfilter driver") -> None:
        super().__init__(
            code=ErrorCode.BACKEND_SELECTION_ERROR,
            message=f"{reason}: {driver!r}",
            details={"driver": str(driver)},
        )


class RemoteCommunicationError(BloomfilterError):
    """Redis operation error."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.REMOTE_COMMUNICATION_ERROR,
            message=f"Redis error during {operation}: {reason}",
            details={"operation": operation},
        )


class ScriptNotCachedError(RemoteCommunicationError):
    """Redis reported NOSCRIPT again after the script was reloaded."""

    def __init__(self, script: str, sha: str) -> None:
        BloomfilterError.__init__(
            self,
            code=ErrorCode.SCRIPT_NOT_CACHED,
            message=f"Script '{script}' is not cached on the server after reload",
            details={"script": script, "sha": sha, "operation": f"evalsha:{script}"},
        )
