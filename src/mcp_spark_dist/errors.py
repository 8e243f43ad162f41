"""Error types for Spark distribution management."""
import logging
from typing import Any, Dict, Optional

from mcp.types import ErrorData, INVALID_PARAMS, INVALID_REQUEST, INTERNAL_ERROR


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error),
    }
    if context:
        error_info["context"] = context
    if isinstance(error, SparkDistError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    logger.error("Spark distribution error occurred", extra={"data": error_info})


class SparkDistError(Exception):
    """Base error class for Spark distribution management."""

    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(code=self.code, message=str(self), data=self.details)


def _arg(value: Optional[str]) -> str:
    return "None" if value is None else f'"{value}"'


class VersionNotFoundError(SparkDistError):
    """No catalog entry satisfies the requested filters."""

    def __init__(self, runtime_version: Optional[str], platform_version: Optional[str]):
        remedy = (
            f"install(runtime_version={_arg(runtime_version)}, "
            f"platform_version={_arg(platform_version)})"
        )
        super().__init__(
            f"Spark version not installed (runtime_version={_arg(runtime_version)}, "
            f"platform_version={_arg(platform_version)}). To install, use {remedy}",
            code=INVALID_PARAMS,
            details={
                "runtime_version": runtime_version,
                "platform_version": platform_version,
                "remedy": remedy,
            },
        )


class CatalogIntegrityError(SparkDistError):
    """The shipped version catalog is malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=INTERNAL_ERROR, details=details)


class DirectoryUnwritableError(SparkDistError):
    """The install root cannot be created or written."""

    def __init__(self, path: Any, reason: str = ""):
        super().__init__(
            f"Spark install directory {path} is not writable"
            + (f": {reason}" if reason else ""),
            details={"path": str(path)},
        )


class DownloadFailedError(SparkDistError):
    """Fetching the runtime archive failed."""

    def __init__(self, url: str, reason: str = ""):
        super().__init__(
            f"Failed to download {url}" + (f": {reason}" if reason else ""),
            details={"url": url},
        )


class ExtractionFailedError(SparkDistError):
    """Extracting the runtime archive failed or produced nothing."""

    def __init__(self, archive: Any, reason: str = ""):
        super().__init__(
            f"Failed to extract {archive}" + (f": {reason}" if reason else ""),
            details={"archive": str(archive)},
        )


class ConfigPatchError(SparkDistError):
    """Applying a configuration file change failed. Never fatal."""

    def __init__(self, message: str, path: Any = None):
        super().__init__(message, details={"path": str(path) if path else None})


class ExternalInstallationError(SparkDistError):
    """A managed operation was requested over an externally managed install."""

    def __init__(self, path: Any):
        super().__init__(
            f"Spark at {path} is managed externally (SPARK_HOME); "
            "refusing to modify it",
            code=INVALID_REQUEST,
            details={"path": str(path)},
        )
