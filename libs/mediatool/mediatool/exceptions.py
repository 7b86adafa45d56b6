"""MediaTool exception hierarchy."""

from __future__ import annotations

from mediatool.error_codes import ErrorCode


class MediaToolError(Exception):
    """Base error for MediaTool."""

    error_code: ErrorCode = ErrorCode.UNKNOWN


class ConfigurationError(MediaToolError):
    """Raised when configuration is invalid."""

    error_code = ErrorCode.CONFIG_INVALID


class InvalidInputError(MediaToolError):
    """Raised when a source path is missing, nonexistent or of the wrong kind."""

    error_code = ErrorCode.INVALID_INPUT


class ExternalToolError(MediaToolError):
    """Raised when an external binary (ffmpeg, whisper) cannot do its job."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"{tool}: {message}")
        self.tool = tool
        self.message = message


class ExternalToolMissingError(ExternalToolError):
    """Binary or model not found; the message carries remediation text."""

    error_code = ErrorCode.EXTERNAL_TOOL_MISSING


class ExternalToolFailedError(ExternalToolError):
    """Nonzero exit; the message carries the captured diagnostic output."""

    error_code = ErrorCode.EXTERNAL_TOOL_FAILED

    def __init__(
        self,
        tool: str,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(tool, message)
        self.returncode = returncode
        self.stderr = stderr


class JobTimeoutError(ExternalToolError):
    error_code = ErrorCode.JOB_TIMEOUT


class JobInFlightError(MediaToolError):
    """Raised when a job or undo would overlap a pending job."""

    error_code = ErrorCode.JOB_IN_FLIGHT


class DeleteFailedError(MediaToolError):
    """A tracked file could not be removed (usually locked by another process)."""

    error_code = ErrorCode.DELETE_FAILED

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class BackupMissingError(MediaToolError):
    """Raised when a restore is attempted without a valid backup file."""

    error_code = ErrorCode.BACKUP_MISSING

    def __init__(self, backup_path: str) -> None:
        super().__init__(f"Backup file not found: {backup_path}")
        self.backup_path = backup_path
