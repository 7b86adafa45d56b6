"""Canonical error codes surfaced to the CLI/UI."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    CONFIG_INVALID = "CONFIG_INVALID"
    INVALID_INPUT = "INVALID_INPUT"

    EXTERNAL_TOOL_MISSING = "EXTERNAL_TOOL_MISSING"
    EXTERNAL_TOOL_FAILED = "EXTERNAL_TOOL_FAILED"
    JOB_TIMEOUT = "JOB_TIMEOUT"
    JOB_IN_FLIGHT = "JOB_IN_FLIGHT"

    DELETE_FAILED = "DELETE_FAILED"
    BACKUP_MISSING = "BACKUP_MISSING"
