"""Domain error types raised by the doctor engine and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    CONNECTION_FAILED = "DOCTOR_CONNECTION_FAILED"
    INVALID_CONFIGURATION = "DOCTOR_INVALID_CONFIGURATION"
    CLIENT_ERROR = "DOCTOR_CLIENT_ERROR"
    REPORT_WRITE_FAILED = "DOCTOR_REPORT_WRITE_FAILED"


@dataclass(frozen=True)
class ErrorContext:
    code: str
    hints: tuple[str, ...] = ()
    fields: dict[str, Any] = field(default_factory=dict)


class DoctorError(Exception):
    """Base class for errors that carry a stable code and a user-facing message."""

    code_enum: ErrorCode = ErrorCode.CLIENT_ERROR

    def __init__(
        self,
        message: str,
        *,
        user_message: str | None = None,
        hints: tuple[str, ...] = (),
        **fields: Any,
    ) -> None:
        super().__init__(message)
        self.user_message = user_message or message
        self.context = ErrorContext(
            code=self.code_enum.value,
            hints=tuple(hints),
            fields={key: value for key, value in fields.items() if value is not None},
        )

    @property
    def code(self) -> str:
        return self.context.code

    def log_fields(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code}
        payload.update(self.context.fields)
        if self.context.hints:
            payload["hints"] = list(self.context.hints)
        return payload


class ConnectionFailedError(DoctorError):
    """The protocol client could not be established; no probe can run."""

    code_enum = ErrorCode.CONNECTION_FAILED


class ConfigurationError(DoctorError):
    """Invalid doctor or server configuration, detected before any network work."""

    code_enum = ErrorCode.INVALID_CONFIGURATION


class ProtocolClientError(DoctorError):
    """A request issued through the protocol client failed."""

    code_enum = ErrorCode.CLIENT_ERROR


class ReportWriteError(DoctorError):
    """The finished report could not be written to its output file."""

    code_enum = ErrorCode.REPORT_WRITE_FAILED


__all__ = [
    "ConfigurationError",
    "ConnectionFailedError",
    "DoctorError",
    "ErrorCode",
    "ErrorContext",
    "ProtocolClientError",
    "ReportWriteError",
]
