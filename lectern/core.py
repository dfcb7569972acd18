"""Core types used across all modules."""

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Diag(BaseModel):
    """A structured diagnostic message."""

    severity: Severity
    code: str
    message: str
    hint: str | None = None


class Result(BaseModel, Generic[T]):  # noqa: UP046 — Pydantic requires Generic[T] subclass
    """Result container that pairs output with diagnostics.

    Remote and validation failures come back as diagnostics, not exceptions.
    """

    data: T | None = None
    diagnostics: list[Diag] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    @property
    def ok(self) -> bool:
        return not self.has_errors

    @property
    def first_error(self) -> Diag | None:
        for d in self.diagnostics:
            if d.severity == Severity.ERROR:
                return d
        return None

    def error(self, code: str, message: str, *, hint: str | None = None) -> None:
        self.diagnostics.append(Diag(severity=Severity.ERROR, code=code, message=message, hint=hint))

    def warning(self, code: str, message: str, *, hint: str | None = None) -> None:
        self.diagnostics.append(Diag(severity=Severity.WARNING, code=code, message=message, hint=hint))

    def info(self, code: str, message: str, *, hint: str | None = None) -> None:
        self.diagnostics.append(Diag(severity=Severity.INFO, code=code, message=message, hint=hint))


class LecternError(Exception):
    """Base class for errors raised (rather than reported) by lectern."""


class MissingCredentialError(LecternError):
    """An API key environment variable is unset. Raised before any remote call."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"Missing API key: set {env_var} environment variable")
        self.env_var = env_var


class OperationInProgressError(LecternError):
    """A second trigger arrived while the same operation was still pending."""

    def __init__(self, notebook_id: str, operation: str) -> None:
        super().__init__(f"{operation} already in progress for notebook {notebook_id}")
        self.notebook_id = notebook_id
        self.operation = operation


class AudioDecodeError(LecternError):
    """The PCM payload could not be decoded."""
