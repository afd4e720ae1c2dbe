"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    VALIDATION_ERROR = 5
    NOT_FOUND = 6
    ALREADY_EXISTS = 7
    CONFLICT = 8
    CONVERSION_ERROR = 9
    STORE_UNAVAILABLE = 10


@dataclass
class KubeTermError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    retryable = False

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class ValidationError(KubeTermError):
    code: ExitCode = ExitCode.VALIDATION_ERROR
    problems: tuple[str, ...] = ()


@dataclass
class InvalidMountError(ValidationError):
    mount_name: str = ""


@dataclass
class NotFoundError(KubeTermError):
    code: ExitCode = ExitCode.NOT_FOUND


@dataclass
class AlreadyExistsError(KubeTermError):
    code: ExitCode = ExitCode.ALREADY_EXISTS


@dataclass
class ConflictError(KubeTermError):
    code: ExitCode = ExitCode.CONFLICT

    retryable = True


@dataclass
class ConversionError(KubeTermError):
    code: ExitCode = ExitCode.CONVERSION_ERROR


@dataclass
class StoreUnavailableError(KubeTermError):
    code: ExitCode = ExitCode.STORE_UNAVAILABLE

    retryable = True


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
