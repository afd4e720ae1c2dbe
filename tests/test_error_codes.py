from __future__ import annotations

from kubeterm.errors import (
    AlreadyExistsError,
    ConflictError,
    ConversionError,
    ExitCode,
    InvalidMountError,
    KubeTermError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
    user_facing_error,
)
from kubeterm.logging import LOG_LEVELS, configure_logging


def test_exit_codes_are_deterministic() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.INVALID_ARGS) == 2
    assert int(ExitCode.VALIDATION_ERROR) == 5
    assert int(ExitCode.STORE_UNAVAILABLE) == 10


def test_kubeterm_error_string_contains_hint() -> None:
    err = KubeTermError("store down", code=ExitCode.STORE_UNAVAILABLE, hint="Retry later")
    assert "Retry later" in str(err)


def test_user_facing_error_template() -> None:
    text = user_facing_error("Invalid mount", hint="Set one source")
    assert text.startswith("Error:")
    assert "Next step" in text


def test_logging_levels() -> None:
    logger = configure_logging("WARN")
    assert logger.level == LOG_LEVELS["WARN"]


def test_each_error_kind_has_its_own_exit_code() -> None:
    kinds = [
        ValidationError("x"),
        NotFoundError("x"),
        AlreadyExistsError("x"),
        ConflictError("x"),
        ConversionError("x"),
        StoreUnavailableError("x"),
    ]
    codes = {int(item.code) for item in kinds}
    assert len(codes) == len(kinds)


def test_only_conflict_and_store_unavailable_are_retryable() -> None:
    assert ConflictError("x").retryable is True
    assert StoreUnavailableError("x").retryable is True
    assert ValidationError("x").retryable is False
    assert NotFoundError("x").retryable is False
    assert AlreadyExistsError("x").retryable is False
    assert ConversionError("x").retryable is False


def test_invalid_mount_is_a_validation_error() -> None:
    err = InvalidMountError("bad mount", mount_name="data")
    assert isinstance(err, ValidationError)
    assert err.code == ExitCode.VALIDATION_ERROR
    assert err.mount_name == "data"
