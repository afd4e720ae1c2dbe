"""Retry module edge case tests."""

from __future__ import annotations

import pytest

from kubeterm.errors import ConversionError
from kubeterm.retry import RetryPolicy, run_with_retry


def test_zero_attempts_raises_runtime_error() -> None:
    with pytest.raises(RuntimeError):
        run_with_retry(lambda: "never", policy=RetryPolicy(max_attempts=0), sleep=lambda _: None)


def test_conversion_error_is_not_retried() -> None:
    attempts = {"count": 0}

    def operation() -> str:
        attempts["count"] += 1
        raise ConversionError("schema drift")

    with pytest.raises(ConversionError):
        run_with_retry(operation, policy=RetryPolicy(max_attempts=3), sleep=lambda _: None)
    assert attempts["count"] == 1


def test_unrelated_exceptions_propagate_immediately() -> None:
    def operation() -> str:
        raise KeyError("boom")

    with pytest.raises(KeyError):
        run_with_retry(operation, policy=RetryPolicy(max_attempts=3), sleep=lambda _: None)
