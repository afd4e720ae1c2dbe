"""Retry/backoff helpers for retryable store failures."""

from __future__ import annotations

import logging as py_logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from kubeterm.errors import ConflictError, KubeTermError

if TYPE_CHECKING:
    from kubeterm.client import TerminalConfigClient
    from kubeterm.resources.models import TerminalConfig

T = TypeVar("T")

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_backoff_seconds: float = 0.5
    multiplier: float = 2.0


def run_with_retry(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation``, retrying only errors flagged ``retryable``."""
    attempt = 0
    backoff = policy.initial_backoff_seconds
    last_error: KubeTermError | None = None

    while attempt < policy.max_attempts:
        attempt += 1
        try:
            return operation()
        except KubeTermError as exc:
            if not exc.retryable:
                raise
            last_error = exc
            if attempt >= policy.max_attempts:
                break
            logger.debug("Retrying after %s attempt=%s backoff=%s", type(exc).__name__, attempt, backoff)
            sleep(backoff)
            backoff *= policy.multiplier

    if last_error is not None:
        raise last_error
    raise RuntimeError("Retry policy exhausted without executing operation.")


def update_with_retry(
    client: TerminalConfigClient,
    name: str,
    mutate: Callable[[TerminalConfig], None],
    *,
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
    timeout: float | None = None,
) -> TerminalConfig:
    """Read-modify-write ``name``; a conflict re-fetches and reapplies ``mutate``."""

    def attempt() -> TerminalConfig:
        current = client.get(name, timeout=timeout)
        mutate(current)
        try:
            return client.update(current, timeout=timeout)
        except ConflictError:
            logger.info("Update conflict name=%s version=%s", name, current.metadata.resource_version)
            raise

    return run_with_retry(attempt, policy=policy, sleep=sleep)
