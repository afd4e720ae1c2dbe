"""Phase transitions and condition bookkeeping for TerminalConfig status."""

from __future__ import annotations

import logging as py_logging
from datetime import datetime

from kubeterm.errors import ValidationError
from kubeterm.resources.models import (
    Condition,
    ConditionStatus,
    ConditionType,
    TerminalConfigStatus,
    TerminalPhase,
    condition_key,
    normalize_time,
    utc_now,
)

logger = py_logging.getLogger(__name__)

PHASE_TRANSITIONS: dict[TerminalPhase, frozenset[TerminalPhase]] = {
    TerminalPhase.PENDING: frozenset(
        {TerminalPhase.RUNNING, TerminalPhase.FAILED, TerminalPhase.TERMINATED}
    ),
    TerminalPhase.RUNNING: frozenset({TerminalPhase.FAILED, TerminalPhase.TERMINATED}),
    TerminalPhase.FAILED: frozenset(),
    TerminalPhase.TERMINATED: frozenset(),
}
TERMINAL_PHASES = frozenset({TerminalPhase.FAILED, TerminalPhase.TERMINATED})


def can_transition(current: TerminalPhase, target: TerminalPhase) -> bool:
    return current == target or target in PHASE_TRANSITIONS[current]


def transition_phase(
    status: TerminalConfigStatus,
    target: TerminalPhase | str,
    *,
    message: str | None = None,
) -> bool:
    """Move ``status`` to ``target``; returns whether the phase changed."""
    resolved = TerminalPhase(target)
    current = status.phase
    if not can_transition(current, resolved):
        raise ValidationError(
            f"Illegal phase transition: {current.value} -> {resolved.value}",
            hint=f"{current.value} is a terminal phase."
            if current in TERMINAL_PHASES
            else "Follow Pending -> Running -> Failed/Terminated.",
        )
    if message is not None:
        status.message = message
    if current == resolved:
        return False
    status.phase = resolved
    logger.debug("Phase transition from=%s to=%s", current.value, resolved.value)
    return True


def get_condition(
    status: TerminalConfigStatus, condition_type: ConditionType | str
) -> Condition | None:
    return status.conditions.get(condition_key(condition_type))


def is_condition_true(status: TerminalConfigStatus, condition_type: ConditionType | str) -> bool:
    condition = get_condition(status, condition_type)
    return condition is not None and condition.status == ConditionStatus.TRUE


def set_condition(
    status: TerminalConfigStatus,
    condition_type: ConditionType | str,
    value: ConditionStatus | str,
    *,
    reason: str = "",
    message: str = "",
    now: datetime | None = None,
) -> Condition:
    """Insert or replace the condition for ``condition_type``.

    ``lastTransitionTime`` only moves when the status value changes; rewriting
    the same status with a new reason or message keeps the previous time.
    """
    key = condition_key(condition_type)
    resolved = ConditionStatus(value)
    existing = status.conditions.get(key)
    if existing is not None and existing.status == resolved:
        existing.reason = reason
        existing.message = message
        if existing.last_transition_time is None:
            existing.last_transition_time = normalize_time(now) or utc_now()
        return existing

    condition = Condition(
        type=key,
        status=resolved,
        last_transition_time=now or utc_now(),
        reason=reason,
        message=message,
    )
    status.conditions[key] = condition
    logger.debug(
        "Condition transition type=%s status=%s reason=%s",
        key,
        resolved.value,
        reason or "-",
    )
    return condition


def remove_condition(status: TerminalConfigStatus, condition_type: ConditionType | str) -> bool:
    return status.conditions.pop(condition_key(condition_type), None) is not None
