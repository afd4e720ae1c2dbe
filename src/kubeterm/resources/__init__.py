"""TerminalConfig resource model, wire codec and mount resolution."""

from .conditions import get_condition, is_condition_true, set_condition, transition_phase
from .models import (
    Condition,
    ConditionStatus,
    ConditionType,
    ConfigMapReference,
    FileMount,
    ObjectMeta,
    ResourceRequirements,
    SecretReference,
    TerminalConfig,
    TerminalConfigList,
    TerminalConfigSpec,
    TerminalConfigStatus,
    TerminalPhase,
    VolumeReference,
)
from .mounts import ResolvedMount, resolve_mount, resolve_mounts, resolve_wire_mount
from .validation import apply_defaults, validate_terminal_config

__all__ = [
    "apply_defaults",
    "Condition",
    "ConditionStatus",
    "ConditionType",
    "ConfigMapReference",
    "FileMount",
    "get_condition",
    "is_condition_true",
    "ObjectMeta",
    "ResolvedMount",
    "resolve_mount",
    "resolve_mounts",
    "resolve_wire_mount",
    "ResourceRequirements",
    "SecretReference",
    "set_condition",
    "TerminalConfig",
    "TerminalConfigList",
    "TerminalConfigSpec",
    "TerminalConfigStatus",
    "TerminalPhase",
    "transition_phase",
    "validate_terminal_config",
    "VolumeReference",
]
