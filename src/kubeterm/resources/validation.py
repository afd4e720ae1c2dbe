"""Validation and defaulting for TerminalConfig values."""

from __future__ import annotations

import re
from collections.abc import Sequence
from posixpath import isabs

from kubeterm.errors import InvalidMountError, ValidationError
from kubeterm.resources.models import (
    ConfigMapReference,
    FileMount,
    SecretReference,
    TerminalConfig,
    VolumeReference,
)

DEFAULT_IMAGE = "ubuntu:22.04"
DEFAULT_COMMAND: tuple[str, ...] = ("/bin/bash",)

_DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_MAX_SUBDOMAIN_LENGTH = 253
_MAX_LABEL_LENGTH = 63

_MOUNT_HINT = "Each file mount needs a name, an absolute mountPath and exactly one source."


def apply_defaults(
    config: TerminalConfig,
    *,
    image: str = DEFAULT_IMAGE,
    command: Sequence[str] = DEFAULT_COMMAND,
) -> TerminalConfig:
    defaulted = config.deep_copy()
    if not defaulted.spec.image.strip():
        defaulted.spec.image = image
    if not defaulted.spec.command:
        defaulted.spec.command = list(command)
    return defaulted


def is_dns_subdomain(value: str) -> bool:
    return len(value) <= _MAX_SUBDOMAIN_LENGTH and bool(_DNS_SUBDOMAIN.match(value))


def file_mount_problems(mount: FileMount) -> list[str]:
    label = mount.name or "<unnamed>"
    problems: list[str] = []
    if not mount.name.strip():
        problems.append("file mount name is required")
    elif len(mount.name) > _MAX_LABEL_LENGTH or not _DNS_LABEL.match(mount.name):
        problems.append(f"file mount {label!r}: name must be a DNS-1123 label")
    if not mount.mount_path.strip():
        problems.append(f"file mount {label!r}: mountPath is required")
    elif not isabs(mount.mount_path):
        problems.append(f"file mount {label!r}: mountPath must be absolute")

    source = mount.source
    if isinstance(source, ConfigMapReference):
        if not source.name.strip():
            problems.append(f"file mount {label!r}: configMapRef.name is required")
    elif isinstance(source, SecretReference):
        if not source.secret_name.strip():
            problems.append(f"file mount {label!r}: secretRef.secretName is required")
    elif isinstance(source, VolumeReference):
        if not source.name.strip():
            problems.append(f"file mount {label!r}: volumeRef.name is required")
        if source.sub_path and (isabs(source.sub_path) or ".." in source.sub_path.split("/")):
            problems.append(f"file mount {label!r}: volumeRef.subPath must be a relative path")
    else:
        problems.append(f"file mount {label!r}: must reference exactly one source")
    return problems


def check_file_mount(mount: FileMount) -> FileMount:
    problems = file_mount_problems(mount)
    if problems:
        raise InvalidMountError(
            f"Invalid file mount {mount.name or '<unnamed>'!r}: {'; '.join(problems)}",
            hint=_MOUNT_HINT,
            problems=tuple(problems),
            mount_name=mount.name,
        )
    return mount


def terminal_config_problems(config: TerminalConfig) -> list[str]:
    problems: list[str] = []
    name = config.metadata.name
    if not name.strip():
        problems.append("metadata.name is required")
    elif not is_dns_subdomain(name):
        problems.append(f"metadata.name {name!r} must be a DNS-1123 subdomain")

    seen: set[str] = set()
    for mount in config.spec.file_mounts:
        problems.extend(file_mount_problems(mount))
        if mount.name in seen:
            problems.append(f"file mount {mount.name!r}: name is not unique")
        seen.add(mount.name)

    for key in ("requests", "limits"):
        values: dict[str, str] = getattr(config.spec.resources, key)
        for resource_name, quantity in values.items():
            if not str(quantity).strip():
                problems.append(f"spec.resources.{key}.{resource_name} must not be empty")
    return problems


def validate_terminal_config(config: TerminalConfig) -> TerminalConfig:
    problems = terminal_config_problems(config)
    if problems:
        raise ValidationError(
            f"Invalid TerminalConfig {config.metadata.name or '<unnamed>'!r}: {'; '.join(problems)}",
            hint="Fix the listed fields and submit again.",
            problems=tuple(problems),
        )
    return config
