"""TerminalConfig resource model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

GROUP = "terminal.kubernetes-web-terminal.io"
VERSION = "v1"
PLURAL = "terminalconfigs"
KIND = "TerminalConfig"
LIST_KIND = "TerminalConfigList"
API_VERSION = f"{GROUP}/{VERSION}"


class TerminalPhase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"
    TERMINATED = "Terminated"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionType(str, Enum):
    READY = "Ready"
    FILES_MOUNTED = "FilesMounted"


def utc_now() -> datetime:
    """Current UTC time truncated to the second, matching the wire precision."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def normalize_time(value: datetime | None) -> datetime | None:
    """Coerce to UTC at whole-second precision; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def condition_key(condition_type: ConditionType | str) -> str:
    if isinstance(condition_type, Enum):
        return str(condition_type.value)
    return str(condition_type)


def copy_tree(value: Any) -> Any:
    """Copy nested dicts and lists; scalars are immutable and shared."""
    if isinstance(value, dict):
        return {key: copy_tree(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_tree(item) for item in value]
    return value


@dataclass
class ConfigMapReference:
    name: str
    optional: bool | None = None

    def deep_copy(self) -> ConfigMapReference:
        return ConfigMapReference(name=self.name, optional=self.optional)


@dataclass
class SecretReference:
    secret_name: str
    optional: bool | None = None

    def deep_copy(self) -> SecretReference:
        return SecretReference(secret_name=self.secret_name, optional=self.optional)


@dataclass
class VolumeReference:
    name: str
    sub_path: str = ""

    def deep_copy(self) -> VolumeReference:
        return VolumeReference(name=self.name, sub_path=self.sub_path)


MountSource = Union[ConfigMapReference, SecretReference, VolumeReference]


@dataclass
class FileMount:
    name: str
    mount_path: str
    source: MountSource
    read_only: bool = False

    @property
    def config_map_ref(self) -> ConfigMapReference | None:
        return self.source if isinstance(self.source, ConfigMapReference) else None

    @property
    def secret_ref(self) -> SecretReference | None:
        return self.source if isinstance(self.source, SecretReference) else None

    @property
    def volume_ref(self) -> VolumeReference | None:
        return self.source if isinstance(self.source, VolumeReference) else None

    def deep_copy(self) -> FileMount:
        source = self.source.deep_copy() if self.source is not None else None
        return FileMount(
            name=self.name,
            mount_path=self.mount_path,
            source=source,
            read_only=self.read_only,
        )


@dataclass
class ResourceRequirements:
    requests: dict[str, str] = field(default_factory=dict)
    limits: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.requests and not self.limits

    def deep_copy(self) -> ResourceRequirements:
        return ResourceRequirements(requests=dict(self.requests), limits=dict(self.limits))


@dataclass
class ObjectMeta:
    name: str
    namespace: str = ""
    resource_version: str = ""
    uid: str = ""
    generation: int = 0
    creation_timestamp: datetime | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.creation_timestamp = normalize_time(self.creation_timestamp)

    def deep_copy(self) -> ObjectMeta:
        return ObjectMeta(
            name=self.name,
            namespace=self.namespace,
            resource_version=self.resource_version,
            uid=self.uid,
            generation=self.generation,
            creation_timestamp=self.creation_timestamp,
            labels=dict(self.labels),
            annotations=dict(self.annotations),
        )


@dataclass
class TerminalConfigSpec:
    image: str = ""
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    file_mounts: list[FileMount] = field(default_factory=list)
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)
    security_context: dict[str, Any] | None = None

    def deep_copy(self) -> TerminalConfigSpec:
        return TerminalConfigSpec(
            image=self.image,
            command=list(self.command),
            args=list(self.args),
            file_mounts=[mount.deep_copy() for mount in self.file_mounts],
            resources=self.resources.deep_copy(),
            security_context=(
                copy_tree(self.security_context) if self.security_context is not None else None
            ),
        )


@dataclass
class Condition:
    type: str
    status: ConditionStatus
    last_transition_time: datetime | None = None
    reason: str = ""
    message: str = ""

    def __post_init__(self) -> None:
        self.type = condition_key(self.type)
        self.status = ConditionStatus(self.status)
        self.last_transition_time = normalize_time(self.last_transition_time)

    def deep_copy(self) -> Condition:
        return Condition(
            type=self.type,
            status=self.status,
            last_transition_time=self.last_transition_time,
            reason=self.reason,
            message=self.message,
        )


@dataclass
class TerminalConfigStatus:
    phase: TerminalPhase = TerminalPhase.PENDING
    message: str = ""
    # Latest condition per type, in first-seen order.
    conditions: dict[str, Condition] = field(default_factory=dict)
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        self.phase = TerminalPhase(self.phase)
        self.created_at = normalize_time(self.created_at)

    def deep_copy(self) -> TerminalConfigStatus:
        return TerminalConfigStatus(
            phase=self.phase,
            message=self.message,
            conditions={key: item.deep_copy() for key, item in self.conditions.items()},
            created_at=self.created_at,
        )


@dataclass
class TerminalConfig:
    metadata: ObjectMeta
    spec: TerminalConfigSpec = field(default_factory=TerminalConfigSpec)
    status: TerminalConfigStatus = field(default_factory=TerminalConfigStatus)
    api_version: str = API_VERSION
    kind: str = KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def deep_copy(self) -> TerminalConfig:
        return TerminalConfig(
            metadata=self.metadata.deep_copy(),
            spec=self.spec.deep_copy(),
            status=self.status.deep_copy(),
            api_version=self.api_version,
            kind=self.kind,
        )


@dataclass
class TerminalConfigList:
    items: list[TerminalConfig] = field(default_factory=list)
    resource_version: str = ""
    api_version: str = API_VERSION
    kind: str = LIST_KIND

    def names(self) -> list[str]:
        return [item.name for item in self.items]

    def deep_copy(self) -> TerminalConfigList:
        return TerminalConfigList(
            items=[item.deep_copy() for item in self.items],
            resource_version=self.resource_version,
            api_version=self.api_version,
            kind=self.kind,
        )
