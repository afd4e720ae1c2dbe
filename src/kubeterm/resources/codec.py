"""Conversion between TerminalConfig values and the generic object tree.

The store keeps resources as plain JSON-compatible dicts shaped like the
Kubernetes custom resource. Encoding omits empty optional fields; decoding
checks every field's shape and raises ``ConversionError`` with the offending
path so a corrupt object is never confused with a missing one.

A FileMount's source is a tagged variant in the typed model but three
separate optional keys on the wire (``configMapRef``, ``secretRef``,
``volumeRef``). Decoding a mount with zero or several of them raises
``InvalidMountError``.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from kubeterm.errors import ConversionError, InvalidMountError
from kubeterm.resources.models import (
    API_VERSION,
    KIND,
    LIST_KIND,
    Condition,
    ConditionStatus,
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
    copy_tree,
)

MOUNT_REFERENCE_KEYS = ("configMapRef", "secretRef", "volumeRef")

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIME_FORMAT)


def parse_time(raw: object, path: str) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise ConversionError(f"Expected RFC 3339 timestamp at {path}, got {raw!r}")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConversionError(f"Invalid timestamp at {path}: {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _mapping(raw: object, path: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConversionError(f"Expected object at {path}, got {type(raw).__name__}")
    return raw


def _string(raw: object, path: str) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise ConversionError(f"Expected string at {path}, got {type(raw).__name__}")
    return raw


def _boolean(raw: object, path: str) -> bool:
    if raw is None:
        return False
    if not isinstance(raw, bool):
        raise ConversionError(f"Expected boolean at {path}, got {type(raw).__name__}")
    return raw


def _optional_boolean(raw: object, path: str) -> bool | None:
    if raw is None:
        return None
    return _boolean(raw, path)


def _string_list(raw: object, path: str) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConversionError(f"Expected list at {path}, got {type(raw).__name__}")
    return [_string(item, f"{path}[{index}]") for index, item in enumerate(raw)]


def _string_map(raw: object, path: str) -> dict[str, str]:
    values = _mapping(raw, path)
    return {str(key): _string(item, f"{path}.{key}") for key, item in values.items()}


def _quantities(raw: object, path: str) -> dict[str, str]:
    values = _mapping(raw, path)
    decoded: dict[str, str] = {}
    for key, item in values.items():
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ConversionError(f"Expected quantity at {path}.{key}, got {item!r}")
        decoded[str(key)] = str(item)
    return decoded


# Encoding


def _file_mount_to_unstructured(mount: FileMount) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": mount.name, "mountPath": mount.mount_path}
    source = mount.source
    if isinstance(source, ConfigMapReference):
        ref: dict[str, Any] = {"name": source.name}
        if source.optional is not None:
            ref["optional"] = source.optional
        payload["configMapRef"] = ref
    elif isinstance(source, SecretReference):
        ref = {"secretName": source.secret_name}
        if source.optional is not None:
            ref["optional"] = source.optional
        payload["secretRef"] = ref
    elif isinstance(source, VolumeReference):
        ref = {"name": source.name}
        if source.sub_path:
            ref["subPath"] = source.sub_path
        payload["volumeRef"] = ref
    else:
        raise InvalidMountError(
            f"File mount {mount.name!r} has no supported source",
            hint="Set exactly one of configMapRef, secretRef or volumeRef.",
            mount_name=mount.name,
        )
    if mount.read_only:
        payload["readOnly"] = True
    return payload


def _metadata_to_unstructured(metadata: ObjectMeta) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": metadata.name}
    if metadata.namespace:
        payload["namespace"] = metadata.namespace
    if metadata.resource_version:
        payload["resourceVersion"] = metadata.resource_version
    if metadata.uid:
        payload["uid"] = metadata.uid
    if metadata.generation:
        payload["generation"] = metadata.generation
    if metadata.creation_timestamp is not None:
        payload["creationTimestamp"] = format_time(metadata.creation_timestamp)
    if metadata.labels:
        payload["labels"] = dict(metadata.labels)
    if metadata.annotations:
        payload["annotations"] = dict(metadata.annotations)
    return payload


def _spec_to_unstructured(spec: TerminalConfigSpec) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if spec.image:
        payload["image"] = spec.image
    if spec.command:
        payload["command"] = list(spec.command)
    if spec.args:
        payload["args"] = list(spec.args)
    if spec.file_mounts:
        payload["fileMounts"] = [_file_mount_to_unstructured(item) for item in spec.file_mounts]
    if not spec.resources.is_empty():
        resources: dict[str, Any] = {}
        if spec.resources.requests:
            resources["requests"] = dict(spec.resources.requests)
        if spec.resources.limits:
            resources["limits"] = dict(spec.resources.limits)
        payload["resources"] = resources
    if spec.security_context is not None:
        payload["securityContext"] = copy_tree(spec.security_context)
    return payload


def _condition_to_unstructured(condition: Condition) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": condition.type, "status": condition.status.value}
    if condition.last_transition_time is not None:
        payload["lastTransitionTime"] = format_time(condition.last_transition_time)
    if condition.reason:
        payload["reason"] = condition.reason
    if condition.message:
        payload["message"] = condition.message
    return payload


def _status_to_unstructured(status: TerminalConfigStatus) -> dict[str, Any]:
    payload: dict[str, Any] = {"phase": status.phase.value}
    if status.message:
        payload["message"] = status.message
    if status.conditions:
        payload["conditions"] = [
            _condition_to_unstructured(item) for item in status.conditions.values()
        ]
    if status.created_at is not None:
        payload["createdAt"] = format_time(status.created_at)
    return payload


def to_unstructured(config: TerminalConfig) -> dict[str, Any]:
    return {
        "apiVersion": config.api_version,
        "kind": config.kind,
        "metadata": _metadata_to_unstructured(config.metadata),
        "spec": _spec_to_unstructured(config.spec),
        "status": _status_to_unstructured(config.status),
    }


def list_to_unstructured(config_list: TerminalConfigList) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    if config_list.resource_version:
        metadata["resourceVersion"] = config_list.resource_version
    return {
        "apiVersion": config_list.api_version,
        "kind": config_list.kind,
        "metadata": metadata,
        "items": [to_unstructured(item) for item in config_list.items],
    }


# Decoding


def file_mount_from_unstructured(raw: object, path: str = "fileMount") -> FileMount:
    payload = _mapping(raw, path)
    name = _string(payload.get("name"), f"{path}.name")
    present = [key for key in MOUNT_REFERENCE_KEYS if payload.get(key) is not None]
    if len(present) != 1:
        found = ", ".join(present) if present else "none"
        raise InvalidMountError(
            f"File mount {name!r} must reference exactly one source (found: {found})",
            hint="Set exactly one of configMapRef, secretRef or volumeRef.",
            mount_name=name,
        )

    key = present[0]
    ref = _mapping(payload[key], f"{path}.{key}")
    source: ConfigMapReference | SecretReference | VolumeReference
    if key == "configMapRef":
        source = ConfigMapReference(
            name=_string(ref.get("name"), f"{path}.configMapRef.name"),
            optional=_optional_boolean(ref.get("optional"), f"{path}.configMapRef.optional"),
        )
    elif key == "secretRef":
        source = SecretReference(
            secret_name=_string(ref.get("secretName"), f"{path}.secretRef.secretName"),
            optional=_optional_boolean(ref.get("optional"), f"{path}.secretRef.optional"),
        )
    else:
        source = VolumeReference(
            name=_string(ref.get("name"), f"{path}.volumeRef.name"),
            sub_path=_string(ref.get("subPath"), f"{path}.volumeRef.subPath"),
        )

    return FileMount(
        name=name,
        mount_path=_string(payload.get("mountPath"), f"{path}.mountPath"),
        source=source,
        read_only=_boolean(payload.get("readOnly"), f"{path}.readOnly"),
    )


def _metadata_from_unstructured(raw: object) -> ObjectMeta:
    payload = _mapping(raw, "metadata")
    generation = payload.get("generation", 0)
    if isinstance(generation, bool) or not isinstance(generation, int):
        raise ConversionError(f"Expected integer at metadata.generation, got {generation!r}")
    created = payload.get("creationTimestamp")
    return ObjectMeta(
        name=_string(payload.get("name"), "metadata.name"),
        namespace=_string(payload.get("namespace"), "metadata.namespace"),
        resource_version=_string(payload.get("resourceVersion"), "metadata.resourceVersion"),
        uid=_string(payload.get("uid"), "metadata.uid"),
        generation=generation,
        creation_timestamp=(
            parse_time(created, "metadata.creationTimestamp") if created is not None else None
        ),
        labels=_string_map(payload.get("labels"), "metadata.labels"),
        annotations=_string_map(payload.get("annotations"), "metadata.annotations"),
    )


def _spec_from_unstructured(raw: object) -> TerminalConfigSpec:
    payload = _mapping(raw, "spec")
    mounts_raw = payload.get("fileMounts")
    if mounts_raw is not None and not isinstance(mounts_raw, list):
        raise ConversionError(f"Expected list at spec.fileMounts, got {type(mounts_raw).__name__}")
    resources = _mapping(payload.get("resources"), "spec.resources")
    security_context = payload.get("securityContext")
    if security_context is not None and not isinstance(security_context, dict):
        raise ConversionError("Expected object at spec.securityContext")
    return TerminalConfigSpec(
        image=_string(payload.get("image"), "spec.image"),
        command=_string_list(payload.get("command"), "spec.command"),
        args=_string_list(payload.get("args"), "spec.args"),
        file_mounts=[
            file_mount_from_unstructured(item, f"spec.fileMounts[{index}]")
            for index, item in enumerate(mounts_raw or [])
        ],
        resources=ResourceRequirements(
            requests=_quantities(resources.get("requests"), "spec.resources.requests"),
            limits=_quantities(resources.get("limits"), "spec.resources.limits"),
        ),
        security_context=copy_tree(security_context) if security_context is not None else None,
    )


def _condition_from_unstructured(raw: object, path: str) -> Condition:
    payload = _mapping(raw, path)
    condition_type = _string(payload.get("type"), f"{path}.type")
    if not condition_type:
        raise ConversionError(f"Missing condition type at {path}")
    status_raw = _string(payload.get("status"), f"{path}.status")
    try:
        status = ConditionStatus(status_raw)
    except ValueError as exc:
        raise ConversionError(f"Invalid condition status at {path}: {status_raw!r}") from exc
    transition = payload.get("lastTransitionTime")
    return Condition(
        type=condition_type,
        status=status,
        last_transition_time=(
            parse_time(transition, f"{path}.lastTransitionTime") if transition is not None else None
        ),
        reason=_string(payload.get("reason"), f"{path}.reason"),
        message=_string(payload.get("message"), f"{path}.message"),
    )


def _status_from_unstructured(raw: object) -> TerminalConfigStatus:
    payload = _mapping(raw, "status")
    phase_raw = _string(payload.get("phase"), "status.phase") or TerminalPhase.PENDING.value
    try:
        phase = TerminalPhase(phase_raw)
    except ValueError as exc:
        raise ConversionError(f"Invalid phase at status.phase: {phase_raw!r}") from exc

    conditions_raw = payload.get("conditions")
    if conditions_raw is not None and not isinstance(conditions_raw, list):
        raise ConversionError("Expected list at status.conditions")
    conditions: dict[str, Condition] = {}
    for index, item in enumerate(conditions_raw or []):
        condition = _condition_from_unstructured(item, f"status.conditions[{index}]")
        # Later records for the same type supersede earlier ones.
        conditions[condition.type] = condition

    created = payload.get("createdAt")
    return TerminalConfigStatus(
        phase=phase,
        message=_string(payload.get("message"), "status.message"),
        conditions=conditions,
        created_at=parse_time(created, "status.createdAt") if created is not None else None,
    )


def from_unstructured(raw: object) -> TerminalConfig:
    payload = _mapping(raw, "<root>")
    if not payload:
        raise ConversionError("Cannot convert an empty object to TerminalConfig")
    kind = _string(payload.get("kind"), "kind") or KIND
    if kind != KIND:
        raise ConversionError(f"Expected kind {KIND}, got {kind!r}")
    return TerminalConfig(
        metadata=_metadata_from_unstructured(payload.get("metadata")),
        spec=_spec_from_unstructured(payload.get("spec")),
        status=_status_from_unstructured(payload.get("status")),
        api_version=_string(payload.get("apiVersion"), "apiVersion") or API_VERSION,
        kind=kind,
    )


def list_from_unstructured(raw: object) -> TerminalConfigList:
    payload = _mapping(raw, "<root>")
    kind = _string(payload.get("kind"), "kind") or LIST_KIND
    if kind != LIST_KIND:
        raise ConversionError(f"Expected kind {LIST_KIND}, got {kind!r}")
    items_raw = payload.get("items")
    if items_raw is not None and not isinstance(items_raw, list):
        raise ConversionError(f"Expected list at items, got {type(items_raw).__name__}")
    metadata = _mapping(payload.get("metadata"), "metadata")
    return TerminalConfigList(
        items=[from_unstructured(item) for item in items_raw or []],
        resource_version=_string(metadata.get("resourceVersion"), "metadata.resourceVersion"),
        api_version=_string(payload.get("apiVersion"), "apiVersion") or API_VERSION,
        kind=kind,
    )


def to_json(config: TerminalConfig, *, indent: int | None = 2) -> str:
    return json.dumps(to_unstructured(config), indent=indent)


def from_json(text: str) -> TerminalConfig:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConversionError(f"Invalid TerminalConfig JSON: {exc.msg}") from exc
    return from_unstructured(raw)
