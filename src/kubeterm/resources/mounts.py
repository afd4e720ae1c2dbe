"""Resolve FileMounts into Kubernetes volume and volume-mount declarations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from kubernetes import client  # type: ignore

from kubeterm.errors import InvalidMountError
from kubeterm.resources.codec import file_mount_from_unstructured
from kubeterm.resources.models import (
    ConfigMapReference,
    FileMount,
    SecretReference,
    VolumeReference,
)
from kubeterm.resources.validation import check_file_mount


@dataclass(frozen=True)
class ResolvedMount:
    volume: client.V1Volume
    volume_mount: client.V1VolumeMount


def resolve_mount(mount: FileMount) -> ResolvedMount:
    check_file_mount(mount)
    source = mount.source
    sub_path = None
    if isinstance(source, ConfigMapReference):
        volume = client.V1Volume(
            name=mount.name,
            config_map=client.V1ConfigMapVolumeSource(name=source.name, optional=source.optional),
        )
    elif isinstance(source, SecretReference):
        volume = client.V1Volume(
            name=mount.name,
            secret=client.V1SecretVolumeSource(
                secret_name=source.secret_name, optional=source.optional
            ),
        )
    elif isinstance(source, VolumeReference):
        volume = client.V1Volume(
            name=mount.name,
            persistent_volume_claim=client.V1PersistentVolumeClaimVolumeSource(
                claim_name=source.name, read_only=mount.read_only or None
            ),
        )
        sub_path = source.sub_path or None
    else:
        raise InvalidMountError(
            f"File mount {mount.name!r} has an unsupported source: {type(source).__name__}",
            mount_name=mount.name,
        )

    volume_mount = client.V1VolumeMount(
        name=mount.name,
        mount_path=mount.mount_path,
        read_only=mount.read_only,
        sub_path=sub_path,
    )
    return ResolvedMount(volume=volume, volume_mount=volume_mount)


def resolve_wire_mount(raw: object) -> ResolvedMount:
    return resolve_mount(file_mount_from_unstructured(raw))


def resolve_mounts(mounts: Iterable[FileMount]) -> list[ResolvedMount]:
    resolved: list[ResolvedMount] = []
    seen: set[str] = set()
    for mount in mounts:
        if mount.name in seen:
            raise InvalidMountError(
                f"Duplicate file mount name: {mount.name}",
                hint="Give every file mount a unique name.",
                mount_name=mount.name,
            )
        seen.add(mount.name)
        resolved.append(resolve_mount(mount))
    return resolved
