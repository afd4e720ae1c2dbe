from __future__ import annotations

import pytest

from kubeterm.errors import InvalidMountError
from kubeterm.resources.models import (
    ConfigMapReference,
    FileMount,
    SecretReference,
    VolumeReference,
)
from kubeterm.resources.mounts import resolve_mount, resolve_mounts, resolve_wire_mount


def test_secret_mount_resolves_to_secret_volume_only() -> None:
    mount = FileMount(
        name="secret-mount",
        mount_path="/etc/secrets",
        source=SecretReference(secret_name="app-secrets"),
        read_only=True,
    )

    resolved = resolve_mount(mount)

    assert resolved.volume.name == "secret-mount"
    assert resolved.volume.secret.secret_name == "app-secrets"
    assert resolved.volume.config_map is None
    assert resolved.volume.persistent_volume_claim is None
    assert resolved.volume_mount.name == "secret-mount"
    assert resolved.volume_mount.mount_path == "/etc/secrets"
    assert resolved.volume_mount.read_only is True
    assert resolved.volume_mount.sub_path is None


def test_config_map_mount_carries_optional_flag() -> None:
    mount = FileMount(
        name="config-mount",
        mount_path="/etc/config",
        source=ConfigMapReference(name="app-config", optional=True),
    )

    resolved = resolve_mount(mount)

    assert resolved.volume.config_map.name == "app-config"
    assert resolved.volume.config_map.optional is True
    assert resolved.volume.secret is None
    assert resolved.volume_mount.read_only is False


def test_volume_mount_uses_claim_and_sub_path() -> None:
    mount = FileMount(
        name="volume-mount",
        mount_path="/data",
        source=VolumeReference(name="shared-data", sub_path="app-data"),
    )

    resolved = resolve_mount(mount)

    assert resolved.volume.persistent_volume_claim.claim_name == "shared-data"
    assert resolved.volume.config_map is None
    assert resolved.volume.secret is None
    assert resolved.volume_mount.sub_path == "app-data"
    assert resolved.volume_mount.mount_path == "/data"


def test_volume_mount_without_sub_path_mounts_root() -> None:
    mount = FileMount(name="root", mount_path="/vol", source=VolumeReference(name="pvc"), read_only=True)

    resolved = resolve_mount(mount)

    assert resolved.volume_mount.sub_path is None
    assert resolved.volume.persistent_volume_claim.read_only is True


def test_mount_without_source_fails_resolution() -> None:
    mount = FileMount(name="nothing", mount_path="/x", source=None)  # type: ignore[arg-type]
    with pytest.raises(InvalidMountError):
        resolve_mount(mount)


def test_wire_mount_with_exactly_one_reference_resolves() -> None:
    resolved = resolve_wire_mount(
        {"name": "secret-mount", "mountPath": "/etc/secrets", "secretRef": {"secretName": "app-secrets"}}
    )
    assert resolved.volume.secret.secret_name == "app-secrets"


@pytest.mark.parametrize(
    "refs",
    [
        {},
        {"configMapRef": {"name": "cm"}, "volumeRef": {"name": "pvc"}},
        {"secretRef": {"secretName": "s"}, "volumeRef": {"name": "pvc"}},
    ],
)
def test_wire_mount_with_zero_or_many_references_fails(refs: dict) -> None:
    with pytest.raises(InvalidMountError) as excinfo:
        resolve_wire_mount({"name": "m", "mountPath": "/m", **refs})
    assert excinfo.value.mount_name == "m"


def test_relative_mount_path_fails_resolution() -> None:
    mount = FileMount(name="rel", mount_path="etc", source=ConfigMapReference(name="cm"))
    with pytest.raises(InvalidMountError):
        resolve_mount(mount)


def test_resolve_mounts_keeps_order_and_rejects_duplicates() -> None:
    first = FileMount(name="a", mount_path="/a", source=ConfigMapReference(name="cm"))
    second = FileMount(name="b", mount_path="/b", source=SecretReference(secret_name="s"))

    resolved = resolve_mounts([first, second])
    assert [item.volume.name for item in resolved] == ["a", "b"]

    with pytest.raises(InvalidMountError):
        resolve_mounts([first, first])


def test_resolution_does_not_mutate_input() -> None:
    mount = FileMount(name="a", mount_path="/a", source=ConfigMapReference(name="cm"))
    snapshot = mount.deep_copy()
    resolve_mount(mount)
    assert mount == snapshot
