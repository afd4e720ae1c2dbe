from __future__ import annotations

from kubeterm.resources.models import ObjectMeta, TerminalConfig, TerminalConfigSpec
from kubeterm.resources.workload import (
    TERMINAL_CONTAINER_NAME,
    pod_name_for,
    render_container,
    render_pod,
    render_pod_spec,
    to_manifest,
)


def test_container_carries_image_command_and_mounts(sample_config: TerminalConfig) -> None:
    container = render_container(sample_config)

    assert container.name == TERMINAL_CONTAINER_NAME
    assert container.image == "ubuntu:22.04"
    assert container.command == ["/bin/bash"]
    assert container.args == ["-c", "echo 'Hello World'"]
    assert container.stdin is True
    assert container.tty is True
    assert [mount.mount_path for mount in container.volume_mounts] == ["/etc/config", "/etc/secrets", "/data"]
    assert container.resources.limits == {"memory": "256Mi", "cpu": "200m"}


def test_container_defaults_apply_without_touching_input() -> None:
    config = TerminalConfig(metadata=ObjectMeta(name="bare"), spec=TerminalConfigSpec())

    container = render_container(config)

    assert container.image == "ubuntu:22.04"
    assert container.command == ["/bin/bash"]
    assert container.args is None
    assert container.resources is None
    assert container.volume_mounts is None
    assert config.spec.image == ""


def test_pod_spec_declares_one_volume_per_mount(sample_config: TerminalConfig) -> None:
    spec = render_pod_spec(sample_config)

    assert spec.restart_policy == "Never"
    assert [volume.name for volume in spec.volumes] == ["config-mount", "secret-mount", "volume-mount"]
    assert spec.volumes[0].config_map.name == "app-config"
    assert spec.volumes[1].secret.secret_name == "app-secrets"
    assert spec.volumes[2].persistent_volume_claim.claim_name == "shared-data"


def test_pod_is_labelled_with_its_config(sample_config: TerminalConfig) -> None:
    pod = render_pod(sample_config)

    assert pod.metadata.name == "terminal-test-terminal"
    assert pod.metadata.namespace == "default"
    assert pod.metadata.labels["kubeterm/terminal-config"] == "test-terminal"


def test_pod_name_is_sanitized_and_bounded() -> None:
    config = TerminalConfig(metadata=ObjectMeta(name="My.Terminal." + "x" * 80))
    name = pod_name_for(config)
    assert name.startswith("terminal-my-terminal-")
    assert len(name) <= 63
    assert not name.endswith("-")


def test_manifest_uses_camel_case_keys(sample_config: TerminalConfig) -> None:
    manifest = to_manifest(render_pod(sample_config))

    container = manifest["spec"]["containers"][0]
    assert manifest["apiVersion"] == "v1"
    assert manifest["spec"]["restartPolicy"] == "Never"
    assert container["volumeMounts"][1] == {
        "name": "secret-mount",
        "mountPath": "/etc/secrets",
        "readOnly": True,
    }
    assert container["volumeMounts"][2]["subPath"] == "app-data"
    assert manifest["spec"]["volumes"][1]["secret"] == {"secretName": "app-secrets", "optional": False}
    assert container["securityContext"] == {"runAsNonRoot": True, "capabilities": {"drop": ["ALL"]}}
