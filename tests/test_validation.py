from __future__ import annotations

import pytest

from kubeterm.errors import InvalidMountError, ValidationError
from kubeterm.resources.models import (
    ConfigMapReference,
    FileMount,
    ObjectMeta,
    SecretReference,
    TerminalConfig,
    TerminalConfigSpec,
    VolumeReference,
)
from kubeterm.resources.validation import (
    DEFAULT_COMMAND,
    DEFAULT_IMAGE,
    apply_defaults,
    check_file_mount,
    terminal_config_problems,
    validate_terminal_config,
)


def _config(name: str = "valid-terminal", mounts: list[FileMount] | None = None) -> TerminalConfig:
    return TerminalConfig(
        metadata=ObjectMeta(name=name),
        spec=TerminalConfigSpec(image="alpine:latest", command=["/bin/sh"], file_mounts=mounts or []),
    )


def test_valid_basic_config() -> None:
    config = _config()
    assert validate_terminal_config(config) is config


def test_valid_config_with_file_mounts() -> None:
    config = _config(
        mounts=[FileMount(name="config", mount_path="/config", source=ConfigMapReference(name="my-config"))]
    )
    validate_terminal_config(config)


def test_empty_name_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_terminal_config(_config(name=""))
    assert "metadata.name is required" in excinfo.value.problems


def test_non_dns_name_is_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_terminal_config(_config(name="My_Terminal"))


def test_all_problems_are_reported_together() -> None:
    config = _config(
        name="",
        mounts=[
            FileMount(name="", mount_path="", source=ConfigMapReference(name="cm")),
            FileMount(name="data", mount_path="relative/path", source=VolumeReference(name="")),
        ],
    )
    problems = terminal_config_problems(config)
    assert "metadata.name is required" in problems
    assert "file mount name is required" in problems
    assert "file mount '<unnamed>': mountPath is required" in problems
    assert "file mount 'data': mountPath must be absolute" in problems
    assert "file mount 'data': volumeRef.name is required" in problems


def test_duplicate_mount_names_are_rejected() -> None:
    mount = FileMount(name="data", mount_path="/a", source=ConfigMapReference(name="cm"))
    twin = FileMount(name="data", mount_path="/b", source=SecretReference(secret_name="s"))
    with pytest.raises(ValidationError) as excinfo:
        validate_terminal_config(_config(mounts=[mount, twin]))
    assert "file mount 'data': name is not unique" in excinfo.value.problems


def test_mount_without_source_is_rejected_at_create_time() -> None:
    mount = FileMount(name="data", mount_path="/data", source=None)  # type: ignore[arg-type]
    with pytest.raises(ValidationError) as excinfo:
        validate_terminal_config(_config(mounts=[mount]))
    assert "file mount 'data': must reference exactly one source" in excinfo.value.problems


def test_escaping_sub_path_is_rejected() -> None:
    mount = FileMount(name="data", mount_path="/data", source=VolumeReference(name="pvc", sub_path="../etc"))
    with pytest.raises(InvalidMountError):
        check_file_mount(mount)


def test_empty_quantity_is_rejected() -> None:
    config = _config()
    config.spec.resources.limits["cpu"] = " "
    with pytest.raises(ValidationError):
        validate_terminal_config(config)


def test_defaults_fill_missing_image_and_command() -> None:
    config = TerminalConfig(metadata=ObjectMeta(name="bare"))
    defaulted = apply_defaults(config)
    assert defaulted.spec.image == DEFAULT_IMAGE == "ubuntu:22.04"
    assert defaulted.spec.command == list(DEFAULT_COMMAND) == ["/bin/bash"]
    assert config.spec.image == ""
    assert config.spec.command == []


def test_defaults_keep_explicit_values() -> None:
    defaulted = apply_defaults(_config())
    assert defaulted.spec.image == "alpine:latest"
    assert defaulted.spec.command == ["/bin/sh"]


def test_defaults_accept_custom_fallbacks() -> None:
    config = TerminalConfig(metadata=ObjectMeta(name="bare"))
    defaulted = apply_defaults(config, image="busybox", command=("/bin/ash", "-l"))
    assert defaulted.spec.image == "busybox"
    assert defaulted.spec.command == ["/bin/ash", "-l"]
