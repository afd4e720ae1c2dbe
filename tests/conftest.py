from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from kubeterm.client import TerminalConfigClient
from kubeterm.resources.models import (
    Condition,
    ConditionStatus,
    ConditionType,
    ConfigMapReference,
    FileMount,
    ObjectMeta,
    ResourceRequirements,
    SecretReference,
    TerminalConfig,
    TerminalConfigSpec,
    TerminalConfigStatus,
    TerminalPhase,
    VolumeReference,
)
from kubeterm.store.memory import InMemoryObjectStore

_CLUSTER_TEST_FILES = {
    "test_cluster_store.py",
}

FIXED_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))

        if "property" in path.parts:
            item.add_marker(pytest.mark.property)

        if path.name in _CLUSTER_TEST_FILES:
            item.add_marker(pytest.mark.cluster)


def build_config(name: str = "test-terminal", namespace: str = "default") -> TerminalConfig:
    return TerminalConfig(
        metadata=ObjectMeta(name=name, namespace=namespace, labels={"team": "platform"}),
        spec=TerminalConfigSpec(
            image="ubuntu:22.04",
            command=["/bin/bash"],
            args=["-c", "echo 'Hello World'"],
            file_mounts=[
                FileMount(
                    name="config-mount",
                    mount_path="/etc/config",
                    source=ConfigMapReference(name="app-config", optional=False),
                    read_only=True,
                ),
                FileMount(
                    name="secret-mount",
                    mount_path="/etc/secrets",
                    source=SecretReference(secret_name="app-secrets", optional=False),
                    read_only=True,
                ),
                FileMount(
                    name="volume-mount",
                    mount_path="/data",
                    source=VolumeReference(name="shared-data", sub_path="app-data"),
                ),
            ],
            resources=ResourceRequirements(
                requests={"memory": "128Mi", "cpu": "100m"},
                limits={"memory": "256Mi", "cpu": "200m"},
            ),
            security_context={"runAsNonRoot": True, "capabilities": {"drop": ["ALL"]}},
        ),
        status=TerminalConfigStatus(
            phase=TerminalPhase.PENDING,
            message="Terminal configuration created",
            conditions={
                "Ready": Condition(
                    type=ConditionType.READY,
                    status=ConditionStatus.FALSE,
                    last_transition_time=FIXED_TIME,
                    reason="Pending",
                    message="Waiting for terminal to be ready",
                )
            },
        ),
    )


@pytest.fixture
def sample_config() -> TerminalConfig:
    return build_config()


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore(clock=lambda: FIXED_TIME)


@pytest.fixture
def client(store: InMemoryObjectStore) -> TerminalConfigClient:
    return TerminalConfigClient(store, namespace="default")


@pytest.fixture
def make_config():
    return build_config
