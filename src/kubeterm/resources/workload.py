"""Render a TerminalConfig into the container and pod the terminal runs in."""

from __future__ import annotations

import re
from typing import Any

from kubernetes import client  # type: ignore

from kubeterm.resources.models import TerminalConfig, copy_tree
from kubeterm.resources.mounts import resolve_mounts
from kubeterm.resources.validation import apply_defaults

TERMINAL_CONTAINER_NAME = "terminal"
APP_LABEL = "kubeterm"
_SANITIZE = re.compile(r"[^a-z0-9-]+")


def pod_name_for(config: TerminalConfig) -> str:
    cleaned = _SANITIZE.sub("-", config.name.lower()).strip("-")
    return f"terminal-{cleaned or 'session'}"[:63].rstrip("-")


def render_container(config: TerminalConfig) -> client.V1Container:
    defaulted = apply_defaults(config)
    spec = defaulted.spec
    resolved = resolve_mounts(spec.file_mounts)
    resources = None
    if not spec.resources.is_empty():
        resources = client.V1ResourceRequirements(
            requests=dict(spec.resources.requests) or None,
            limits=dict(spec.resources.limits) or None,
        )
    security_context: dict[str, Any] | None = None
    if spec.security_context is not None:
        security_context = copy_tree(spec.security_context)
    return client.V1Container(
        name=TERMINAL_CONTAINER_NAME,
        image=spec.image,
        command=list(spec.command),
        args=list(spec.args) or None,
        stdin=True,
        tty=True,
        resources=resources,
        security_context=security_context,
        volume_mounts=[item.volume_mount for item in resolved] or None,
    )


def render_pod_spec(config: TerminalConfig) -> client.V1PodSpec:
    resolved = resolve_mounts(config.spec.file_mounts)
    return client.V1PodSpec(
        containers=[render_container(config)],
        restart_policy="Never",
        volumes=[item.volume for item in resolved] or None,
    )


def render_pod(config: TerminalConfig) -> client.V1Pod:
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            name=pod_name_for(config),
            namespace=config.namespace or None,
            labels={"app": APP_LABEL, "kubeterm/terminal-config": config.name},
        ),
        spec=render_pod_spec(config),
    )


def to_manifest(obj: Any) -> Any:
    """Serialize a kubernetes client model to its camelCase JSON shape."""
    return client.ApiClient().sanitize_for_serialization(obj)
