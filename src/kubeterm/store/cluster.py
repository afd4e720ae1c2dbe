"""Object store backed by the Kubernetes custom objects API."""

from __future__ import annotations

import json
import logging as py_logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import urllib3
from kubernetes import client, config  # type: ignore
from kubernetes.client.rest import ApiException  # type: ignore

from kubeterm.errors import (
    AlreadyExistsError,
    ConflictError,
    KubeTermError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from kubeterm.store.base import GroupVersionResource

logger = py_logging.getLogger(__name__)


def load_kube_config(*, kubeconfig: str | Path | None = None, in_cluster: bool | None = None) -> None:
    """Load credentials: in-cluster first, then the kubeconfig file."""
    if in_cluster or (in_cluster is None and kubeconfig is None):
        try:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
            return
        except config.ConfigException:
            if in_cluster:
                raise StoreUnavailableError(
                    "In-cluster Kubernetes configuration is not available.",
                    hint="Run inside a pod or disable in_cluster.",
                ) from None
    try:
        config.load_kube_config(config_file=str(kubeconfig) if kubeconfig else None)
        logger.info("Loaded kubeconfig path=%s", kubeconfig or "<default>")
    except (config.ConfigException, OSError) as exc:
        raise StoreUnavailableError(
            f"Failed to load Kubernetes configuration: {exc}",
            hint="Set KUBETERM_KUBECONFIG or kubeconfig in the config file.",
        ) from exc


def _api_message(exc: ApiException) -> str:
    body = getattr(exc, "body", None)
    if body:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError):
            return str(body)
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
    return str(exc.reason or exc)


def translate_api_exception(exc: ApiException, *, operation: str, target: str) -> KubeTermError:
    status = int(exc.status or 0)
    message = f"{operation} {target} failed: {_api_message(exc)}"
    if status == 404:
        return NotFoundError(message)
    if status == 409:
        if operation == "create":
            return AlreadyExistsError(message, hint="Pick another name or update the existing object.")
        return ConflictError(message, hint="Fetch the latest object and reapply the change.")
    if status in (400, 422):
        return ValidationError(message, hint="The API server rejected the object.")
    return StoreUnavailableError(
        message,
        hint=f"API server returned HTTP {status}." if status else "Check cluster connectivity.",
    )


class KubernetesObjectStore:
    def __init__(self, api: client.CustomObjectsApi | None = None) -> None:
        self._api = api or client.CustomObjectsApi()

    @classmethod
    def from_kubeconfig(
        cls,
        *,
        kubeconfig: str | Path | None = None,
        in_cluster: bool | None = None,
    ) -> KubernetesObjectStore:
        load_kube_config(kubeconfig=kubeconfig, in_cluster=in_cluster)
        return cls(client.CustomObjectsApi())

    @contextmanager
    def _translate(self, operation: str, target: str) -> Iterator[None]:
        try:
            yield
        except ApiException as exc:
            error = translate_api_exception(exc, operation=operation, target=target)
            logger.debug("API error operation=%s target=%s status=%s", operation, target, exc.status)
            raise error from exc
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            logger.warning("Transport failure operation=%s target=%s error=%s", operation, target, exc)
            raise StoreUnavailableError(
                f"{operation} {target} failed: {exc}",
                hint="Check cluster connectivity.",
            ) from exc

    @staticmethod
    def _request_options(timeout: float | None) -> dict[str, Any]:
        return {"_request_timeout": timeout} if timeout is not None else {}

    def _call(
        self,
        operation: str,
        target: str,
        method: Callable[..., Any],
        timeout: float | None,
        **kwargs: Any,
    ) -> Any:
        with self._translate(operation, target):
            return method(**kwargs, **self._request_options(timeout))

    def get(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return self._call(
            "get",
            f"{resource.plural}/{namespace}/{name}",
            self._api.get_namespaced_custom_object,
            timeout,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
        )

    def list(
        self,
        resource: GroupVersionResource,
        namespace: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return self._call(
            "list",
            f"{resource.plural}/{namespace}",
            self._api.list_namespaced_custom_object,
            timeout,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
        )

    def create(
        self,
        resource: GroupVersionResource,
        namespace: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        name = str(body.get("metadata", {}).get("name", ""))
        return self._call(
            "create",
            f"{resource.plural}/{namespace}/{name}",
            self._api.create_namespaced_custom_object,
            timeout,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            body=body,
        )

    def update(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        return self._call(
            "update",
            f"{resource.plural}/{namespace}/{name}",
            self._api.replace_namespaced_custom_object,
            timeout,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
            body=body,
        )

    def delete(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> None:
        self._call(
            "delete",
            f"{resource.plural}/{namespace}/{name}",
            self._api.delete_namespaced_custom_object,
            timeout,
            group=resource.group,
            version=resource.version,
            namespace=namespace,
            plural=resource.plural,
            name=name,
        )
