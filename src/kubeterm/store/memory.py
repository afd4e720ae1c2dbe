"""In-process object store with Kubernetes-style write semantics."""

from __future__ import annotations

import copy
import itertools
import logging as py_logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from kubeterm.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from kubeterm.store.base import GroupVersionResource, ResourceKey

logger = py_logging.getLogger(__name__)

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryObjectStore:
    """Thread-safe store keyed by (resource, namespace, name).

    Objects are deep-copied on the way in and out. Every write bumps a
    store-wide ``resourceVersion``; an update whose body carries a stale
    ``metadata.resourceVersion`` fails with ``ConflictError``, and an update
    without one is rejected with ``ValidationError``, as the API server does
    for custom resources.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._objects: dict[ResourceKey, dict[str, Any]] = {}
        self._versions = itertools.count(1)
        self._lock = threading.Lock()
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError(
                "Object store is unavailable.",
                hint="Retry once the store is reachable.",
            )

    def _key(self, resource: GroupVersionResource, namespace: str, name: str) -> ResourceKey:
        return ResourceKey(resource=resource, namespace=namespace, name=name)

    def _must_get(self, key: ResourceKey) -> dict[str, Any]:
        stored = self._objects.get(key)
        if stored is None:
            raise NotFoundError(
                f"{key.resource.plural} {key.name!r} not found in namespace {key.namespace!r}"
            )
        return stored

    @staticmethod
    def _body_name(body: dict[str, Any]) -> str:
        metadata = body.get("metadata")
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise ValidationError("metadata.name is required", hint="Name the object before storing it.")
        return str(metadata["name"])

    def get(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        del timeout
        with self._lock:
            self._check_available()
            return copy.deepcopy(self._must_get(self._key(resource, namespace, name)))

    def list(
        self,
        resource: GroupVersionResource,
        namespace: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        del timeout
        with self._lock:
            self._check_available()
            items = [
                copy.deepcopy(obj)
                for key, obj in sorted(self._objects.items(), key=lambda entry: entry[0].name)
                if key.resource == resource and key.namespace == namespace
            ]
            version = str(next(self._versions))
        return {
            "apiVersion": resource.api_version,
            "kind": "List",
            "metadata": {"resourceVersion": version},
            "items": items,
        }

    def create(
        self,
        resource: GroupVersionResource,
        namespace: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        del timeout
        name = self._body_name(body)
        if body["metadata"].get("resourceVersion"):
            raise ValidationError(
                "resourceVersion should not be set on objects to be created",
                hint="Clear metadata.resourceVersion before creating.",
            )
        key = self._key(resource, namespace, name)
        with self._lock:
            self._check_available()
            if key in self._objects:
                raise AlreadyExistsError(
                    f"{resource.plural} {name!r} already exists in namespace {namespace!r}",
                    hint="Pick another name or update the existing object.",
                )
            stored = copy.deepcopy(body)
            metadata = stored["metadata"]
            metadata["namespace"] = namespace
            metadata["uid"] = str(uuid.uuid4())
            metadata["generation"] = 1
            metadata["creationTimestamp"] = self._clock().strftime(_TIME_FORMAT)
            metadata["resourceVersion"] = str(next(self._versions))
            self._objects[key] = stored
            logger.debug("Stored object key=%s version=%s", key, metadata["resourceVersion"])
            return copy.deepcopy(stored)

    def update(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        del timeout
        if self._body_name(body) != name:
            raise ValidationError(
                f"metadata.name {body['metadata']['name']!r} does not match {name!r}",
                hint="Object names cannot change.",
            )
        key = self._key(resource, namespace, name)
        with self._lock:
            self._check_available()
            current = self._must_get(key)
            current_meta = current["metadata"]
            expected = body["metadata"].get("resourceVersion")
            if not expected:
                raise ValidationError(
                    "metadata.resourceVersion must be specified for an update",
                    hint="Fetch the latest object and update that copy.",
                )
            if expected != current_meta["resourceVersion"]:
                raise ConflictError(
                    f"{resource.plural} {name!r} was modified: "
                    f"have version {expected}, store has {current_meta['resourceVersion']}",
                    hint="Fetch the latest object and reapply the change.",
                )
            stored = copy.deepcopy(body)
            metadata = stored["metadata"]
            metadata["namespace"] = namespace
            metadata["uid"] = current_meta["uid"]
            metadata["creationTimestamp"] = current_meta["creationTimestamp"]
            generation = int(current_meta.get("generation", 1))
            if stored.get("spec") != current.get("spec"):
                generation += 1
            metadata["generation"] = generation
            metadata["resourceVersion"] = str(next(self._versions))
            self._objects[key] = stored
            logger.debug("Updated object key=%s version=%s", key, metadata["resourceVersion"])
            return copy.deepcopy(stored)

    def delete(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> None:
        del timeout
        key = self._key(resource, namespace, name)
        with self._lock:
            self._check_available()
            self._must_get(key)
            del self._objects[key]
            logger.debug("Deleted object key=%s", key)
