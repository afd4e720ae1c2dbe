"""Generic structured-object store contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class GroupVersionResource:
    group: str
    version: str
    plural: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return f"{self.plural}.{self.version}.{self.group}"


@dataclass(frozen=True)
class ResourceKey:
    resource: GroupVersionResource
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.resource}/{self.namespace}/{self.name}"


class ObjectStore(Protocol):
    """Namespaced CRUD over untyped objects.

    Implementations raise the ``kubeterm.errors`` taxonomy: ``NotFoundError``,
    ``AlreadyExistsError``, ``ConflictError``, ``ValidationError`` for objects
    the store refuses, and ``StoreUnavailableError`` for transport failures.
    ``timeout`` is the caller's per-request budget in seconds.
    """

    def get(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]: ...

    def list(
        self,
        resource: GroupVersionResource,
        namespace: str,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]: ...

    def create(
        self,
        resource: GroupVersionResource,
        namespace: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]: ...

    def update(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]: ...

    def delete(
        self,
        resource: GroupVersionResource,
        namespace: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> None: ...
