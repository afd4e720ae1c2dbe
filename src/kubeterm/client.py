"""Typed TerminalConfig client over a generic object store."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Sequence
from typing import Any

from kubeterm.errors import ConversionError, ValidationError
from kubeterm.resources import codec
from kubeterm.resources.models import (
    GROUP,
    PLURAL,
    VERSION,
    TerminalConfig,
    TerminalConfigList,
    TerminalPhase,
    utc_now,
)
from kubeterm.resources.validation import (
    DEFAULT_COMMAND,
    DEFAULT_IMAGE,
    apply_defaults,
    validate_terminal_config,
)
from kubeterm.store.base import GroupVersionResource, ObjectStore

logger = py_logging.getLogger(__name__)

TERMINAL_CONFIGS = GroupVersionResource(group=GROUP, version=VERSION, plural=PLURAL)


class TerminalConfigClient:
    """CRUD for TerminalConfig resources in one namespace.

    Holds no mutable state beyond the store handle, so one instance can be
    shared across threads. Values returned to callers are freshly decoded and
    never aliased with anything the client keeps.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        namespace: str = "default",
        resource: GroupVersionResource = TERMINAL_CONFIGS,
        default_image: str = DEFAULT_IMAGE,
        default_command: Sequence[str] = DEFAULT_COMMAND,
    ) -> None:
        if not namespace.strip():
            raise ValidationError("Namespace is required.", hint="Pass a non-empty namespace.")
        self.namespace = namespace
        self.resource = resource
        self._store = store
        self._default_image = default_image
        self._default_command = tuple(default_command)

    def _decode(self, raw: Any, *, operation: str) -> TerminalConfig:
        try:
            return codec.from_unstructured(raw)
        except ConversionError:
            logger.error("Stored object failed conversion operation=%s", operation)
            raise
        except ValidationError as exc:
            raise ConversionError(
                f"Stored TerminalConfig is incompatible with the schema: {exc.message}",
                hint="The stored object may predate this schema; repair it before retrying.",
            ) from exc

    def _scoped(self, config: TerminalConfig) -> TerminalConfig:
        namespace = config.metadata.namespace or self.namespace
        if namespace != self.namespace:
            raise ValidationError(
                f"TerminalConfig namespace {namespace!r} does not match client namespace "
                f"{self.namespace!r}",
                hint="Use a client bound to the object's namespace.",
            )
        scoped = config.deep_copy()
        scoped.metadata.namespace = namespace
        return scoped

    def get(self, name: str, *, timeout: float | None = None) -> TerminalConfig:
        raw = self._store.get(self.resource, self.namespace, name, timeout=timeout)
        return self._decode(raw, operation="get")

    def list(self, *, timeout: float | None = None) -> TerminalConfigList:
        raw = self._store.list(self.resource, self.namespace, timeout=timeout)
        if not isinstance(raw, dict):
            raise ConversionError(f"Expected a list object from the store, got {type(raw).__name__}")
        try:
            return codec.list_from_unstructured({**raw, "kind": "TerminalConfigList"})
        except ValidationError as exc:
            raise ConversionError(
                f"Stored TerminalConfig list is incompatible with the schema: {exc.message}",
                hint="Repair the offending object before listing again.",
            ) from exc

    def create(self, config: TerminalConfig, *, timeout: float | None = None) -> TerminalConfig:
        prepared = apply_defaults(
            self._scoped(config),
            image=self._default_image,
            command=self._default_command,
        )
        validate_terminal_config(prepared)
        prepared.metadata.resource_version = ""
        prepared.metadata.uid = ""
        prepared.metadata.creation_timestamp = None
        if prepared.status.created_at is None:
            prepared.status.created_at = utc_now()
        prepared.status.phase = TerminalPhase.PENDING

        logger.info("Creating TerminalConfig namespace=%s name=%s", self.namespace, prepared.name)
        raw = self._store.create(
            self.resource,
            self.namespace,
            codec.to_unstructured(prepared),
            timeout=timeout,
        )
        return self._decode(raw, operation="create")

    def update(self, config: TerminalConfig, *, timeout: float | None = None) -> TerminalConfig:
        prepared = apply_defaults(
            self._scoped(config),
            image=self._default_image,
            command=self._default_command,
        )
        validate_terminal_config(prepared)
        logger.info(
            "Updating TerminalConfig namespace=%s name=%s version=%s",
            self.namespace,
            prepared.name,
            prepared.metadata.resource_version or "-",
        )
        raw = self._store.update(
            self.resource,
            self.namespace,
            prepared.name,
            codec.to_unstructured(prepared),
            timeout=timeout,
        )
        return self._decode(raw, operation="update")

    def delete(self, name: str, *, timeout: float | None = None) -> None:
        logger.info("Deleting TerminalConfig namespace=%s name=%s", self.namespace, name)
        self._store.delete(self.resource, self.namespace, name, timeout=timeout)
