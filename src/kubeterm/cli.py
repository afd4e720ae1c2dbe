"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import json
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TextIO

from pydantic import ValidationError as PydanticValidationError

from .client import TerminalConfigClient
from .config import AppConfig, load_config
from .errors import ConversionError, ExitCode, KubeTermError, user_facing_error
from .logging import configure_logging, default_log_path, normalize_level
from .resources import codec
from .resources.models import PLURAL, TerminalConfig
from .resources.workload import render_pod, to_manifest
from .store.base import GroupVersionResource, ObjectStore

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

StoreFactory = Callable[[AppConfig], ObjectStore]


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _timeout_type(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--timeout must be a number") from exc
    if seconds <= 0:
        raise argparse.ArgumentTypeError("--timeout must be positive")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kubeterm")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--namespace", "-n", default=None)
    parser.add_argument("--timeout", type=_timeout_type, default=None)
    parser.add_argument("--log-level", type=_log_level_type, default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)

    commands = parser.add_subparsers(dest="command", required=True)
    get_cmd = commands.add_parser("get", help="Print one TerminalConfig as JSON")
    get_cmd.add_argument("name")
    commands.add_parser("list", help="List TerminalConfig names and phases")
    create_cmd = commands.add_parser("create", help="Create a TerminalConfig from a JSON file")
    create_cmd.add_argument("file", type=Path)
    delete_cmd = commands.add_parser("delete", help="Delete a TerminalConfig")
    delete_cmd.add_argument("name")
    render_cmd = commands.add_parser(
        "render", help="Print the pod a TerminalConfig JSON file resolves to"
    )
    render_cmd.add_argument("file", type=Path)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def default_store_factory(config: AppConfig) -> ObjectStore:
    from .store.cluster import KubernetesObjectStore

    return KubernetesObjectStore.from_kubeconfig(
        kubeconfig=config.kubeconfig or None,
        in_cluster=config.in_cluster,
    )


def _read_config_file(path: Path) -> TerminalConfig:
    try:
        text = path.expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise KubeTermError(
            f"Cannot read {path}: {exc.strerror or exc}",
            code=ExitCode.INVALID_ARGS,
            hint="Pass the path of a TerminalConfig JSON file.",
        ) from exc
    return codec.from_json(text)


def _emit(payload: Any, stream: TextIO) -> None:
    print(json.dumps(payload, indent=2, sort_keys=False), file=stream)


def run_command(
    namespace: argparse.Namespace,
    config: AppConfig,
    *,
    store_factory: StoreFactory,
    stdout: TextIO,
) -> int:
    if namespace.command == "render":
        terminal_config = _read_config_file(namespace.file)
        _emit(to_manifest(render_pod(terminal_config)), stdout)
        return int(ExitCode.SUCCESS)

    client = TerminalConfigClient(
        store_factory(config),
        namespace=config.namespace,
        resource=GroupVersionResource(group=config.group, version=config.version, plural=PLURAL),
        default_image=config.default_image,
        default_command=config.default_command,
    )
    timeout = namespace.timeout or config.request_timeout_seconds

    if namespace.command == "get":
        _emit(codec.to_unstructured(client.get(namespace.name, timeout=timeout)), stdout)
    elif namespace.command == "list":
        for item in client.list(timeout=timeout).items:
            print(f"{item.name}\t{item.status.phase.value}", file=stdout)
    elif namespace.command == "create":
        created = client.create(_read_config_file(namespace.file), timeout=timeout)
        _emit(codec.to_unstructured(created), stdout)
    elif namespace.command == "delete":
        client.delete(namespace.name, timeout=timeout)
        print(f"deleted {namespace.name}", file=stdout)
    else:
        raise KubeTermError(f"Unknown command: {namespace.command}", code=ExitCode.INVALID_ARGS)
    return int(ExitCode.SUCCESS)


def main(
    argv: Sequence[str] | None = None,
    *,
    store_factory: StoreFactory | None = None,
    stdout: TextIO | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level, log_file=log_path)

    try:
        config = load_config(namespace.config)
        if namespace.namespace:
            try:
                config.namespace = namespace.namespace
            except PydanticValidationError as exc:
                raise KubeTermError(
                    f"Invalid namespace: {namespace.namespace}",
                    code=ExitCode.INVALID_ARGS,
                    hint="Use a DNS-1123 namespace name.",
                ) from exc
        logger.debug("Running command=%s namespace=%s", namespace.command, config.namespace)
        return run_command(
            namespace,
            config,
            store_factory=store_factory or default_store_factory,
            stdout=stdout or sys.stdout,
        )
    except KubeTermError as exc:
        level = py_logging.ERROR if isinstance(exc, ConversionError) else py_logging.WARNING
        logger.log(
            level,
            "Handled %s (code=%s): %s",
            type(exc).__name__,
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
