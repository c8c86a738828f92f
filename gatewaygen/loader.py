"""Builds the File graph from a YAML/JSON descriptor manifest."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from .logging import get_logger
from .models import Binding, File, Message, Method, PackageIdentity, Service

_LOGGER = get_logger("loader")


class ManifestError(RuntimeError):
    """Raised when a descriptor manifest is malformed."""


def load_manifest(path: Path) -> List[File]:
    """Read ``path`` and return its files with cross-file message links resolved."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse {path.name}: {exc}") from exc
    files = build_files(data or {})
    _LOGGER.debug("Loaded %d file(s) from %s", len(files), path)
    return files


def build_files(data: Mapping[str, Any]) -> List[File]:
    if not isinstance(data, Mapping):
        raise ManifestError("manifest must contain a mapping at the root")
    entries = data.get("files") or []
    if not isinstance(entries, list):
        raise ManifestError("'files' must be a list")

    # First pass: files and their messages, so methods can reference any of them.
    skeletons: List[Tuple[File, Mapping[str, Any]]] = []
    index: Dict[str, Tuple[File, Message]] = {}
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ManifestError(f"files[{position}] must be a mapping")
        file = _build_file(entry, position)
        for message in file.messages:
            index[f"{file.proto_package}.{message.name}" if file.proto_package else message.name] = (
                file,
                message,
            )
        skeletons.append((file, entry))

    for file, entry in skeletons:
        file.services = [
            _build_service(raw, file, index) for raw in _as_list(entry.get("services"), "services")
        ]
    return [file for file, _ in skeletons]


def _build_file(entry: Mapping[str, Any], position: int) -> File:
    name = _require_str(entry, "name", f"files[{position}]")
    go_package = entry.get("go_package")
    if not isinstance(go_package, Mapping):
        raise ManifestError(f"{name}: 'go_package' must be a mapping with path and name")
    package = _build_package(go_package, name)
    prefix = entry.get("filename_prefix")
    if prefix is None:
        prefix = posixpath.splitext(name)[0]
    messages = [Message(name=str(item)) for item in _as_list(entry.get("messages"), "messages")]
    return File(
        name=name,
        package=package,
        generated_filename_prefix=str(prefix),
        proto_package=str(entry.get("package") or ""),
        messages=messages,
        dependencies=[str(dep) for dep in _as_list(entry.get("dependencies"), "dependencies")],
    )


def _build_package(data: Mapping[str, Any], context: str) -> PackageIdentity:
    path = _require_str(data, "path", context)
    name = _require_str(data, "name", context)
    alias = data.get("alias")
    return PackageIdentity(path=path, name=name, alias=str(alias) if alias else None)


def _build_service(
    data: Any, file: File, index: Mapping[str, Tuple[File, Message]]
) -> Service:
    if not isinstance(data, Mapping):
        raise ManifestError(f"{file.name}: services must be mappings")
    name = _require_str(data, "name", file.name)
    methods = [
        _build_method(raw, file, f"{file.name}:{name}", index)
        for raw in _as_list(data.get("methods"), "methods")
    ]
    return Service(name=name, methods=methods)


def _build_method(
    data: Any, file: File, context: str, index: Mapping[str, Tuple[File, Message]]
) -> Method:
    if not isinstance(data, Mapping):
        raise ManifestError(f"{context}: methods must be mappings")
    name = _require_str(data, "name", context)
    bindings: List[Binding] = []
    for position, raw in enumerate(_as_list(data.get("bindings"), "bindings")):
        if not isinstance(raw, Mapping):
            raise ManifestError(f"{context}.{name}: bindings must be mappings")
        body = raw.get("body")
        bindings.append(
            Binding(
                http_method=_require_str(raw, "method", f"{context}.{name}").upper(),
                path_template=_require_str(raw, "path", f"{context}.{name}"),
                body=str(body) if body else None,
                index=position,
            )
        )
    return Method(
        name=name,
        input_type=_resolve_message(data.get("input"), file, f"{context}.{name}", index),
        output_type=_resolve_message(data.get("output"), file, f"{context}.{name}", index),
        bindings=bindings,
        client_streaming=bool(data.get("client_streaming", False)),
        server_streaming=bool(data.get("server_streaming", False)),
    )


def _resolve_message(
    ref: Any, file: File, context: str, index: Mapping[str, Tuple[File, Message]]
) -> Message:
    if isinstance(ref, Mapping):
        name = _require_str(ref, "name", context)
        go_package = ref.get("go_package")
        package = _build_package(go_package, context) if isinstance(go_package, Mapping) else None
        return Message(name=name, package=package)
    if not isinstance(ref, str) or not ref:
        raise ManifestError(f"{context}: input/output must be a message name or mapping")

    candidates: List[str] = []
    if "." not in ref and file.proto_package:
        candidates.append(f"{file.proto_package}.{ref}")
    candidates.append(ref.lstrip("."))
    for key in candidates:
        if key in index:
            owner, message = index[key]
            if owner is file or owner.package.path == file.package.path:
                return Message(name=message.name)
            return Message(name=message.name, package=owner.package)
    raise ManifestError(f"{context}: unknown message type {ref!r}")


def _as_list(value: Any, label: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"'{label}' must be a list")
    return value


def _require_str(data: Mapping[str, Any], key: str, context: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ManifestError(f"{context}: missing required string '{key}'")
    return value


__all__ = ["ManifestError", "build_files", "load_manifest"]
