"""Turns planned artifacts into Go source text using Jinja templates."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..logging import get_logger
from ..models import GeneratedFile, Message, PackageIdentity, PlannedArtifact
from ..planning.alias import DEFAULT_REGISTER_SUFFIX, deprecation_notice
from .format import GoSourceFormatter

_RUNTIME_IMPORT = "github.com/grpc-ecosystem/grpc-gateway/v2/runtime"
_BASE_IMPORTS = (
    "context",
    "net/http",
    _RUNTIME_IMPORT,
    "google.golang.org/grpc",
    "google.golang.org/grpc/grpclog",
)
_STATUS_IMPORTS = (
    "google.golang.org/grpc/codes",
    "google.golang.org/grpc/status",
)


@dataclass(frozen=True)
class ImportSpec:
    """One line of a Go import block."""

    path: str
    alias: Optional[str] = None

    @property
    def line(self) -> str:
        quoted = json.dumps(self.path)
        return f"{self.alias} {quoted}" if self.alias else quoted


def import_for(package: PackageIdentity) -> ImportSpec:
    """Import line for ``package``, naming it only when Go would not infer it."""
    reference = package.reference_name
    if reference != posixpath.basename(package.path):
        return ImportSpec(path=package.path, alias=reference)
    return ImportSpec(path=package.path)


def _go_quote(value: str) -> str:
    return json.dumps(value)


class TemplateRenderer:
    """Renders gateway and alias-shim artifacts."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        omit_package_doc: bool = False,
        register_suffix: str = DEFAULT_REGISTER_SUFFIX,
        formatter: GoSourceFormatter | None = None,
    ) -> None:
        self.templates_dir = templates_dir
        self.omit_package_doc = omit_package_doc
        self.register_suffix = register_suffix
        self.formatter = formatter or GoSourceFormatter()
        self._env = self._create_env(templates_dir)
        self.logger = get_logger("render")

    def render(self, artifact: PlannedArtifact) -> GeneratedFile:
        if artifact.is_alias_shim:
            content = self._render_alias(artifact)
        else:
            content = self._render_gateway(artifact)
        self.logger.debug("Rendered %s (%d bytes)", artifact.filename, len(content))
        return GeneratedFile(
            name=artifact.filename,
            content=self.formatter.format(content),
            package=artifact.package,
        )

    def _render_gateway(self, artifact: PlannedArtifact) -> str:
        base_reference: Optional[str] = None
        imports: Dict[str, ImportSpec] = {}
        methods = [method for service in artifact.services for method in service.bound_methods]
        needs_decode = any(
            binding.body
            for method in methods
            if not (method.client_streaming or method.server_streaming)
            for binding in method.bindings
        )
        needs_status = needs_decode or any(
            method.client_streaming or method.server_streaming for method in methods
        )
        paths = list(_BASE_IMPORTS)
        if needs_decode:
            paths.append("io")
        if needs_status:
            paths.extend(_STATUS_IMPORTS)
        for path in paths:
            imports[path] = ImportSpec(path=path)

        if artifact.is_relocated:
            base_reference = artifact.source_package.reference_name

        # Go rejects unused imports, so only packages of the request types the
        # handlers declare are imported. Streaming handlers declare none.
        for method in methods:
            if method.client_streaming or method.server_streaming:
                continue
            message = method.input_type
            if message.package is not None and message.package.path != artifact.package.path:
                spec = import_for(message.package)
                imports.setdefault(spec.path, spec)
            elif message.package is None and base_reference:
                spec = import_for(artifact.source_package)
                imports.setdefault(spec.path, spec)

        for path in artifact.companion_imports:
            imports.setdefault(path, ImportSpec(path=path))

        def go_type(message: Message) -> str:
            if message.package is not None and message.package.path != artifact.package.path:
                return f"{message.package.reference_name}.{message.name}"
            if message.package is None and base_reference:
                return f"{base_reference}.{message.name}"
            return message.name

        template = self._env.get_template("gateway.go.j2")
        return template.render(
            source=artifact.source_file.name,
            package=artifact.package,
            package_doc=None if self.omit_package_doc else self._package_doc(artifact.package),
            imports=_sorted_imports(imports.values()),
            services=artifact.services,
            suffix=self.register_suffix,
            go_type=go_type,
        )

    def _render_alias(self, artifact: PlannedArtifact) -> str:
        if artifact.relocated_to is None or artifact.shim_import is None:
            raise ValueError(f"alias shim {artifact.filename} has no relocation target")
        # The notice is emitted even when package docs are omitted; it is the
        # only migration signal consumers of the old path get.
        template = self._env.get_template("alias.go.j2")
        return template.render(
            source=artifact.source_file.name,
            package=artifact.package,
            package_doc=deprecation_notice(artifact.relocated_to),
            imports=[import_for(artifact.shim_import)],
            aliases=artifact.aliases,
        )

    @staticmethod
    def _package_doc(package: PackageIdentity) -> str:
        return (
            f"Package {package.name} is a reverse proxy.\n\n"
            "It translates gRPC into RESTful JSON APIs."
        )

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["go_quote"] = _go_quote
        return env


def _sorted_imports(specs: Iterable[ImportSpec]) -> List[ImportSpec]:
    """Standard library first, then everything else, each sorted by path."""
    specs = list(specs)
    stdlib = sorted((spec for spec in specs if "." not in spec.path.split("/")[0]), key=lambda s: s.path)
    others = sorted((spec for spec in specs if "." in spec.path.split("/")[0]), key=lambda s: s.path)
    return stdlib + others


__all__ = ["ImportSpec", "TemplateRenderer", "import_for"]
