"""Core data models shared across gatewaygen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class PackageIdentity:
    """Import path and reference name of a generated Go package."""

    path: str
    name: str
    alias: Optional[str] = None

    @property
    def reference_name(self) -> str:
        """Identifier used to qualify symbols imported from this package.

        An explicit ``alias`` wins; otherwise the package name is the default
        qualifier, matching Go's implicit import naming.
        """
        return self.alias or self.name

    def with_alias(self, alias: Optional[str]) -> "PackageIdentity":
        return PackageIdentity(path=self.path, name=self.name, alias=alias)


@dataclass(frozen=True)
class Binding:
    """HTTP method and path template attached to one RPC method."""

    http_method: str
    path_template: str
    body: Optional[str] = None
    index: int = 0


@dataclass
class Message:
    """Message type referenced by methods; ``package`` is None for local types."""

    name: str
    package: Optional[PackageIdentity] = None


@dataclass
class Method:
    """RPC method with its HTTP bindings."""

    name: str
    input_type: Message
    output_type: Message
    bindings: List[Binding] = field(default_factory=list)
    client_streaming: bool = False
    server_streaming: bool = False

    @property
    def has_bindings(self) -> bool:
        return bool(self.bindings)


@dataclass
class Service:
    """RPC service plus the companion RPC-stub file it binds against."""

    name: str
    methods: List[Method] = field(default_factory=list)
    rpc_file: Optional["File"] = None
    force_prefixed_name: bool = False

    @property
    def bound_methods(self) -> List[Method]:
        return [method for method in self.methods if method.has_bindings]

    @property
    def companion(self) -> Optional[PackageIdentity]:
        return self.rpc_file.package if self.rpc_file is not None else None

    def _qualify(self, symbol: str) -> str:
        companion = self.companion
        if self.force_prefixed_name and companion is not None:
            return f"{companion.reference_name}.{symbol}"
        return symbol

    @property
    def client_type(self) -> str:
        return self._qualify(f"{self.name}Client")

    @property
    def server_type(self) -> str:
        return self._qualify(f"{self.name}Server")

    @property
    def client_constructor(self) -> str:
        return self._qualify(f"New{self.name}Client")


@dataclass
class File:
    """Descriptor-level unit of generation."""

    name: str
    package: PackageIdentity
    generated_filename_prefix: str
    proto_package: str = ""
    messages: List[Message] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)

    @property
    def has_bindings(self) -> bool:
        return any(service.bound_methods for service in self.services)


class PlanOutcome(str, Enum):
    """Output shape chosen for one input file."""

    EMPTY = "empty"
    SINGLE = "single"
    SPLIT = "split"


@dataclass(frozen=True)
class AliasDeclaration:
    """Re-export of one symbol: ``name = target``."""

    name: str
    target: str


@dataclass
class PlannedArtifact:
    """One output source file handed to the renderer."""

    filename: str
    package: PackageIdentity
    source_package: PackageIdentity
    source_file: File
    services: List[Service] = field(default_factory=list)
    companion_imports: List[str] = field(default_factory=list)
    is_alias_shim: bool = False
    relocated_to: Optional[PackageIdentity] = None
    shim_import: Optional[PackageIdentity] = None
    aliases: List[AliasDeclaration] = field(default_factory=list)

    @property
    def is_relocated(self) -> bool:
        """True for a primary artifact moved away from its declared package."""
        return not self.is_alias_shim and self.package.path != self.source_package.path


@dataclass
class FilePlan:
    """Planning result for one input file, primary artifact first."""

    file: File
    outcome: PlanOutcome
    artifacts: List[PlannedArtifact] = field(default_factory=list)


@dataclass
class GeneratedFile:
    """Rendered artifact ready to be written or returned to protoc."""

    name: str
    content: str
    package: PackageIdentity


__all__ = [
    "AliasDeclaration",
    "Binding",
    "File",
    "FilePlan",
    "GeneratedFile",
    "Message",
    "Method",
    "PackageIdentity",
    "PlanOutcome",
    "PlannedArtifact",
    "Service",
]
