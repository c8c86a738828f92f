"""Decides how many gateway artifacts a file produces and where they live."""

from __future__ import annotations

import posixpath
from dataclasses import replace
from typing import Dict, List

from ..descriptor.packages import relocate_package, resolve_companion_package
from ..descriptor.registry import Registry
from ..logging import get_logger
from ..models import File, FilePlan, PackageIdentity, PlannedArtifact, PlanOutcome, Service
from .alias import AliasShimEmitter

GATEWAY_SUFFIX = ".pb.gw.go"


def _unique(items: List[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


class ArtifactPlanner:
    """Plans the output artifacts for one input file at a time.

    The planner keeps no state of its own; everything it records goes into the
    registry it was given.
    """

    def __init__(self, registry: Registry, alias_emitter: AliasShimEmitter | None = None) -> None:
        self.registry = registry
        self.alias_emitter = alias_emitter or AliasShimEmitter()
        self.logger = get_logger("planner")

    @property
    def split_enabled(self) -> bool:
        return self.registry.separate_package and self.registry.standalone

    def plan(self, file: File) -> FilePlan:
        """Return the plan for ``file`` without mutating it.

        Raises ``InvalidPackageIdentityError`` when a companion package cannot
        be derived; nothing is recorded for the file in that case.
        """
        services = self._link_companions(file) if file.has_bindings else []
        if not services:
            self.logger.debug("No HTTP bindings in %s; nothing to generate", file.name)
            return FilePlan(file=file, outcome=PlanOutcome.EMPTY)

        for service in services:
            companion = service.companion
            if companion is not None:
                self.registry.record_companion_import(file.package, companion.path)

        if not self.split_enabled:
            if self.registry.separate_package != self.registry.standalone:
                self.logger.debug(
                    "separate_package=%s standalone=%s: generating %s in place",
                    self.registry.separate_package,
                    self.registry.standalone,
                    file.name,
                )
            artifact = PlannedArtifact(
                filename=f"{file.generated_filename_prefix}{GATEWAY_SUFFIX}",
                package=file.package,
                source_package=file.package,
                source_file=file,
                services=services,
                companion_imports=self._companion_imports(file.package),
            )
            return FilePlan(file=file, outcome=PlanOutcome.SINGLE, artifacts=[artifact])

        primary = PlannedArtifact(
            filename=self._relocated_filename(file),
            package=relocate_package(file.package),
            source_package=file.package,
            source_file=file,
            services=services,
            companion_imports=self._companion_imports(file.package),
        )
        shim = self.alias_emitter.emit(primary)
        self.logger.debug(
            "Split %s into %s and alias shim %s", file.name, primary.filename, shim.filename
        )
        return FilePlan(file=file, outcome=PlanOutcome.SPLIT, artifacts=[primary, shim])

    def _link_companions(self, file: File) -> List[Service]:
        """Copy the services that have bindings, attaching companion stub files.

        Every companion is resolved before any is recorded so a failure leaves
        the registry untouched.
        """
        linked: List[Service] = []
        for service in file.services:
            if not service.bound_methods:
                continue
            if not self.registry.separate_package:
                linked.append(replace(service))
                continue
            companion = resolve_companion_package(file.package)
            linked.append(
                replace(
                    service,
                    rpc_file=self._companion_file(file, companion),
                    force_prefixed_name=True,
                )
            )
        return linked

    @staticmethod
    def _companion_file(file: File, companion: PackageIdentity) -> File:
        return File(
            name=file.name,
            package=companion,
            generated_filename_prefix=file.generated_filename_prefix,
            proto_package=file.proto_package,
        )

    def _companion_imports(self, package: PackageIdentity) -> List[str]:
        return _unique(self.registry.companion_imports_for(package))

    @staticmethod
    def _relocated_filename(file: File) -> str:
        directory, base = posixpath.split(file.generated_filename_prefix)
        return posixpath.join(directory, file.package.name, base) + GATEWAY_SUFFIX


__all__ = ["ArtifactPlanner", "GATEWAY_SUFFIX"]
