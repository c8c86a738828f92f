"""Alias shims that keep a relocated gateway package importable."""

from __future__ import annotations

from typing import List

from ..models import AliasDeclaration, PackageIdentity, PlannedArtifact, Service

DEFAULT_REGISTER_SUFFIX = "Handler"
DEFAULT_SHIM_IMPORT_ALIAS = "aliased"

_DEPRECATION_FMT = 'Deprecated: This package has moved to "{path}". Use that import path instead.'


def deprecation_notice(relocated: PackageIdentity) -> str:
    return _DEPRECATION_FMT.format(path=relocated.path)


class AliasShimEmitter:
    """Builds the re-export artifact left at a package's legacy location."""

    def __init__(
        self,
        *,
        register_suffix: str = DEFAULT_REGISTER_SUFFIX,
        import_alias: str | None = DEFAULT_SHIM_IMPORT_ALIAS,
    ) -> None:
        self.register_suffix = register_suffix
        self.import_alias = import_alias

    def symbols_for(self, service: Service) -> List[str]:
        """Registration entry points generated for ``service``, in render order."""
        base = f"Register{service.name}{self.register_suffix}"
        return [f"{base}Server", f"{base}Client", f"{base}FromEndpoint", base]

    def shim_import(self, primary: PlannedArtifact) -> PackageIdentity:
        """Identity under which the shim imports the relocated package."""
        return primary.package.with_alias(self.import_alias)

    def emit(self, primary: PlannedArtifact) -> PlannedArtifact:
        """Return the alias artifact re-exporting every symbol of ``primary``."""
        if primary.is_alias_shim:
            raise ValueError("cannot emit an alias shim for another alias shim")

        target = self.shim_import(primary)
        qualifier = target.reference_name
        aliases: List[AliasDeclaration] = []
        for service in primary.services:
            for symbol in self.symbols_for(service):
                aliases.append(AliasDeclaration(name=symbol, target=f"{qualifier}.{symbol}"))

        source_file = primary.source_file
        return PlannedArtifact(
            filename=f"{source_file.generated_filename_prefix}.pb.gw.go",
            package=primary.source_package,
            source_package=primary.source_package,
            source_file=source_file,
            services=list(primary.services),
            is_alias_shim=True,
            relocated_to=primary.package,
            shim_import=target,
            aliases=aliases,
        )


__all__ = [
    "AliasShimEmitter",
    "DEFAULT_REGISTER_SUFFIX",
    "DEFAULT_SHIM_IMPORT_ALIAS",
    "deprecation_notice",
]
