"""Derives the companion RPC-stub package of a gateway package."""

from __future__ import annotations

import posixpath
from typing import List, Sequence, Tuple

from ..models import PackageIdentity

GATEWAY_MARKER = "gateway"
GRPC_MARKER = "grpc"

# Upstream tooling sometimes lays gateway packages out under the base message
# type tree; the RPC stubs live under the grpc tree instead.
BASE_TYPE_SUBPATH: Tuple[str, ...] = ("protocolbuffers", "go")
GRPC_SUBPATH: Tuple[str, ...] = ("grpc", "go")


class InvalidPackageIdentityError(ValueError):
    """Raised when a companion is requested for a non-gateway package."""

    def __init__(self, package: PackageIdentity) -> None:
        super().__init__(
            f"package {package.name!r} ({package.path}) does not end with "
            f"the {GATEWAY_MARKER!r} marker"
        )
        self.package = package


def is_gateway_package(package: PackageIdentity) -> bool:
    return package.name.endswith(GATEWAY_MARKER)


def replace_first_segments(
    value: str,
    match: Sequence[str] = BASE_TYPE_SUBPATH,
    replacement: Sequence[str] = GRPC_SUBPATH,
) -> str:
    """Replace the first run of whole ``/`` segments equal to ``match``.

    Partial segments never match, so ``myprotocolbuffers/go`` is left alone.
    """
    segments: List[str] = value.split("/")
    width = len(match)
    for start in range(len(segments) - width + 1):
        if tuple(segments[start : start + width]) == tuple(match):
            segments[start : start + width] = list(replacement)
            return "/".join(segments)
    return value


def resolve_companion_package(package: PackageIdentity) -> PackageIdentity:
    """Return the RPC-stub package that pairs with gateway ``package``.

    ``example.com/pet/v1`` + ``v1petgateway`` resolves to
    ``example.com/pet/v1/v1petgrpc`` + ``v1petgrpc``.
    """
    if not is_gateway_package(package):
        raise InvalidPackageIdentityError(package)

    name = package.name[: -len(GATEWAY_MARKER)] + GRPC_MARKER
    path = posixpath.normpath(posixpath.join(package.path, name)) if package.path else name
    return PackageIdentity(
        path=replace_first_segments(path),
        name=replace_first_segments(name),
    )


def relocate_package(package: PackageIdentity) -> PackageIdentity:
    """Move ``package`` beneath a directory named after the package itself.

    The alias is dropped: it names the original package when imported from
    the relocated one.
    """
    return PackageIdentity(
        path=posixpath.normpath(posixpath.join(package.path, package.name)),
        name=package.name,
    )


__all__ = [
    "BASE_TYPE_SUBPATH",
    "GATEWAY_MARKER",
    "GRPC_MARKER",
    "GRPC_SUBPATH",
    "InvalidPackageIdentityError",
    "is_gateway_package",
    "relocate_package",
    "replace_first_segments",
    "resolve_companion_package",
]
