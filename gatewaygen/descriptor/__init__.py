"""Descriptor-level state: the run registry and package identity rules."""

from .packages import (
    InvalidPackageIdentityError,
    is_gateway_package,
    relocate_package,
    resolve_companion_package,
)
from .registry import Registry

__all__ = [
    "InvalidPackageIdentityError",
    "Registry",
    "is_gateway_package",
    "relocate_package",
    "resolve_companion_package",
]
