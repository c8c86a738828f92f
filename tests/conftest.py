from __future__ import annotations

import pytest

from gatewaygen.descriptor.registry import Registry
from gatewaygen.models import Binding, File, Message, Method, PackageIdentity, Service

SPLIT_PACKAGE = PackageIdentity(
    path="example.com/mymodule/foo/bar/v1",
    name="v1gateway",
    alias="extalias",
)


def _example_file(
    package: PackageIdentity = SPLIT_PACKAGE,
    prefix: str = "foo/bar/v1/example",
    *,
    with_bindings: bool = True,
) -> File:
    message = Message(name="ExampleMessage")
    empty = Message(
        name="Empty",
        package=PackageIdentity(path="google.golang.org/protobuf/types/known/emptypb", name="emptypb"),
    )
    bound = Method(
        name="Example",
        input_type=message,
        output_type=message,
        bindings=[Binding(http_method="GET", path_template="/v1/example")] if with_bindings else [],
    )
    unbound = Method(name="ExampleWithoutBindings", input_type=empty, output_type=empty)
    return File(
        name="example.proto",
        package=package,
        generated_filename_prefix=prefix,
        proto_package="example",
        messages=[message],
        dependencies=["a.example/b/c.proto", "a.example/d/e.proto"],
        services=[Service(name="ExampleService", methods=[bound, unbound])],
    )


@pytest.fixture
def example_file():
    """Factory for a file with one service: one bound and one unbound method."""
    return _example_file


@pytest.fixture
def split_registry() -> Registry:
    """Registry with separate-package and standalone modes enabled."""
    registry = Registry()
    registry.set_separate_package(True)
    registry.set_standalone(True)
    return registry
