"""Tests for gatewaygen.planning.planner."""

from __future__ import annotations

import pytest

from gatewaygen.descriptor.packages import InvalidPackageIdentityError
from gatewaygen.descriptor.registry import Registry
from gatewaygen.models import File, PackageIdentity, PlanOutcome
from gatewaygen.planning.planner import ArtifactPlanner


def test_single_artifact_by_default(example_file) -> None:
    file = example_file(PackageIdentity(path="example.com/path/to/example", name="example_pb"), "path/to/example")

    plan = ArtifactPlanner(Registry()).plan(file)

    assert plan.outcome is PlanOutcome.SINGLE
    assert len(plan.artifacts) == 1
    artifact = plan.artifacts[0]
    assert artifact.filename == "path/to/example.pb.gw.go"
    assert artifact.package == file.package
    assert artifact.is_alias_shim is False
    assert artifact.aliases == []
    assert artifact.companion_imports == []
    assert [service.name for service in artifact.services] == ["ExampleService"]


def test_split_produces_primary_then_alias(example_file, split_registry) -> None:
    file = example_file()

    plan = ArtifactPlanner(split_registry).plan(file)

    assert plan.outcome is PlanOutcome.SPLIT
    primary, shim = plan.artifacts
    assert primary.filename == "foo/bar/v1/v1gateway/example.pb.gw.go"
    assert primary.package.path == "example.com/mymodule/foo/bar/v1/v1gateway"
    assert primary.package.name == "v1gateway"
    assert primary.is_relocated is True
    assert primary.companion_imports == ["example.com/mymodule/foo/bar/v1/v1grpc"]

    assert shim.is_alias_shim is True
    assert shim.filename == "foo/bar/v1/example.pb.gw.go"
    assert shim.package == file.package
    assert shim.relocated_to == primary.package
    assert [alias.name for alias in shim.aliases] == [
        "RegisterExampleServiceHandlerServer",
        "RegisterExampleServiceHandlerClient",
        "RegisterExampleServiceHandlerFromEndpoint",
        "RegisterExampleServiceHandler",
    ]


def test_split_links_companion_without_mutating_input(example_file, split_registry) -> None:
    file = example_file()

    plan = ArtifactPlanner(split_registry).plan(file)

    service = plan.artifacts[0].services[0]
    assert service.companion == PackageIdentity(path="example.com/mymodule/foo/bar/v1/v1grpc", name="v1grpc")
    assert service.force_prefixed_name is True
    assert service.client_type == "v1grpc.ExampleServiceClient"
    assert file.services[0].rpc_file is None
    assert file.services[0].force_prefixed_name is False


def test_companion_recorded_under_file_package(example_file, split_registry) -> None:
    file = example_file()

    ArtifactPlanner(split_registry).plan(file)

    assert split_registry.companion_imports_for(file.package) == ["example.com/mymodule/foo/bar/v1/v1grpc"]


@pytest.mark.parametrize(
    ("separate_package", "standalone"),
    [(False, False), (True, False), (False, True)],
)
def test_split_requires_both_flags(example_file, separate_package: bool, standalone: bool) -> None:
    registry = Registry()
    registry.set_separate_package(separate_package)
    registry.set_standalone(standalone)

    plan = ArtifactPlanner(registry).plan(example_file())

    assert plan.outcome is PlanOutcome.SINGLE
    assert len(plan.artifacts) == 1
    assert not any(artifact.aliases for artifact in plan.artifacts)


def test_separate_package_without_standalone_keeps_companion_imports(example_file) -> None:
    registry = Registry()
    registry.set_separate_package(True)

    plan = ArtifactPlanner(registry).plan(example_file())

    (artifact,) = plan.artifacts
    assert artifact.filename == "foo/bar/v1/example.pb.gw.go"
    assert artifact.companion_imports == ["example.com/mymodule/foo/bar/v1/v1grpc"]


def test_file_without_bindings_is_empty_and_records_nothing(example_file, split_registry) -> None:
    file = example_file(with_bindings=False)
    assert file.has_bindings is False

    plan = ArtifactPlanner(split_registry).plan(file)

    assert plan.outcome is PlanOutcome.EMPTY
    assert plan.artifacts == []
    assert split_registry.companion_imports_for(file.package) == []


def test_file_without_services_is_empty(split_registry) -> None:
    file = File(
        name="example.proto",
        package=PackageIdentity(path="foo/bar/baz/gen/v1", name="v1"),
        generated_filename_prefix="gen/v1/example",
        proto_package="example",
    )

    plan = ArtifactPlanner(split_registry).plan(file)

    assert plan.outcome is PlanOutcome.EMPTY
    assert plan.artifacts == []


def test_planning_is_idempotent(example_file, split_registry) -> None:
    file = example_file()
    planner = ArtifactPlanner(split_registry)

    first = planner.plan(file)
    second = planner.plan(file)

    assert first == second


def test_invalid_package_records_nothing(example_file, split_registry) -> None:
    file = example_file(PackageIdentity(path="example.com/path/to/example", name="example_pb"), "path/to/example")

    with pytest.raises(InvalidPackageIdentityError):
        ArtifactPlanner(split_registry).plan(file)

    assert split_registry.companion_imports_for(file.package) == []


def test_unbound_services_are_not_planned(example_file, split_registry) -> None:
    file = example_file()
    unbound = example_file(with_bindings=False).services[0]
    unbound.name = "IdleService"
    file.services.append(unbound)

    plan = ArtifactPlanner(split_registry).plan(file)

    assert [service.name for service in plan.artifacts[0].services] == ["ExampleService"]
    assert len(plan.artifacts[1].aliases) == 4
    assert split_registry.companion_imports_for(file.package) == ["example.com/mymodule/foo/bar/v1/v1grpc"]
