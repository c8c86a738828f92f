"""Tests for gatewaygen.loader."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from gatewaygen.loader import ManifestError, build_files, load_manifest
from gatewaygen.models import PackageIdentity

MANIFEST = """
files:
  - name: common/types.proto
    package: common
    go_package: {path: example.com/mymodule/common, name: commonpb}
    messages: [Pet]
  - name: foo/bar/v1/example.proto
    package: example
    go_package: {path: example.com/mymodule/foo/bar/v1, name: v1gateway, alias: extalias}
    filename_prefix: foo/bar/v1/example
    dependencies: [common/types.proto]
    messages: [ExampleMessage]
    services:
      - name: ExampleService
        methods:
          - name: Example
            input: ExampleMessage
            output: common.Pet
            bindings:
              - {method: post, path: /v1/example, body: "*"}
          - name: ExampleWithoutBindings
            input:
              name: Empty
              go_package: {path: google.golang.org/protobuf/types/known/emptypb, name: emptypb}
            output: ExampleMessage
"""


def test_load_manifest_builds_linked_files(tmp_path: Path) -> None:
    manifest = tmp_path / "manifest.yml"
    manifest.write_text(textwrap.dedent(MANIFEST), encoding="utf-8")

    common, example = load_manifest(manifest)

    assert common.generated_filename_prefix == "common/types"
    assert common.services == []
    assert example.package == PackageIdentity(
        path="example.com/mymodule/foo/bar/v1", name="v1gateway", alias="extalias"
    )
    assert example.dependencies == ["common/types.proto"]

    (service,) = example.services
    bound, unbound = service.methods
    assert bound.input_type.package is None
    assert bound.output_type.package == common.package
    assert bound.bindings[0].http_method == "POST"
    assert bound.bindings[0].body == "*"
    assert unbound.has_bindings is False
    assert unbound.input_type.package.name == "emptypb"
    assert example.has_bindings is True


def test_unknown_message_type_is_rejected() -> None:
    data = {
        "files": [
            {
                "name": "a.proto",
                "go_package": {"path": "example.com/a", "name": "agateway"},
                "services": [
                    {"name": "S", "methods": [{"name": "M", "input": "Missing", "output": "Missing"}]}
                ],
            }
        ]
    }

    with pytest.raises(ManifestError, match="Missing"):
        build_files(data)


@pytest.mark.parametrize(
    "data",
    [
        {"files": "nope"},
        {"files": [{"name": "a.proto"}]},
        {"files": [{"name": "a.proto", "go_package": {"path": "example.com/a"}}]},
        {"files": [{"name": "a.proto", "go_package": {"path": "p", "name": "n"}, "services": {}}]},
    ],
)
def test_malformed_manifests_raise(data) -> None:
    with pytest.raises(ManifestError):
        build_files(data)


def test_unreadable_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        load_manifest(tmp_path / "missing.yml")
