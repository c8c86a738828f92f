"""Generation pipeline: plan every file, then render every planned artifact."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import GeneratorConfig
from .descriptor.packages import InvalidPackageIdentityError
from .descriptor.registry import Registry
from .logging import get_logger
from .models import File, FilePlan, GeneratedFile, PlannedArtifact
from .planning.alias import AliasShimEmitter
from .planning.planner import ArtifactPlanner
from .render.renderer import TemplateRenderer


@dataclass
class GenerationResult:
    """Rendered files plus the files that were skipped with ``keep_going``."""

    files: List[GeneratedFile] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)


class Generator:
    """Coordinates the registry, planner and renderer for one run."""

    def __init__(
        self,
        registry: Registry | None = None,
        *,
        config: GeneratorConfig | None = None,
        planner: ArtifactPlanner | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        if registry is None:
            registry = self.config.apply(Registry())
        self.registry = registry
        self.planner = planner or ArtifactPlanner(
            registry,
            AliasShimEmitter(
                register_suffix=self.config.register_func_suffix,
                import_alias=self.config.shim_import_alias,
            ),
        )
        templates_dir = Path(self.config.templates_dir) if self.config.templates_dir else None
        self.renderer = renderer or TemplateRenderer(
            templates_dir,
            omit_package_doc=registry.omit_package_doc,
            register_suffix=self.config.register_func_suffix,
        )
        self.logger = get_logger("generator")

    def plan(self, targets: Iterable[File], *, keep_going: bool = False) -> List[FilePlan]:
        """Plan every target. Companion imports are complete once this returns."""
        plans: List[FilePlan] = []
        for file in targets:
            try:
                plans.append(self.planner.plan(file))
            except InvalidPackageIdentityError as exc:
                self.logger.error("Cannot plan %s: %s", file.name, exc)
                if not keep_going:
                    raise
        return plans

    def generate(self, targets: Sequence[File], *, keep_going: bool = False) -> List[GeneratedFile]:
        return self.run(targets, keep_going=keep_going).files

    def run(self, targets: Sequence[File], *, keep_going: bool = False) -> GenerationResult:
        self.logger.info("Generating gateways for %d file(s)", len(targets))
        result = GenerationResult()
        plans: List[FilePlan] = []
        for file in targets:
            try:
                plans.extend(self.plan([file]))
            except InvalidPackageIdentityError:
                if not keep_going:
                    raise
                result.failures.append(file.name)

        # Another file sharing the package may have recorded more companions
        # after this one was planned.
        for plan in plans:
            for artifact in plan.artifacts:
                result.files.append(self.renderer.render(self._refresh_imports(artifact)))

        self.logger.info(
            "Generated %d artifact(s) from %d file(s)", len(result.files), len(plans)
        )
        return result

    def _refresh_imports(self, artifact: PlannedArtifact) -> PlannedArtifact:
        if artifact.is_alias_shim:
            return artifact
        imports = list(dict.fromkeys(self.registry.companion_imports_for(artifact.source_package)))
        if imports == artifact.companion_imports:
            return artifact
        return replace(artifact, companion_imports=imports)


def write_files(files: Iterable[GeneratedFile], output_dir: Path) -> List[Path]:
    """Write generated files beneath ``output_dir``, creating directories."""
    written: List[Path] = []
    for generated in files:
        target = output_dir / generated.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        written.append(target)
    return written


__all__ = ["GenerationResult", "Generator", "write_files"]
