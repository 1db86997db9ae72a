"""
pipeline.py — Guided Component Forge
=====================================
End-to-end pipeline:

  description  →  spec generator  →  component generator  →  build validator  →  report

Exported: ComponentPipeline
"""

from codegen.build_validator import BuildValidator
from codegen.graph import ComponentGenerator
from codegen.spec_generator import SpecGenerator
from codegen.states import ComponentSpec, PipelineReport, PipelineRequest


class ComponentPipeline:
    """
    Args:
        spec_generator:      Description → ComponentSpec step.
        component_generator: Controller graph wrapper (writes the files).
        build_validator:     npm install + tsc; None skips build validation.
    """

    def __init__(
        self,
        spec_generator: SpecGenerator | None = None,
        component_generator: ComponentGenerator | None = None,
        build_validator: BuildValidator | None = None,
    ) -> None:
        self.spec_generator = spec_generator or SpecGenerator()
        self.component_generator = component_generator or ComponentGenerator()
        self.build_validator = build_validator

    def run(self, request: PipelineRequest) -> PipelineReport:
        print(f"\n[pipeline] Designing spec ({request.complexity})...")
        spec = self.spec_generator.run(request.description, request.complexity)

        overrides = {}
        if request.npm_dependencies:
            overrides["npm_dependencies"] = {**spec.npm_dependencies, **request.npm_dependencies}
        if request.group:
            overrides["group"] = request.group
        if overrides:
            spec = spec.model_copy(update=overrides)
        return self.run_spec(spec)

    def run_spec(self, spec: ComponentSpec) -> PipelineReport:
        print(f"[pipeline] Generating {spec.name} ({spec.kebab_name})...")
        component = self.component_generator.run(spec)

        build = None
        if self.build_validator is not None and component.output_dir:
            build = self.build_validator.validate(component.output_dir)
        elif self.build_validator is not None:
            print("[pipeline] ⚠️  Files were not written — skipping build validation")

        return PipelineReport(
            component_name=component.component_name,
            kebab_name=component.kebab_name,
            files=component.files,
            evaluation=component.evaluation,
            build_validation=build,
            output_dir=component.output_dir,
        )
