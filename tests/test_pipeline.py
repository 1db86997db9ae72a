from codegen.graph import ComponentGenerator
from codegen.pipeline import ComponentPipeline
from codegen.states import BuildValidation, LoopStatus, PipelineRequest

from conftest import FakeGenerator, FakeJudge, make_evaluation


class FakeSpecGenerator:
    def __init__(self, spec):
        self.spec = spec
        self.calls = []

    def run(self, description, complexity="standard"):
        self.calls.append((description, complexity))
        return self.spec


class FakeBuildValidator:
    def __init__(self, result=None):
        self.result = result or BuildValidation(passed=True)
        self.validated = []

    def validate(self, output_dir):
        self.validated.append(output_dir)
        return self.result


def _pipeline(spec, output_root=None, build_validator=None, evaluations=None):
    return ComponentPipeline(
        spec_generator=FakeSpecGenerator(spec),
        component_generator=ComponentGenerator(
            generator=FakeGenerator(),
            judge=FakeJudge(evaluations or [make_evaluation(95)]),
            output_root=output_root,
        ),
        build_validator=build_validator,
    )


def test_end_to_end_report(spec, tmp_path):
    validator = FakeBuildValidator()
    pipeline = _pipeline(spec, tmp_path, validator)
    report = pipeline.run(PipelineRequest(description="a pricing card", complexity="simple"))

    assert pipeline.spec_generator.calls == [("a pricing card", "simple")]
    assert report.component_name == "PricingCard"
    assert report.kebab_name == "pricing-card"
    assert report.evaluation.status is LoopStatus.ACCEPTED
    assert report.build_validation.passed is True
    assert validator.validated == [report.output_dir]


def test_build_failures_are_advisory(spec, tmp_path):
    failing = BuildValidation(passed=False, error_count=1, errors=["src/x.tsx(1,1): error TS2304: nope"])
    report = _pipeline(spec, tmp_path, FakeBuildValidator(failing)).run(PipelineRequest(description="card"))
    assert report.build_validation.passed is False
    assert report.files


def test_build_validation_skipped_when_nothing_written(spec):
    validator = FakeBuildValidator()
    report = _pipeline(spec, None, validator).run(PipelineRequest(description="card"))
    assert report.build_validation is None
    assert validator.validated == []


def test_exhausted_loop_still_reports(spec):
    report = _pipeline(spec, evaluations=[make_evaluation(40)] * 3).run(PipelineRequest(description="card"))
    assert report.evaluation.status is LoopStatus.EXHAUSTED
    assert report.evaluation.score == 40


def test_request_overrides_reach_the_scaffold(spec):
    request = PipelineRequest(
        description="card",
        npm_dependencies={"dayjs": "^1.11.0"},
        group="Pricing",
    )
    report = _pipeline(spec).run(request)
    assert '"dayjs": "^1.11.0"' in report.files["package.json"]


def test_request_group_overrides_spec(spec):
    seen = []

    class SpyComponentGenerator:
        def run(self, component_spec):
            seen.append(component_spec)
            return _pipeline(component_spec).component_generator.run(component_spec)

    pipeline = ComponentPipeline(
        spec_generator=FakeSpecGenerator(spec),
        component_generator=SpyComponentGenerator(),
    )
    pipeline.run(PipelineRequest(description="card", group="Pricing", npm_dependencies={"dayjs": "^1.11.0"}))
    assert seen[0].group == "Pricing"
    assert seen[0].npm_dependencies == {"dayjs": "^1.11.0"}
    assert spec.group == "Marketing"
