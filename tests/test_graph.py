import json

import pytest

from codegen.config import LoopConfig
from codegen.evaluator import parse_evaluation
from codegen.generator import ArtifactKind
from codegen.graph import ComponentGenerator
from codegen.llm import GenerationError
from codegen.states import LoopStatus, ParseMode

from conftest import FakeGenerator, FakeJudge, make_evaluation

COMPONENT_TSX = "src/components/PricingCard/PricingCard.tsx"


def _controller(generator, judge, tmp_path=None, **loop):
    return ComponentGenerator(
        generator=generator,
        judge=judge,
        loop_config=LoopConfig(**loop),
        output_root=tmp_path,
    )


def _feedback_per_round(generator):
    return [feedback for kind, _, feedback in generator.calls if kind is ArtifactKind.REACT_COMPONENT]


def test_accepted_on_first_iteration(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(95)])
    result = _controller(generator, judge).run(spec)

    assert result.evaluation.status is LoopStatus.ACCEPTED
    assert result.evaluation.iterations == 1
    assert result.evaluation.score == 95
    assert result.evaluation.confidence == 0.95
    assert len(judge.calls) == 1
    assert generator.round_count() == 1
    assert result.output_dir is None


def test_score_at_threshold_is_accepted(spec):
    result = _controller(FakeGenerator(), FakeJudge([make_evaluation(90)])).run(spec)
    assert result.evaluation.status is LoopStatus.ACCEPTED


def test_failing_checks_never_reach_the_judge(spec):
    generator = FakeGenerator(react_rounds=[False, False, False])
    judge = FakeJudge([make_evaluation(100)])
    result = _controller(generator, judge).run(spec)

    assert judge.calls == []
    assert generator.round_count() == 3
    assert result.evaluation.status is LoopStatus.EXHAUSTED
    assert result.evaluation.iterations == 3
    assert result.evaluation.score == 0
    assert result.evaluation.confidence is None
    assert result.evaluation.deterministic_checks.default_export_present is False


def test_low_scores_exhaust_and_keep_last_artifacts(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(50, "Needs more states")] * 3)
    result = _controller(generator, judge).run(spec)

    assert result.evaluation.status is LoopStatus.EXHAUSTED
    assert result.evaluation.iterations == 3
    assert result.evaluation.score == 50
    assert len(judge.calls) == 3
    assert result.files[COMPONENT_TSX].startswith("// round 3")


def test_check_failures_feed_the_next_round(spec):
    generator = FakeGenerator(react_rounds=[False, True])
    judge = FakeJudge([make_evaluation(96)])
    result = _controller(generator, judge).run(spec)

    feedback = _feedback_per_round(generator)
    assert feedback[0] == ""
    assert feedback[1].startswith("The following deterministic checks FAILED")
    assert "export default function" in feedback[1]
    assert result.evaluation.status is LoopStatus.ACCEPTED
    assert result.evaluation.iterations == 2


def test_feedback_reaches_every_core_artifact(spec):
    generator = FakeGenerator(react_rounds=[False, True])
    _controller(generator, FakeJudge([make_evaluation(96)])).run(spec)
    second_round = [feedback for kind, _, feedback in generator.calls[3:6]]
    assert len(second_round) == 3
    assert all(f.startswith("The following deterministic checks FAILED") for f in second_round)


def test_judge_reasoning_becomes_feedback(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(60, "Add keyboard support"), make_evaluation(92)])
    _controller(generator, judge).run(spec)
    assert _feedback_per_round(generator) == ["", "Add keyboard support"]


def test_empty_reasoning_gets_synthesized_feedback(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(50), make_evaluation(92)])
    _controller(generator, judge).run(spec)
    assert _feedback_per_round(generator)[1] == "Score was 50/100. Needs improvement to reach 90."


def test_custom_threshold_and_iteration_limit(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(80)])
    result = _controller(generator, judge, max_iterations=1, min_score=75).run(spec)
    assert result.evaluation.status is LoopStatus.ACCEPTED

    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(80)])
    result = _controller(generator, judge, max_iterations=1, min_score=85).run(spec)
    assert result.evaluation.status is LoopStatus.EXHAUSTED
    assert generator.round_count() == 1


def test_fallback_evaluation_passes_by_default(spec):
    judge = FakeJudge([make_evaluation(0, "garbled", mode=ParseMode.FALLBACK)])
    result = _controller(FakeGenerator(), judge).run(spec)
    assert result.evaluation.status is LoopStatus.ACCEPTED
    assert result.evaluation.score == 90
    assert result.evaluation.confidence == 0.1


def test_fallback_evaluation_can_be_refused(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(0, "garbled", mode=ParseMode.FALLBACK), make_evaluation(93)])
    result = _controller(generator, judge, accept_fallback_evaluation=False).run(spec)

    assert _feedback_per_round(generator) == ["", "garbled"]
    assert result.evaluation.status is LoopStatus.ACCEPTED
    assert result.evaluation.iterations == 2


def test_low_score_with_incomplete_criteria_is_not_accepted(spec):
    partial = parse_evaluation(json.dumps({
        "score": 35,
        "reasoning": "Props are not wired to the markup",
        "criteria": {"propWiring": {"score": 10, "notes": "title is ignored"}},
    }))
    generator = FakeGenerator()
    judge = FakeJudge([partial, make_evaluation(94)])
    result = _controller(generator, judge).run(spec)

    assert _feedback_per_round(generator) == ["", "Props are not wired to the markup"]
    assert result.evaluation.status is LoopStatus.ACCEPTED
    assert result.evaluation.iterations == 2

    generator = FakeGenerator()
    result = _controller(generator, FakeJudge([partial])).run(spec)
    assert result.evaluation.status is LoopStatus.EXHAUSTED
    assert result.evaluation.score == 35
    assert result.evaluation.confidence == 0.1


def test_generation_error_aborts_the_run(spec):
    generator = FakeGenerator(fail_on=ArtifactKind.STYLESHEET)
    judge = FakeJudge([make_evaluation(95)])
    with pytest.raises(GenerationError):
        _controller(generator, judge).run(spec)
    assert judge.calls == []


def test_auxiliary_artifacts_generated_once_after_loop(spec):
    generator = FakeGenerator()
    judge = FakeJudge([make_evaluation(40)] * 3)
    result = _controller(generator, judge).run(spec)

    aux = [kind for kind, _, _ in generator.calls if kind in (
        ArtifactKind.MAIN_TSX, ArtifactKind.README, ArtifactKind.SIMPLE_DECLARATION)]
    assert aux == [ArtifactKind.MAIN_TSX, ArtifactKind.README, ArtifactKind.SIMPLE_DECLARATION]
    assert result.files["README.md"] == "readme for PricingCard"
    assert result.files["src/main.tsx"] == "main_tsx for PricingCard"


def test_files_are_written_under_kebab_directory(spec, tmp_path):
    result = _controller(FakeGenerator(), FakeJudge([make_evaluation(95)]), tmp_path).run(spec)

    root = tmp_path / "pricing-card"
    assert result.output_dir == str(root.resolve())
    assert (root / COMPONENT_TSX).read_text(encoding="utf-8").startswith("// round 1")
    assert (root / "src/components/PricingCard/PricingCardSimple.webflow.tsx").exists()
    package = json.loads((root / "package.json").read_text(encoding="utf-8"))
    assert package["name"] == "pricing-card"
    assert sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()) == sorted(result.files)


def test_independent_runs_share_no_state(spec):
    controller = _controller(FakeGenerator(), FakeJudge([make_evaluation(95)]))
    first = controller.run(spec)
    second = controller.run(spec)
    assert first.evaluation.iterations == 1
    assert second.evaluation.iterations == 1
