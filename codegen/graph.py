"""
graph.py — Guided Component Forge
==================================
LangGraph iteration controller for one Webflow code component:

  generator  →  checker  →  judge (only when checks pass)  →  finalizer  →  assembler
                         →  corrector (retry)  →  generator
                         →  finalizer (iterations exhausted)

Each generator pass regenerates all three core files from scratch
(component → stylesheet → declaration). Not reaching the quality gate is
never an error: once the iteration limit is reached the last artifacts are
used as a best-effort result. A GenerationError aborts the run.

Exported: ComponentGenerator, build_component_graph
"""

import pathlib

from langgraph.graph import END, StateGraph

from codegen import config
from codegen.assembler import assemble_files, build_scaffold_files, generate_auxiliary_artifacts, write_files
from codegen.checks import build_deterministic_feedback, run_deterministic_checks
from codegen.config import LoopConfig
from codegen.evaluator import QualityJudge
from codegen.generator import ArtifactGenerator, ArtifactKind
from codegen.llm import GenerationError
from codegen.states import (
    ArtifactSet,
    ComponentResult,
    ComponentRun,
    ComponentSpec,
    EvaluationSummary,
    IterationRecord,
    LoopStatus,
    ParseMode,
)


def _judge_feedback(score: float, reasoning: str, min_score: float) -> str:
    return reasoning or f"Score was {score:g}/100. Needs improvement to reach {min_score:g}."


def build_component_graph(
    generator: ArtifactGenerator,
    judge: QualityJudge,
    output_root: pathlib.Path | str | None = None,
):
    """
    Compiles the controller graph around the given collaborators.
    When output_root is None the assembled files are returned but not written.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Node: generator
    # ─────────────────────────────────────────────────────────────────────────

    def generator_node(state: dict) -> dict:
        """Regenerates component → stylesheet → declaration with the latest feedback."""
        run: ComponentRun = state["request"]
        spec = run.spec
        run.iteration += 1
        run.status = LoopStatus.GENERATING
        print(f"\n[generator] Iteration {run.iteration}/{run.config.max_iterations} for {spec.name}")

        siblings: dict[ArtifactKind, str] = {}
        try:
            for kind in (ArtifactKind.REACT_COMPONENT, ArtifactKind.STYLESHEET, ArtifactKind.DECLARATION):
                print(f"[generator] Calling LLM for {kind.value}...")
                siblings[kind] = generator.generate(kind, spec, siblings, run.feedback)
        except GenerationError:
            run.status = LoopStatus.FAILED
            raise

        run.current = IterationRecord(
            index=run.iteration,
            artifacts=ArtifactSet(
                react_component=siblings[ArtifactKind.REACT_COMPONENT],
                stylesheet=siblings[ArtifactKind.STYLESHEET],
                declaration=siblings[ArtifactKind.DECLARATION],
            ),
        )
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Node: checker
    # ─────────────────────────────────────────────────────────────────────────

    def checker_node(state: dict) -> dict:
        """Tier 1 — deterministic checks (instant, free)."""
        run: ComponentRun = state["request"]
        run.status = LoopStatus.CHECKING
        record = run.current

        record.check = run_deterministic_checks(run.spec.name, record.artifacts)
        if record.check.all_passed:
            print("[checker] ✅ All deterministic checks passed")
        else:
            record.feedback = build_deterministic_feedback(record.check)
            print(f"[checker] ❌ FAILED ({len(record.check.failures)} issue(s))")
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Node: judge
    # ─────────────────────────────────────────────────────────────────────────

    def judge_node(state: dict) -> dict:
        """Tier 2 — LLM rubric judge. Only reached when tier 1 is clean."""
        run: ComponentRun = state["request"]
        run.status = LoopStatus.JUDGING
        record = run.current

        try:
            evaluation = judge.evaluate(run.spec, record.artifacts)
        except GenerationError:
            run.status = LoopStatus.FAILED
            raise

        record.evaluation = evaluation
        run.last_evaluation = evaluation
        if evaluation.parse_mode is ParseMode.FALLBACK and not run.config.accept_fallback_evaluation:
            record.feedback = evaluation.reasoning
        elif evaluation.score < run.config.min_score:
            record.feedback = _judge_feedback(evaluation.score, evaluation.reasoning, run.config.min_score)
        print(f"[judge] Score {evaluation.score:g}/100 (confidence {evaluation.confidence:.2f})")
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Node: corrector
    # ─────────────────────────────────────────────────────────────────────────

    def corrector_node(state: dict) -> dict:
        """Hands the current iteration's feedback to the next generator pass."""
        run: ComponentRun = state["request"]
        run.feedback = run.current.feedback
        print(
            f"[corrector] Sending feedback back to generator "
            f"(next attempt {run.iteration + 1}/{run.config.max_iterations})"
        )
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Node: finalizer
    # ─────────────────────────────────────────────────────────────────────────

    def finalizer_node(state: dict) -> dict:
        """Marks the loop Accepted or Exhausted. Exhausted keeps the last artifacts."""
        run: ComponentRun = state["request"]
        if _accepted(run):
            run.status = LoopStatus.ACCEPTED
            print(f"[finalizer] ✅ Accepted after {run.iteration} iteration(s)")
        else:
            run.status = LoopStatus.EXHAUSTED
            print(
                f"[finalizer] ⚠️  Quality gate not met after {run.iteration} iteration(s) "
                "— using best-effort result"
            )
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Node: assembler
    # ─────────────────────────────────────────────────────────────────────────

    def assembler_node(state: dict) -> dict:
        """Generates auxiliary files once, merges the file map and writes it."""
        run: ComponentRun = state["request"]
        spec = run.spec
        artifacts = run.current.artifacts

        aux = generate_auxiliary_artifacts(generator, spec, artifacts)
        files = assemble_files(spec, build_scaffold_files(spec), artifacts, aux)

        output_dir = None
        if output_root is not None:
            written_dir, _ = write_files(output_root, spec.kebab_name, files)
            output_dir = str(written_dir)

        evaluation = run.last_evaluation
        run.result = ComponentResult(
            component_name=spec.name,
            kebab_name=spec.kebab_name,
            files=files,
            evaluation=EvaluationSummary(
                score=evaluation.score if evaluation else 0,
                iterations=run.iteration,
                deterministic_checks=run.current.check.checks,
                status=run.status,
                confidence=evaluation.confidence if evaluation else None,
            ),
            output_dir=output_dir,
        )
        return {"request": run}

    # ─────────────────────────────────────────────────────────────────────────
    # Conditional edges
    # ─────────────────────────────────────────────────────────────────────────

    def after_check(state: dict) -> str:
        """
        Returns:
            "judge"    — deterministic checks passed
            "correct"  — checks failed and iterations remain
            "finalize" — checks failed on the last iteration
        """
        run: ComponentRun = state["request"]
        if run.current.check.all_passed:
            return "judge"
        return _retry_or_finalize(run)

    def after_judge(state: dict) -> str:
        run: ComponentRun = state["request"]
        if _accepted(run):
            print("[router] ✅ Quality gate passed — finalizing.")
            return "finalize"
        return _retry_or_finalize(run)

    graph = StateGraph(dict)

    graph.add_node("generator", generator_node)
    graph.add_node("checker", checker_node)
    graph.add_node("judge", judge_node)
    graph.add_node("corrector", corrector_node)
    graph.add_node("finalizer", finalizer_node)
    graph.add_node("assembler", assembler_node)

    graph.set_entry_point("generator")

    graph.add_edge("generator", "checker")
    graph.add_conditional_edges(
        "checker",
        after_check,
        {"judge": "judge", "correct": "corrector", "finalize": "finalizer"},
    )
    graph.add_conditional_edges(
        "judge",
        after_judge,
        {"correct": "corrector", "finalize": "finalizer"},
    )
    graph.add_edge("corrector", "generator")
    graph.add_edge("finalizer", "assembler")
    graph.add_edge("assembler", END)

    return graph.compile()


def _accepted(run: ComponentRun) -> bool:
    record = run.current
    if record is None or record.check is None or not record.check.all_passed:
        return False
    evaluation = record.evaluation
    if evaluation is None:
        return False
    if evaluation.parse_mode is ParseMode.FALLBACK and not run.config.accept_fallback_evaluation:
        return False
    return evaluation.score >= run.config.min_score


def _retry_or_finalize(run: ComponentRun) -> str:
    if run.iteration >= run.config.max_iterations:
        print(f"[router] ⚠️  Max iterations ({run.config.max_iterations}) reached.")
        return "finalize"
    print(f"[router] 🔄 Retry {run.iteration}/{run.config.max_iterations}.")
    return "correct"


class ComponentGenerator:
    """
    Runs the controller graph for one ComponentSpec.

    Independent instances (or independent run() calls) share no mutable
    state, so different components may be generated concurrently.
    """

    def __init__(
        self,
        generator: ArtifactGenerator | None = None,
        judge: QualityJudge | None = None,
        loop_config: LoopConfig | None = None,
        output_root: pathlib.Path | str | None = config.OUTPUT_ROOT,
    ) -> None:
        self.generator = generator or ArtifactGenerator()
        self.judge = judge or QualityJudge()
        self.loop_config = loop_config or LoopConfig()
        self.graph = build_component_graph(self.generator, self.judge, output_root)

    def recursion_limit(self) -> int:
        # generator, checker, judge, corrector per iteration + finalizer, assembler
        return self.loop_config.max_iterations * 4 + 4

    def run(self, spec: ComponentSpec) -> ComponentResult:
        run = ComponentRun(spec=spec, config=self.loop_config)
        try:
            state = self.graph.invoke(
                {"request": run},
                {"recursion_limit": self.recursion_limit()},
            )
        except GenerationError as exc:
            print(f"[controller] ❌ Run aborted: {exc}")
            raise
        return state["request"].result
