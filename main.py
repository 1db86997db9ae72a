"""
main.py — Guided Component Forge
=================================
Interactive CLI entry point for the Webflow code component pipeline.

Usage:
    python main.py

Session commands:
    <description>        Generate a component from a plain English description
    complexity <level>   Switch the complexity hint (simple | standard | complex)
    exit                 Quit the program
"""

import traceback

from codegen import config
from codegen.build_validator import BuildValidator
from codegen.pipeline import ComponentPipeline
from codegen.states import PipelineReport, PipelineRequest

COMPLEXITY_LEVELS = ("simple", "standard", "complex")


# ─────────────────────────────────────────────────────────────────────────────
# Display helpers
# ─────────────────────────────────────────────────────────────────────────────

def display_result(report: PipelineReport) -> None:
    """
    Prints a concise summary: component name, quality score and loop status,
    deterministic checks that are still failing, build validation and the
    list of written files.
    """
    divider = "=" * 60
    evaluation = report.evaluation
    print(f"\n{divider}")
    print(f"  Component : {report.component_name}  ({report.kebab_name})")
    print(f"  Score     : {evaluation.score:g}/100 after {evaluation.iterations} iteration(s)")

    if evaluation.status.value == "accepted":
        print("  Quality   : ✅ ACCEPTED")
    else:
        print("  Quality   : ⚠️  BEST EFFORT (quality gate not met)")
        failing = [name for name, ok in evaluation.deterministic_checks.model_dump().items() if not ok]
        for name in failing:
            print(f"    • check failed: {name}")

    build = report.build_validation
    if build is None:
        print("  Build     : skipped")
    elif build.passed:
        print("  Build     : ✅ tsc --noEmit passed")
    else:
        print(f"  Build     : ❌ {build.error_count} error(s)")
        for err in build.errors[:10]:
            print(f"    • {err}")

    print(f"\n  Files ({len(report.files)}):")
    for path in sorted(report.files):
        print(f"    {path}")
    if report.output_dir:
        print(f"\n  Written to: {report.output_dir}")
    print(divider)


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI loop
# ─────────────────────────────────────────────────────────────────────────────

def run() -> None:
    """Interactive REPL that drives ComponentPipeline."""
    print()
    print("╔══════════════════════════════════════════════════════╗")
    print("║           Guided Component Forge  (v1.0)             ║")
    print(f"║  LangGraph + Groq ({config.GROQ_MODEL:<33}) ║")
    print("╚══════════════════════════════════════════════════════╝")
    print()
    print("Describe a Webflow code component to generate it.")
    print("Commands:  'complexity <simple|standard|complex>' | 'exit' — quit")
    print()

    pipeline = ComponentPipeline(build_validator=BuildValidator())
    complexity = "standard"

    while True:
        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break

        if not user_input:
            continue

        # ── Built-in commands ──────────────────────────────────────────────────
        if user_input.lower() == "exit":
            print("Goodbye!")
            break

        if user_input.lower().startswith("complexity"):
            level = user_input[len("complexity"):].strip().lower()
            if level in COMPLEXITY_LEVELS:
                complexity = level
                print(f"\n[ Complexity set to '{complexity}'. ]\n")
            else:
                print(f"\n[ Unknown level '{level}'. Use one of: {', '.join(COMPLEXITY_LEVELS)} ]\n")
            continue

        print("\nGenerating...\n")
        try:
            report = pipeline.run(PipelineRequest(description=user_input, complexity=complexity))
        except Exception:
            traceback.print_exc()
            print("\n[ERROR] Pipeline failed. Try again with a different description.\n")
            continue

        display_result(report)
        print()


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run()
