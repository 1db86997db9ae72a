import pytest
from tenacity import wait_none

from codegen.generator import ArtifactKind
from codegen.llm import GenerationError
from codegen.states import (
    ArtifactSet,
    ComponentSpec,
    CriterionScore,
    EvaluationCriteria,
    EvaluationResult,
    ParseMode,
)

REACT_OK = """import { useState } from "react";

export interface PricingCardProps {
  title?: string;
  highlighted?: boolean;
}

export default function PricingCard({ title = "Pro", highlighted = false }: PricingCardProps) {
  const [open, setOpen] = useState(false);
  return (
    <section className="wf-pricingcard">
      <h2 className="wf-pricingcard-title">{title}</h2>
      <div className={`wf-pricingcard-body ${highlighted ? "wf-pricingcard-body--highlighted" : ""}`}>
        <button className="wf-pricingcard-toggle" onClick={() => setOpen(!open)} aria-expanded={open}>
          Details
        </button>
      </div>
    </section>
  );
}"""

CSS_OK = """.wf-pricingcard {
  font-family: inherit;
  color: inherit;
  line-height: inherit;
  --wf-pricingcard-gap: 16px;
  padding: var(--wf-pricingcard-gap);
  background: var(--background-primary, #ffffff);
}

.wf-pricingcard-title {
  font-size: var(--font-size-large, 1.5rem);
}"""

DECLARATION_OK = """import PricingCard from "./PricingCard";
import { props } from "@webflow/data-types";
import { declareComponent } from "@webflow/react";
import "./PricingCard.css";

export default declareComponent(PricingCard, {
  name: "PricingCard",
  description: "A pricing card",
  group: "Marketing",
  options: {
    ssr: false,
  },
  props: {
    title: props.Text({
      name: "Title",
      defaultValue: "Pro",
      group: "Content",
    }),
    highlighted: props.Boolean({
      name: "Highlighted",
      defaultValue: false,
      group: "Style",
    }),
  },
});"""


@pytest.fixture
def spec() -> ComponentSpec:
    return ComponentSpec.model_validate({
        "componentName": "PricingCard",
        "description": "A pricing card with a title and an expandable details panel",
        "group": "Marketing",
        "props": [
            {"name": "title", "type": "Text", "description": "Card title", "defaultValue": "Pro", "group": "Content"},
            {"name": "highlighted", "type": "Boolean", "description": "Accent border", "defaultValue": False, "group": "Style"},
        ],
    })


@pytest.fixture
def valid_artifacts() -> ArtifactSet:
    return ArtifactSet(react_component=REACT_OK, stylesheet=CSS_OK, declaration=DECLARATION_OK)


def make_evaluation(score: float, reasoning: str = "", mode: ParseMode = ParseMode.PARSED) -> EvaluationResult:
    if mode is ParseMode.FALLBACK:
        return EvaluationResult(score=90, reasoning=reasoning or "unparsable", confidence=0.1, parse_mode=mode)
    criterion = CriterionScore(score=score, notes="")
    criteria = EvaluationCriteria(
        functionality_completeness=criterion,
        prop_wiring=criterion,
        css_completeness=criterion,
        semantic_html=criterion,
        accessibility=criterion,
        code_quality=criterion,
    )
    return EvaluationResult(
        score=score,
        reasoning=reasoning,
        criteria=criteria,
        confidence=round(score / 100, 2),
        parse_mode=mode,
    )


class FakeGenerator:
    """
    Scripted artifact generator. `react_rounds` decides, per generation round,
    whether the component text is valid; every round tags the text so tests
    can tell which round's artifacts survived.
    """

    def __init__(self, react_rounds=None, fail_on=None):
        self.react_rounds = list(react_rounds or [])
        self.fail_on = fail_on
        self.calls = []

    def round_count(self) -> int:
        return sum(1 for kind, _, _ in self.calls if kind is ArtifactKind.REACT_COMPONENT)

    def generate(self, kind, spec, siblings=None, feedback=""):
        self.calls.append((kind, dict(siblings or {}), feedback))
        if self.fail_on is kind:
            raise GenerationError(kind.value, 3, ConnectionError("service down"))
        if kind is ArtifactKind.REACT_COMPONENT:
            n = self.round_count()
            valid = self.react_rounds[n - 1] if n <= len(self.react_rounds) else True
            text = REACT_OK if valid else REACT_OK.replace("export default function", "export function")
            return f"// round {n}\n{text}"
        if kind is ArtifactKind.STYLESHEET:
            return CSS_OK
        if kind is ArtifactKind.DECLARATION:
            return DECLARATION_OK
        return f"{kind.value} for {spec.name}"


class FakeJudge:
    def __init__(self, evaluations):
        self.evaluations = list(evaluations)
        self.calls = []

    def evaluate(self, spec, artifacts):
        self.calls.append(artifacts)
        return self.evaluations[min(len(self.calls), len(self.evaluations)) - 1]


class RecordingClient:
    """LLMClient stand-in returning canned replies and recording the prompts."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.messages = []
        self.max_attempts = 2
        self.wait = wait_none()

    def complete(self, messages, step="llm"):
        self.messages.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
