"""
evaluator.py — Guided Component Forge
======================================
LLM quality judge, only ever run on artifact sets that passed the
deterministic checks.

The judge reply is parsed in stages and the outcome is tagged:
  PARSED     — direct JSON parse after fence stripping
  EXTRACTED  — first balanced {...} pulled out of surrounding text
  SCORE_ONLY — a valid score but no usable criteria; score kept, confidence 0.1
  FALLBACK   — no usable score at all; score 90, confidence 0.1
Parsing never raises. Confidence is derived from the criterion scores when
they are usable, never requested from the model.
"""

import json
from statistics import mean

from pydantic import ValidationError

from codegen import prompts
from codegen.llm import LLMClient
from codegen.states import ArtifactSet, EvaluationCriteria, EvaluationResult, ParseMode
from codegen.utils import extract_first_json_object, strip_code_fences

FALLBACK_SCORE = 90
FALLBACK_CONFIDENCE = 0.1


def derive_confidence(criteria: EvaluationCriteria) -> float:
    """Mean of the six criterion scores on a 0-1 scale, two decimals."""
    return round(mean(criteria.scores()) / 100, 2)


def _to_result(data, mode: ParseMode) -> EvaluationResult | None:
    if not isinstance(data, dict):
        return None
    reasoning = str(data.get("reasoning") or "")
    try:
        criteria = EvaluationCriteria.model_validate(data.get("criteria"))
        return EvaluationResult(
            score=data.get("score"),
            reasoning=reasoning,
            criteria=criteria,
            confidence=derive_confidence(criteria),
            parse_mode=mode,
        )
    except ValidationError:
        pass

    # The reply stated a score but its criteria are unusable: keep the score
    try:
        return EvaluationResult(
            score=data.get("score"),
            reasoning=reasoning,
            criteria=None,
            confidence=FALLBACK_CONFIDENCE,
            parse_mode=ParseMode.SCORE_ONLY,
        )
    except ValidationError:
        return None


def fallback_evaluation(reason: str) -> EvaluationResult:
    return EvaluationResult(
        score=FALLBACK_SCORE,
        reasoning=f"Evaluation response could not be parsed ({reason}); using fallback score.",
        criteria=None,
        confidence=FALLBACK_CONFIDENCE,
        parse_mode=ParseMode.FALLBACK,
    )


def parse_evaluation(raw: str) -> EvaluationResult:
    """Staged, defensive parse of a judge reply. See module docstring."""
    text = strip_code_fences(raw or "")

    # (a) direct parse
    try:
        result = _to_result(json.loads(text), ParseMode.PARSED)
        if result is not None:
            return result
    except json.JSONDecodeError:
        pass

    # (b) first balanced brace-delimited substring
    candidate = extract_first_json_object(text)
    if candidate is not None:
        try:
            result = _to_result(json.loads(candidate), ParseMode.EXTRACTED)
            if result is not None:
                return result
        except json.JSONDecodeError:
            pass

    # (c) conservative fallback
    snippet = text[:80].replace("\n", " ") if text else "empty response"
    return fallback_evaluation(f"no valid evaluation JSON in: {snippet!r}")


class QualityJudge:
    """Rubric-based scoring of one artifact set."""

    def __init__(self, client: LLMClient | None = None) -> None:
        self.client = client or LLMClient()

    def evaluate(self, spec, artifacts: ArtifactSet) -> EvaluationResult:
        """
        Calls the rubric prompt and parses the reply.
        A transport failure raises GenerationError (after retries); a bad
        reply never raises and yields the fallback result instead.
        """
        messages = prompts.evaluation_prompt(spec, artifacts)
        raw = self.client.complete(messages, step="judge")
        result = parse_evaluation(raw)
        if result.parse_mode is ParseMode.FALLBACK:
            print("[judge] ⚠️  Evaluation reply unparsable — using fallback score")
        elif result.parse_mode is ParseMode.SCORE_ONLY:
            print("[judge] ⚠️  Evaluation criteria unusable — keeping the stated score with low confidence")
        elif result.parse_mode is ParseMode.EXTRACTED:
            print("[judge] ⚠️  Evaluation JSON had to be extracted from surrounding text")
        return result
