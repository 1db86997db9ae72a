"""
spec_generator.py — Guided Component Forge
===========================================
Plain English description → ComponentSpec.

  1. generate_spec()              — LLM designs name, description and props
  2. research_api_integrations()  — LLM detects external APIs (best effort)
"""

from pydantic import BaseModel, Field, ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from codegen import prompts
from codegen.llm import LLMClient
from codegen.states import ApiIntegration, ComponentSpec
from codegen.utils import load_json_object


class SpecGenerationError(RuntimeError):
    """The spec reply could not be turned into a valid ComponentSpec."""


class ApiResearch(BaseModel):
    has_apis: bool = Field(False, alias="hasApis")
    integrations: list[ApiIntegration] = Field(default_factory=list)


class SpecGenerator:
    def __init__(self, client: LLMClient | None = None) -> None:
        self.client = client or LLMClient()

    def generate_spec(self, description: str, complexity: str = "standard") -> ComponentSpec:
        """Re-asks the model (same prompt) while the reply is not a valid spec."""
        for attempt in Retrying(
            stop=stop_after_attempt(self.client.max_attempts),
            wait=self.client.wait,
            retry=retry_if_exception_type(SpecGenerationError),
            reraise=True,
        ):
            with attempt:
                return self._generate_once(description, complexity)

    def _generate_once(self, description: str, complexity: str) -> ComponentSpec:
        raw = self.client.complete(prompts.spec_prompt(description, complexity), step="generate_spec")
        data, _ = load_json_object(raw)
        if data is None:
            raise SpecGenerationError("spec reply contained no JSON object")
        try:
            spec = ComponentSpec.model_validate(data)
        except ValidationError as exc:
            raise SpecGenerationError(f"spec reply failed validation: {exc}") from exc
        print(f"[spec] Designed {spec.name} with {len(spec.props)} prop(s)")
        return spec

    def research_api_integrations(self, spec: ComponentSpec) -> list[ApiIntegration]:
        """Any unusable reply means "no APIs"."""
        raw = self.client.complete(prompts.research_api_prompt(spec), step="research_api")
        data, _ = load_json_object(raw)
        if data is None:
            print("[spec] ⚠️  API research reply unparsable — assuming no APIs")
            return []
        try:
            research = ApiResearch.model_validate(data)
        except ValidationError:
            print("[spec] ⚠️  API research reply invalid — assuming no APIs")
            return []
        return research.integrations if research.has_apis else []

    def run(self, description: str, complexity: str = "standard") -> ComponentSpec:
        spec = self.generate_spec(description, complexity)
        integrations = self.research_api_integrations(spec)
        if integrations:
            print(f"[spec] Found {len(integrations)} API integration(s)")
            spec = spec.model_copy(update={"api_integrations": integrations})
        return spec
