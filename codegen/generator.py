"""
generator.py — Guided Component Forge
======================================
Artifact generator: one named source file per call.

The reply of the generation service is non-deterministic; the only
normalisation applied here is fence stripping. Quality is judged downstream.
"""

from enum import Enum

from codegen import prompts
from codegen.llm import LLMClient
from codegen.utils import strip_code_fences


class ArtifactKind(str, Enum):
    # Core artifacts, regenerated every iteration
    REACT_COMPONENT = "react_component"
    STYLESHEET = "stylesheet"
    DECLARATION = "declaration"
    # Auxiliary artifacts, generated once after the loop
    MAIN_TSX = "main_tsx"
    README = "readme"
    SIMPLE_DECLARATION = "simple_declaration"


CORE_KINDS = (ArtifactKind.REACT_COMPONENT, ArtifactKind.STYLESHEET, ArtifactKind.DECLARATION)

# Sibling artifacts each kind is conditioned on
REQUIRED_SIBLINGS: dict[ArtifactKind, tuple[ArtifactKind, ...]] = {
    ArtifactKind.REACT_COMPONENT: (),
    ArtifactKind.STYLESHEET: (ArtifactKind.REACT_COMPONENT,),
    ArtifactKind.DECLARATION: (ArtifactKind.REACT_COMPONENT,),
    ArtifactKind.MAIN_TSX: (),
    ArtifactKind.README: (ArtifactKind.STYLESHEET,),
    ArtifactKind.SIMPLE_DECLARATION: (ArtifactKind.DECLARATION, ArtifactKind.REACT_COMPONENT),
}


class ArtifactGenerator:
    """Builds the prompt for an artifact kind, calls the LLM and strips fences."""

    def __init__(self, client: LLMClient | None = None) -> None:
        self.client = client or LLMClient()

    def build_messages(self, kind: ArtifactKind, spec, siblings: dict, feedback: str = "") -> list[dict]:
        missing = [k.value for k in REQUIRED_SIBLINGS[kind] if k not in siblings]
        if missing:
            raise ValueError(f"{kind.value} needs sibling artifact(s): {', '.join(missing)}")

        if kind is ArtifactKind.REACT_COMPONENT:
            return prompts.react_component_prompt(spec, feedback)
        if kind is ArtifactKind.STYLESHEET:
            return prompts.stylesheet_prompt(spec, siblings[ArtifactKind.REACT_COMPONENT], feedback)
        if kind is ArtifactKind.DECLARATION:
            return prompts.declaration_prompt(spec, siblings[ArtifactKind.REACT_COMPONENT], feedback)
        if kind is ArtifactKind.MAIN_TSX:
            return prompts.main_tsx_prompt(spec)
        if kind is ArtifactKind.README:
            return prompts.readme_prompt(spec, siblings[ArtifactKind.STYLESHEET])
        return prompts.simple_declaration_prompt(
            spec,
            siblings[ArtifactKind.DECLARATION],
            siblings[ArtifactKind.REACT_COMPONENT],
        )

    def generate(self, kind: ArtifactKind, spec, siblings: dict | None = None, feedback: str = "") -> str:
        """
        Returns the fence-stripped text of one artifact.
        Raises GenerationError when the service fails on every attempt.
        """
        messages = self.build_messages(kind, spec, siblings or {}, feedback)
        raw = self.client.complete(messages, step=f"generate_{kind.value}")
        return strip_code_fences(raw)
