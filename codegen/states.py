"""
states.py — Guided Component Forge
===================================
Pydantic models for the Webflow code component generation pipeline.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from codegen.config import LoopConfig
from codegen.utils import to_class_prefix, to_kebab_case


# ─────────────────────────────────────────────────────────────────────────────
# Component specification
# ─────────────────────────────────────────────────────────────────────────────

class PropKind(str, Enum):
    """Webflow prop types from @webflow/data-types."""
    ID = "Id"
    VARIANT = "Variant"
    BOOLEAN = "Boolean"
    VISIBILITY = "Visibility"
    NUMBER = "Number"
    TEXT = "Text"
    TEXT_NODE = "TextNode"
    RICH_TEXT = "RichText"
    SLOT = "Slot"
    IMAGE = "Image"
    LINK = "Link"


_BOOL_KINDS = {PropKind.BOOLEAN, PropKind.VISIBILITY}
_STRING_KINDS = {
    PropKind.ID, PropKind.VARIANT, PropKind.TEXT, PropKind.TEXT_NODE,
    PropKind.RICH_TEXT, PropKind.IMAGE, PropKind.LINK,
}


class PropSpec(BaseModel):
    """One prop exposed in the Webflow Designer panel."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(description="Prop name in camelCase")
    kind: PropKind = Field(
        validation_alias=AliasChoices("kind", "type"),
        description="Webflow prop type",
    )
    description: str = Field("", description="What this prop controls")
    options: Optional[list[str]] = Field(None, description="Options for Variant props")
    default: Optional[Union[bool, int, float, str]] = Field(
        None,
        validation_alias=AliasChoices("default", "defaultValue"),
        description="Default value, typed after the prop kind",
    )
    group: Optional[str] = Field(None, description="Prop group in the Designer panel")

    @model_validator(mode="after")
    def _check_options_and_default(self) -> "PropSpec":
        if self.kind is PropKind.VARIANT and not self.options:
            raise ValueError(f"Variant prop '{self.name}' needs a non-empty options list")
        if self.kind is not PropKind.VARIANT and self.options is not None:
            raise ValueError(f"Only Variant props take options (prop '{self.name}')")

        value = self.default
        if value is None:
            return self
        if self.kind in _BOOL_KINDS:
            ok = isinstance(value, bool)
        elif self.kind is PropKind.NUMBER:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif self.kind in _STRING_KINDS:
            ok = isinstance(value, str)
        else:  # Slot
            ok = False
        if not ok:
            raise ValueError(
                f"Default {value!r} does not match the value domain of "
                f"{self.kind.value} prop '{self.name}'"
            )
        if self.kind is PropKind.VARIANT and value not in self.options:
            raise ValueError(f"Default {value!r} of '{self.name}' is not one of {self.options}")
        return self


class ApiIntegration(BaseModel):
    """External API a component talks to, as researched by the spec generator."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    service: str
    endpoint: str
    auth_method: Literal[
        "none", "api-key-header", "api-key-query", "path-token", "bearer-token"
    ] = "none"
    auth_param_name: Optional[str] = None
    required_params: Optional[dict[str, str]] = None
    response_shape: str = ""
    notes: Optional[str] = None


class ComponentSpec(BaseModel):
    """
    Immutable request for one component.
    Everything downstream (prompts, checks, scaffold) is derived from it.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(
        validation_alias=AliasChoices("name", "componentName", "component_name"),
        description='PascalCase component name, e.g. "PricingTable"',
    )
    description: str = Field(description="What the component does, its features, behaviours")
    props: list[PropSpec] = Field(default_factory=list)
    npm_dependencies: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("npm_dependencies", "npmDependencies"),
        description='Additional npm packages, e.g. {"swiper": "^11.0.0"}',
    )
    group: str = Field("Components", description="Webflow component group/category")
    api_integrations: list[ApiIntegration] = Field(
        default_factory=list,
        validation_alias=AliasChoices("api_integrations", "apiIntegrations"),
    )

    @field_validator("name")
    @classmethod
    def _name_is_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("component name must not be empty")
        if not value[0].isalpha() or not value.isidentifier() or "_" in value:
            raise ValueError(f"component name must be a PascalCase identifier, got {value!r}")
        return value

    @field_validator("group", mode="before")
    @classmethod
    def _default_group(cls, value):
        return value or "Components"

    @property
    def kebab_name(self) -> str:
        return to_kebab_case(self.name)

    @property
    def class_prefix(self) -> str:
        return to_class_prefix(self.name)


# ─────────────────────────────────────────────────────────────────────────────
# Generated artifacts & deterministic checks
# ─────────────────────────────────────────────────────────────────────────────

class ArtifactSet(BaseModel):
    """The three core files produced together in one iteration."""
    model_config = ConfigDict(frozen=True)

    react_component: str = Field(description="<Name>.tsx content")
    stylesheet: str = Field(description="<Name>.css content")
    declaration: str = Field(description="<Name>.webflow.tsx content")


class DeterministicChecks(BaseModel):
    """Per-rule outcome, in the order the rules are evaluated."""
    model_config = ConfigDict(frozen=True)

    class_prefix_correct: bool = False
    typography_inherited: bool = False
    site_variable_fallbacks: bool = False
    no_design_system_imports: bool = False
    css_import_in_webflow: bool = False
    interface_exported: bool = False
    default_export_present: bool = False
    declare_component_present: bool = False
    props_grouped: bool = False
    ssr_flag_correct: bool = False
    no_code_fences: bool = False


class CheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    checks: DeterministicChecks
    failures: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def all_passed(self) -> bool:
        return all(self.checks.model_dump().values())


# ─────────────────────────────────────────────────────────────────────────────
# Quality judge
# ─────────────────────────────────────────────────────────────────────────────

class ParseMode(str, Enum):
    """How the judge reply was turned into an EvaluationResult."""
    PARSED = "parsed"          # direct JSON parse after fence stripping
    EXTRACTED = "extracted"    # first balanced {...} pulled out of the text
    SCORE_ONLY = "score_only"  # score usable, criteria missing or invalid
    FALLBACK = "fallback"      # nothing usable, conservative default


class CriterionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=100)
    notes: str = ""


class EvaluationCriteria(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    functionality_completeness: CriterionScore
    prop_wiring: CriterionScore
    css_completeness: CriterionScore
    semantic_html: CriterionScore
    accessibility: CriterionScore
    code_quality: CriterionScore

    def scores(self) -> list[float]:
        return [
            self.functionality_completeness.score,
            self.prop_wiring.score,
            self.css_completeness.score,
            self.semantic_html.score,
            self.accessibility.score,
            self.code_quality.score,
        ]


class EvaluationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=100)
    reasoning: str = ""
    criteria: Optional[EvaluationCriteria] = None
    confidence: float = Field(ge=0, le=1)
    parse_mode: ParseMode = ParseMode.PARSED


# ─────────────────────────────────────────────────────────────────────────────
# Iteration controller state
# ─────────────────────────────────────────────────────────────────────────────

class LoopStatus(str, Enum):
    GENERATING = "generating"
    CHECKING = "checking"
    JUDGING = "judging"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class IterationRecord(BaseModel):
    """Full state of one loop pass. Only the terminal record is kept."""
    index: int
    artifacts: ArtifactSet
    check: Optional[CheckResult] = None
    evaluation: Optional[EvaluationResult] = None
    feedback: str = Field("", description="Feedback handed to the next iteration")


class EvaluationSummary(BaseModel):
    score: float = 0
    iterations: int = 0
    deterministic_checks: DeterministicChecks = Field(default_factory=DeterministicChecks)
    status: LoopStatus = LoopStatus.GENERATING
    confidence: Optional[float] = None


class ComponentResult(BaseModel):
    component_name: str
    kebab_name: str
    files: dict[str, str]
    evaluation: EvaluationSummary
    output_dir: Optional[str] = None


class ComponentRun(BaseModel):
    """
    State object threaded through the controller graph:
    generator → checker → judge → corrector → … → finalizer → assembler.
    """
    spec: ComponentSpec
    config: LoopConfig = Field(default_factory=LoopConfig)
    iteration: int = Field(0, description="Number of generation rounds started so far")
    feedback: str = Field("", description="Feedback the next generation round must address")
    current: Optional[IterationRecord] = None
    last_evaluation: Optional[EvaluationResult] = None
    status: LoopStatus = LoopStatus.GENERATING
    result: Optional[ComponentResult] = None


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline input / output
# ─────────────────────────────────────────────────────────────────────────────

class BuildValidation(BaseModel):
    passed: bool
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)


class PipelineRequest(BaseModel):
    description: str = Field(min_length=1, description="Plain English description of the component")
    complexity: Literal["simple", "standard", "complex"] = "standard"
    npm_dependencies: Optional[dict[str, str]] = None
    group: Optional[str] = None


class PipelineReport(BaseModel):
    component_name: str
    kebab_name: str
    files: dict[str, str]
    evaluation: EvaluationSummary
    build_validation: Optional[BuildValidation] = None
    output_dir: Optional[str] = None
