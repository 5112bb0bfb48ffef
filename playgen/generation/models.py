"""Pydantic data models shared by the generation pipeline.

Python attributes are snake_case; everything that crosses the wire (model
output, pipeline events, traces) uses the camelCase keys the renderers expect.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# --- Errors ---

class PipelineError(Exception):
    """Base class for failures raised inside the generation pipeline."""


class SpecGenerationError(PipelineError):
    """The design step never produced the minimally required spec fields."""


class ConfigParseError(PipelineError):
    """Model output could not be read as the expected structured payload."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class PipelineAborted(PipelineError):
    """The caller signalled an abort before or during a model call."""


# --- Renderer kinds ---

class RendererKind(str, Enum):
    SORT_BATTLE = "sortBattle"
    ERROR_DETECTIVE = "errorDetective"
    CLAIM_EVIDENCE = "claimEvidence"
    PREDICTION_BET = "predictionBet"
    TEACH_BOT = "teachBot"
    NODE_GRAPH = "nodeGraph"
    SPATIAL_MAP = "spatialMap"
    TIMELINE = "timeline"
    FLOW_DIAGRAM = "flowDiagram"
    CUSTOM = "custom"

    @classmethod
    def structured(cls) -> List["RendererKind"]:
        return [kind for kind in cls if kind is not cls.CUSTOM]


# --- Game spec ---

class RoundSpec(WireModel):
    round_number: int = Field(ge=1)
    focus: str
    content_seed: str = ""


class CompletionRequirement(WireModel):
    id: str = ""
    description: str
    pseudocode: str = ""


class GameSpec(WireModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    game_type: RendererKind
    concept: str = ""
    pedagogical_goal: str = ""
    why_this_game: str = ""
    difficulty: int = Field(default=3, ge=1, le=5)
    rounds: List[RoundSpec] = Field(min_length=1)
    completion_requirements: List[CompletionRequirement] = Field(default_factory=list)
    custom_renderer_description: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_custom(self) -> bool:
        return self.game_type is RendererKind.CUSTOM


# --- Critic ---

CRITIC_DIMENSIONS = (
    "structural_correctness",
    "content_accuracy",
    "playability",
    "educational_value",
)


class CriticDimension(WireModel):
    name: str
    score: int = Field(ge=0, le=3)
    feedback: str = ""


class CriticResult(WireModel):
    passed: bool = Field(alias="pass")
    total_score: int
    dimensions: List[CriticDimension]
    revision_instructions: Optional[str] = None

    @classmethod
    def evaluate(
        cls,
        dimensions: List[CriticDimension],
        revision_instructions: Optional[str] = None,
        min_dimension: int = 2,
        pass_total: int = 10,
    ) -> "CriticResult":
        """Compute pass/fail locally: every dimension >= min_dimension and total >= pass_total."""
        total = sum(d.score for d in dimensions)
        passed = bool(dimensions) and all(d.score >= min_dimension for d in dimensions) and total >= pass_total
        return cls(
            passed=passed,
            total_score=total,
            dimensions=dimensions,
            revision_instructions=revision_instructions,
        )

    @classmethod
    def structural_failure(cls, errors: List[str], subject: str = "schema validation") -> "CriticResult":
        """Synthetic critique used when a candidate never reached the critic."""
        joined = "; ".join(errors)
        dimensions = [
            CriticDimension(name="structural_correctness", score=0, feedback=joined),
            CriticDimension(name="content_accuracy", score=2, feedback=f"N/A - {subject} failed"),
            CriticDimension(name="playability", score=0, feedback="Cannot render - candidate is structurally invalid"),
            CriticDimension(name="educational_value", score=2, feedback=f"N/A - {subject} failed"),
        ]
        return cls(
            passed=False,
            total_score=sum(d.score for d in dimensions),
            dimensions=dimensions,
            revision_instructions=f"Fix these {subject} errors: " + ". ".join(errors),
        )


# --- Edit operations ---

class SearchReplace(BaseModel):
    tool: Literal["search_replace"] = "search_replace"
    search: str
    replace: str = ""


class InsertAfter(BaseModel):
    tool: Literal["insert_after"] = "insert_after"
    anchor: str
    code: str


class FullRewrite(BaseModel):
    tool: Literal["full_rewrite"] = "full_rewrite"
    code: str


EditOperation = Annotated[Union[SearchReplace, InsertAfter, FullRewrite], Field(discriminator="tool")]


# --- Learner input ---

class PerformanceRecord(WireModel):
    game: str
    score: float
    max_score: float
    notable_errors: List[str] = Field(default_factory=list)


class LearnerProfile(WireModel):
    name: str
    subject: str
    level: Literal["beginner", "intermediate", "advanced"] = "beginner"
    context: str = ""
    known_strengths: List[str] = Field(default_factory=list)
    known_gaps: List[str] = Field(default_factory=list)
    misconceptions: List[str] = Field(default_factory=list)
    preferred_modalities: List[str] = Field(default_factory=list)
    response_to_challenge: str = ""
    engagement_triggers: List[str] = Field(default_factory=list)
    recent_performance: List[PerformanceRecord] = Field(default_factory=list)
    current_module: str = ""
    modules_completed: List[str] = Field(default_factory=list)
    upcoming_topics: List[str] = Field(default_factory=list)


class ArticleContext(WireModel):
    title: str
    content: str = ""
    mastery_criteria: str = ""
    references: List[str] = Field(default_factory=list)


class GenerateGameInput(WireModel):
    profile: LearnerProfile
    topic: Optional[str] = None
    preferred_game_type: Optional[RendererKind] = None
    force_custom: bool = False
    article: Optional[ArticleContext] = None


# --- Pipeline events ---

class SpecReadyData(WireModel):
    title: str
    concept: str
    game_type: str


class ConfigDraftData(WireModel):
    iteration: int


class ValidationErrorData(WireModel):
    iteration: int
    errors: List[str]


class CriticResultData(WireModel):
    passed: bool = Field(alias="pass")
    score: int
    iteration: int


class RevisionData(WireModel):
    iteration: int
    instructions: str


class CompleteData(WireModel):
    spec: GameSpec
    config: dict
    custom_code: Optional[str] = None
    best_effort: bool = False


class ErrorData(WireModel):
    message: str
    fallback: Optional[dict] = None


class SpecReady(WireModel):
    event: Literal["spec_ready"] = "spec_ready"
    data: SpecReadyData


class ConfigDraft(WireModel):
    event: Literal["config_draft"] = "config_draft"
    data: ConfigDraftData


class ValidationFailed(WireModel):
    event: Literal["validation_error"] = "validation_error"
    data: ValidationErrorData


class CriticScored(WireModel):
    event: Literal["critic_result"] = "critic_result"
    data: CriticResultData


class RevisionStarted(WireModel):
    event: Literal["revision"] = "revision"
    data: RevisionData


class Complete(WireModel):
    event: Literal["complete"] = "complete"
    data: CompleteData


class PipelineFailed(WireModel):
    event: Literal["error"] = "error"
    data: ErrorData


PipelineEvent = Annotated[
    Union[SpecReady, ConfigDraft, ValidationFailed, CriticScored, RevisionStarted, Complete, PipelineFailed],
    Field(discriminator="event"),
]

TERMINAL_EVENTS = frozenset({"complete", "error"})


def is_terminal(event: Any) -> bool:
    return getattr(event, "event", None) in TERMINAL_EVENTS
