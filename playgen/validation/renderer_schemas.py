"""Declarative rule sets for every structured renderer.

Shape rules (required fields, enumerations, length bounds) are pydantic field
constraints. Cross-reference rules live in ``model_validator`` hooks that
collect every violation of a round and report them together, one per line.
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, StringConstraints, TypeAdapter, model_validator

from playgen.generation.models import RendererKind, RoundSpec, WireModel

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Index = Annotated[int, Field(ge=0)]


def _raise_if(issues: List[str]) -> None:
    if issues:
        raise ValueError("\n".join(issues))


def _duplicates(ids: List[str]) -> List[str]:
    seen, dupes = set(), []
    for item in ids:
        if item in seen and item not in dupes:
            dupes.append(item)
        seen.add(item)
    return dupes


# --- Sort Battle ---

class SortItem(WireModel):
    text: NonEmpty
    correct_bucket: Index


class SortBattleRound(WireModel):
    instruction: NonEmpty
    buckets: List[NonEmpty] = Field(min_length=2, max_length=6)
    items: List[SortItem] = Field(min_length=2)

    @model_validator(mode="after")
    def _check_bucket_indices(self):
        issues = [
            f"items.{i} ({item.text!r}): correctBucket {item.correct_bucket} is out of range "
            f"for {len(self.buckets)} buckets (valid 0-{len(self.buckets) - 1})"
            for i, item in enumerate(self.items)
            if item.correct_bucket >= len(self.buckets)
        ]
        _raise_if(issues)
        return self


# --- Error Detective ---

class Segment(WireModel):
    text: NonEmpty
    is_error: bool
    explanation: Optional[str] = None


class ErrorDetectiveRound(WireModel):
    title: NonEmpty
    description: NonEmpty
    segments: List[Segment] = Field(min_length=2)

    @model_validator(mode="after")
    def _check_errors(self):
        issues = []
        if not any(s.is_error for s in self.segments):
            issues.append("At least one segment must be an error")
        for i, segment in enumerate(self.segments):
            if segment.is_error and not (segment.explanation or "").strip():
                issues.append(f"segments.{i}: every error segment must have an explanation")
        _raise_if(issues)
        return self


# --- Claim-Evidence Match ---

class Claim(WireModel):
    id: NonEmpty
    text: NonEmpty


class Evidence(WireModel):
    id: NonEmpty
    text: NonEmpty
    matches_claim_id: NonEmpty
    is_distractor: Optional[bool] = None


class ClaimEvidenceRound(WireModel):
    topic: NonEmpty
    claims: List[Claim] = Field(min_length=2)
    evidence: List[Evidence] = Field(min_length=2)

    @model_validator(mode="after")
    def _check_claim_refs(self):
        claim_ids = {c.id for c in self.claims}
        issues = [f"duplicate claim id {d!r}" for d in _duplicates([c.id for c in self.claims])]
        issues += [
            f"evidence.{i} ({e.id}): matchesClaimId {e.matches_claim_id!r} does not reference an existing claim"
            for i, e in enumerate(self.evidence)
            if e.matches_claim_id not in claim_ids
        ]
        _raise_if(issues)
        return self


# --- Prediction Bet ---

class PredictionBetRound(WireModel):
    scenario: NonEmpty
    options: List[NonEmpty] = Field(min_length=2, max_length=5)
    correct_index: Index
    explanation: NonEmpty

    @model_validator(mode="after")
    def _check_answer(self):
        if self.correct_index >= len(self.options):
            raise ValueError(
                f"correctIndex {self.correct_index} is out of range for {len(self.options)} options"
            )
        return self


# --- Teach the Bot ---

class BotStatement(WireModel):
    text: NonEmpty
    is_wrong: bool
    whats_wrong: Optional[str] = None
    hint: Optional[str] = None


class TeachBotRound(WireModel):
    topic: NonEmpty
    bot_statements: List[BotStatement] = Field(min_length=2)

    @model_validator(mode="after")
    def _check_wrong_statements(self):
        issues = []
        if not any(s.is_wrong for s in self.bot_statements):
            issues.append("At least one bot statement must be wrong")
        for i, statement in enumerate(self.bot_statements):
            if statement.is_wrong and not (statement.whats_wrong and statement.hint):
                issues.append(f"botStatements.{i}: wrong statements must have whatsWrong and hint")
        _raise_if(issues)
        return self


# --- Node Graph ---

class GraphNode(WireModel):
    id: NonEmpty
    label: NonEmpty
    value: Optional[str] = None
    challenge: Optional[bool] = None
    correct_value: NonEmpty
    x: float
    y: float


class GraphEdge(WireModel):
    from_: NonEmpty = Field(alias="from")
    to: NonEmpty
    label: Optional[str] = None


def _edge_issues(nodes: list, edges: List[GraphEdge]) -> List[str]:
    node_ids = {n.id for n in nodes}
    issues = [f"duplicate node id {d!r}" for d in _duplicates([n.id for n in nodes])]
    for i, edge in enumerate(edges):
        for end, node_id in (("from", edge.from_), ("to", edge.to)):
            if node_id not in node_ids:
                issues.append(f"edges.{i}: {end} {node_id!r} does not reference an existing node")
    return issues


class NodeGraphRound(WireModel):
    title: NonEmpty
    instruction: NonEmpty
    nodes: List[GraphNode] = Field(min_length=2)
    edges: List[GraphEdge] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_graph(self):
        issues = _edge_issues(self.nodes, self.edges)
        if not any(n.challenge for n in self.nodes):
            issues.append("At least one node must be a challenge node")
        _raise_if(issues)
        return self


# --- Spatial Map ---

class MapRegion(WireModel):
    col: Index
    row: Index
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    color: NonEmpty
    label: NonEmpty


class MapUnit(WireModel):
    id: NonEmpty
    label: NonEmpty
    color: NonEmpty


class Placement(WireModel):
    unit_id: NonEmpty
    col: Index
    row: Index


class MapPhase(WireModel):
    name: NonEmpty
    instruction: NonEmpty
    correct_placements: List[Placement] = Field(min_length=1)


class SpatialMapRound(WireModel):
    title: NonEmpty
    grid_cols: int = Field(ge=2, le=20)
    grid_rows: int = Field(ge=2, le=20)
    regions: List[MapRegion] = Field(min_length=1)
    units: List[MapUnit] = Field(min_length=1)
    phases: List[MapPhase] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_placements(self):
        unit_ids = {u.id for u in self.units}
        issues = [f"duplicate unit id {d!r}" for d in _duplicates([u.id for u in self.units])]
        for p_idx, phase in enumerate(self.phases):
            for i, placement in enumerate(phase.correct_placements):
                where = f"phases.{p_idx}.correctPlacements.{i}"
                if placement.unit_id not in unit_ids:
                    issues.append(f"{where}: unitId {placement.unit_id!r} does not reference an existing unit")
                if placement.col >= self.grid_cols or placement.row >= self.grid_rows:
                    issues.append(
                        f"{where}: ({placement.col}, {placement.row}) is outside the "
                        f"{self.grid_cols}x{self.grid_rows} grid"
                    )
        _raise_if(issues)
        return self


# --- Timeline ---

class TimelineEvent(WireModel):
    id: NonEmpty
    label: NonEmpty
    date: Optional[str] = None


class TimelineRound(WireModel):
    title: NonEmpty
    instruction: NonEmpty
    events: List[TimelineEvent] = Field(min_length=2)
    correct_order: List[NonEmpty] = Field(min_length=2)
    revealed_positions: Optional[List[Index]] = None

    @model_validator(mode="after")
    def _check_order(self):
        event_ids = [e.id for e in self.events]
        issues = [f"duplicate event id {d!r}" for d in _duplicates(event_ids)]
        issues += [
            f"correctOrder.{i}: {event_id!r} does not reference an existing event"
            for i, event_id in enumerate(self.correct_order)
            if event_id not in event_ids
        ]
        issues += [f"correctOrder lists {d!r} more than once" for d in _duplicates(self.correct_order)]
        missing = [event_id for event_id in event_ids if event_id not in self.correct_order]
        if missing or len(self.correct_order) != len(event_ids):
            issues.append(
                "correctOrder must contain every event exactly once"
                + (f" (missing: {', '.join(missing)})" if missing else "")
            )
        for i in self.revealed_positions or []:
            if i >= len(self.correct_order):
                issues.append(f"revealedPositions: index {i} is out of range for correctOrder")
        _raise_if(issues)
        return self


# --- Flow Diagram ---

class FlowNode(WireModel):
    id: NonEmpty
    type: Literal["start", "end", "process", "decision"]
    label: NonEmpty
    x: float
    y: float


class TraceStep(WireModel):
    node_id: NonEmpty
    prompt: Optional[str] = None
    options: Optional[List[str]] = None
    correct_option: Optional[Index] = None
    correct_answer: Optional[str] = None
    explanation: NonEmpty


class FlowDiagramRound(WireModel):
    title: NonEmpty
    instruction: NonEmpty
    nodes: List[FlowNode] = Field(min_length=2)
    edges: List[GraphEdge] = Field(min_length=1)
    trace_steps: List[TraceStep] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_flow(self):
        node_ids = {n.id for n in self.nodes}
        issues = _edge_issues(self.nodes, self.edges)
        for i, step in enumerate(self.trace_steps):
            if step.node_id not in node_ids:
                issues.append(f"traceSteps.{i}: nodeId {step.node_id!r} does not reference an existing node")
            if step.options is not None and step.correct_option is not None \
                    and step.correct_option >= len(step.options):
                issues.append(
                    f"traceSteps.{i}: correctOption {step.correct_option} is out of range "
                    f"for {len(step.options)} options"
                )
        _raise_if(issues)
        return self


# --- Tagged union over every renderer ---

class SortBattleConfig(WireModel):
    type: Literal["sortBattle"] = "sortBattle"
    rounds: Annotated[List[SortBattleRound], Field(min_length=1)]


class ErrorDetectiveConfig(WireModel):
    type: Literal["errorDetective"] = "errorDetective"
    rounds: Annotated[List[ErrorDetectiveRound], Field(min_length=1)]


class ClaimEvidenceConfig(WireModel):
    type: Literal["claimEvidence"] = "claimEvidence"
    rounds: Annotated[List[ClaimEvidenceRound], Field(min_length=1)]


class PredictionBetConfig(WireModel):
    type: Literal["predictionBet"] = "predictionBet"
    rounds: Annotated[List[PredictionBetRound], Field(min_length=1)]


class TeachBotConfig(WireModel):
    type: Literal["teachBot"] = "teachBot"
    rounds: Annotated[List[TeachBotRound], Field(min_length=1)]


class NodeGraphConfig(WireModel):
    type: Literal["nodeGraph"] = "nodeGraph"
    rounds: Annotated[List[NodeGraphRound], Field(min_length=1)]


class SpatialMapConfig(WireModel):
    type: Literal["spatialMap"] = "spatialMap"
    rounds: Annotated[List[SpatialMapRound], Field(min_length=1)]


class TimelineConfig(WireModel):
    type: Literal["timeline"] = "timeline"
    rounds: Annotated[List[TimelineRound], Field(min_length=1)]


class FlowDiagramConfig(WireModel):
    type: Literal["flowDiagram"] = "flowDiagram"
    rounds: Annotated[List[FlowDiagramRound], Field(min_length=1)]


class CustomGameConfig(WireModel):
    type: Literal["custom"] = "custom"
    rounds: List[RoundSpec]
    source: str


RendererConfig = Annotated[
    Union[
        SortBattleConfig,
        ErrorDetectiveConfig,
        ClaimEvidenceConfig,
        PredictionBetConfig,
        TeachBotConfig,
        NodeGraphConfig,
        SpatialMapConfig,
        TimelineConfig,
        FlowDiagramConfig,
        CustomGameConfig,
    ],
    Field(discriminator="type"),
]

renderer_config_adapter = TypeAdapter(RendererConfig)


# --- Catalog text fed to the model ---

RENDERER_DESCRIPTIONS = {
    RendererKind.SORT_BATTLE: {
        "name": "Sort Battle",
        "good_for": "Classification, categorization, distinguishing similar concepts. Drag items into buckets.",
        "schema": """{
  "instruction": str,              # e.g. "Sort these into the correct category"
  "buckets": [str],                # 2-6 bucket labels
  "items": [{
    "text": str,                   # item to be sorted
    "correctBucket": int           # index into buckets (0-based)
  }]                               # 4-8 items
}
# The config is a list of rounds. Each round has its own instruction, buckets and items.""",
    },
    RendererKind.ERROR_DETECTIVE: {
        "name": "Error Detective",
        "good_for": "Critical reading, fact-checking, identifying misconceptions. Click on segments that contain errors.",
        "schema": """{
  "title": str,
  "description": str,              # "Find the errors in this explanation"
  "segments": [{
    "text": str,                   # a sentence or clause
    "isError": bool,
    "explanation": str             # REQUIRED when isError is true: what is actually correct
  }]                               # 4-6 segments, at least 1 error
}
# The config is a list of rounds.""",
    },
    RendererKind.CLAIM_EVIDENCE: {
        "name": "Claim-Evidence Match",
        "good_for": "Argumentation, evidence evaluation, critical thinking. Match claims to their best supporting evidence.",
        "schema": """{
  "topic": str,
  "claims": [{"id": str, "text": str}],           # 2-4 claims, ids like "c1"
  "evidence": [{
    "id": str,                     # ids like "e1"
    "text": str,
    "matchesClaimId": str,         # must reference a claim id
    "isDistractor": bool           # optional: plausible but wrong match
  }]                               # more evidence than claims, 1-2 distractors
}
# The config is a list of rounds.""",
    },
    RendererKind.PREDICTION_BET: {
        "name": "Prediction Bet",
        "good_for": "Testing mental models, exposing misconceptions, calibrating confidence. Predict an outcome and bet on it.",
        "schema": """{
  "scenario": str,                 # code snippet, historical scenario or conceptual question
  "options": [str],                # 2-4 possible outcomes
  "correctIndex": int,             # 0-based index of the correct option
  "explanation": str               # why the correct answer is correct
}
# The config is a list of rounds.""",
    },
    RendererKind.TEACH_BOT: {
        "name": "Teach the Bot",
        "good_for": "Testing deep understanding via explanation. The bot makes statements, some wrong, and the learner corrects them.",
        "schema": """{
  "topic": str,
  "botStatements": [{
    "text": str,                   # what the bot says, conversational tone
    "isWrong": bool,
    "whatsWrong": str,             # REQUIRED when isWrong is true
    "hint": str                    # REQUIRED when isWrong is true
  }]                               # 3-5 statements, at least 1 wrong
}
# The config is a list of rounds.""",
    },
    RendererKind.NODE_GRAPH: {
        "name": "Node Graph",
        "good_for": "Computational thinking, tracing values through networks, relationships. Fill in missing node values.",
        "schema": """{
  "title": str,
  "instruction": str,              # what the graph represents and what to fill in
  "nodes": [{
    "id": str,                     # unique
    "label": str,
    "value": str,                  # shown value, omit for challenge nodes
    "challenge": bool,             # true when the learner fills this in
    "correctValue": str,
    "x": float,                    # 0-760
    "y": float                     # 0-460
  }],                              # at least 2 nodes, at least 1 challenge
  "edges": [{"from": str, "to": str, "label": str}]
}
# The config is a list of rounds. The viewport is 760x460.""",
    },
    RendererKind.SPATIAL_MAP: {
        "name": "Spatial Map",
        "good_for": "Spatial reasoning, geography, memory layouts, feature spaces. Place units on a grid within labeled regions.",
        "schema": """{
  "title": str,
  "gridCols": int,                 # 4-10
  "gridRows": int,                 # 4-8
  "regions": [{"col": int, "row": int, "width": int, "height": int, "color": "#1a3a1a", "label": str}],
  "units": [{"id": str, "label": str, "color": str}],
  "phases": [{
    "name": str,
    "instruction": str,
    "correctPlacements": [{"unitId": str, "col": int, "row": int}]
  }]                               # 1-3 phases
}
# The config is a list of rounds. Placements stay inside the grid and name defined units.""",
    },
    RendererKind.TIMELINE: {
        "name": "Timeline",
        "good_for": "Sequencing, chronological reasoning, process order. Drag events to the correct position.",
        "schema": """{
  "title": str,
  "instruction": str,
  "events": [{"id": str, "label": str, "date": str}],   # 4-8 events, date optional
  "correctOrder": [str],           # ALL event ids, left to right
  "revealedPositions": [int]       # optional indices into correctOrder shown as hints
}
# The config is a list of rounds. correctOrder holds every event id exactly once.""",
    },
    RendererKind.FLOW_DIAGRAM: {
        "name": "Flow Diagram",
        "good_for": "Algorithm tracing, decision trees, strategic reasoning. Step through a flowchart answering questions.",
        "schema": """{
  "title": str,
  "instruction": str,
  "nodes": [{
    "id": str,
    "type": "start" | "end" | "process" | "decision",
    "label": str,
    "x": float,                    # 0-760
    "y": float                     # 0-460
  }],
  "edges": [{"from": str, "to": str, "label": str}],
  "traceSteps": [{
    "nodeId": str,
    "prompt": str,
    "options": [str],              # decision nodes: multiple choice
    "correctOption": int,
    "correctAnswer": str,          # free-text answers
    "explanation": str
  }]
}
# The config is a list of rounds. Edges and trace steps reference existing nodes.""",
    },
}


def get_renderer_schema(kind) -> str:
    try:
        desc = RENDERER_DESCRIPTIONS.get(RendererKind(kind))
    except ValueError:
        return ""
    return desc["schema"] if desc else ""


def get_renderer_catalog() -> str:
    return "\n\n---\n\n".join(
        f'### {desc["name"]} (type: "{kind.value}")\n**Good for:** {desc["good_for"]}\n\n{desc["schema"]}'
        for kind, desc in RENDERER_DESCRIPTIONS.items()
    )
