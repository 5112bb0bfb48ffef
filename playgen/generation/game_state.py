from typing import TypedDict, Annotated, List, Any, Optional
import operator

from playgen.generation.models import CriticResult, GameSpec, GenerateGameInput
from playgen.testing.runner import GateReport


class GameState(TypedDict, total=False):
    request: GenerateGameInput
    references: List[str]

    # Design Phase
    spec: GameSpec

    # Build & Revision Phase
    # rounds list for structured kinds, component source for custom
    candidate: Any
    build_errors: List[str]
    iteration: int

    # Validation & Critic Phase
    candidate_valid: bool
    critique: Optional[CriticResult]
    best_candidate: Any
    best_score: int

    # Custom fast path
    gate: GateReport
    fix_attempted: bool
    fix_applied: bool

    # Set by the failure guard; routes straight to END
    failed: bool

    # operator.add appends each node's events instead of overwriting them
    events: Annotated[List[Any], operator.add]
