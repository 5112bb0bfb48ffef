from typing import Any, Optional

from playgen.config import config
from playgen.generation.chains import GameAgentChain, LLMExchange, extract_json, format_candidate
from playgen.generation.models import (
    CRITIC_DIMENSIONS,
    ConfigParseError,
    CriticDimension,
    CriticResult,
    GameSpec,
)


def _clamp_score(value: Any) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(3, score))


def build_revision_instructions(critique: CriticResult) -> str:
    """Fallback instructions assembled from the weak dimensions' feedback."""
    weak = [d for d in critique.dimensions if d.score < config.CRITIC_MIN_DIMENSION] or critique.dimensions
    return "Improve the following: " + " ".join(f"{d.name}: {d.feedback}" for d in weak if d.feedback)


class Critic:
    """Scores a structurally valid candidate against the fixed four-dimension rubric."""

    def __init__(self, agents: GameAgentChain, min_dimension: int = None, pass_total: int = None):
        self.agents = agents
        self.min_dimension = config.CRITIC_MIN_DIMENSION if min_dimension is None else min_dimension
        self.pass_total = config.CRITIC_PASS_TOTAL if pass_total is None else pass_total
        self.last_exchange: Optional[LLMExchange] = None

    def critique(self, spec: GameSpec, candidate: Any, is_custom: bool) -> CriticResult:
        exchange = self.agents.call(self.agents.get_critic_prompt(), {
            "title": spec.title,
            "game_type": spec.game_type.value,
            "concept": spec.concept,
            "pedagogical_goal": spec.pedagogical_goal,
            "difficulty": spec.difficulty,
            "candidate": format_candidate(candidate, is_custom),
        })
        self.last_exchange = exchange

        try:
            data = extract_json(exchange.response.content)
        except ConfigParseError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        return self.score(data)

    def score(self, data: dict) -> CriticResult:
        """Normalize a raw critic payload. The model's own pass/total are ignored."""
        reported = {}
        for entry in data.get("dimensions") or []:
            if isinstance(entry, dict) and entry.get("name") in CRITIC_DIMENSIONS:
                reported.setdefault(entry["name"], entry)

        dimensions = []
        for name in CRITIC_DIMENSIONS:
            entry = reported.get(name)
            if entry is None:
                dimensions.append(CriticDimension(name=name, score=0, feedback="Not scored by the critic"))
            else:
                dimensions.append(CriticDimension(
                    name=name,
                    score=_clamp_score(entry.get("score")),
                    feedback=str(entry.get("feedback") or ""),
                ))

        instructions = data.get("revisionInstructions")
        return CriticResult.evaluate(
            dimensions,
            revision_instructions=str(instructions) if instructions else None,
            min_dimension=self.min_dimension,
            pass_total=self.pass_total,
        )
