import json

import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage

from playgen.config import config
from playgen.generation.gateway import ModelGateway
from playgen.generation.models import LearnerProfile
from playgen.prompts.build_prompts import COMPONENT_EXAMPLE


class ToolFakeChatModel(GenericFakeChatModel):
    """Scripted chat model; tool binding is a no-op so tool-call replies come straight from the script."""

    def bind_tools(self, tools, **kwargs):
        return self


def make_gateway(*replies) -> ModelGateway:
    messages = [r if isinstance(r, AIMessage) else AIMessage(content=r) for r in replies]
    return ModelGateway(ToolFakeChatModel(messages=iter(messages)))


def tool_reply(*calls) -> AIMessage:
    """AIMessage carrying (name, args) tool calls."""
    return AIMessage(
        content="",
        tool_calls=[{"name": name, "args": args, "id": f"call_{i}"} for i, (name, args) in enumerate(calls)],
    )


def critic_reply(*scores, instructions="Tighten the wording of round 2.") -> str:
    names = ["structural_correctness", "content_accuracy", "playability", "educational_value"]
    return json.dumps({
        "dimensions": [{"name": n, "score": s, "feedback": f"{n} feedback"} for n, s in zip(names, scores)],
        "revisionInstructions": instructions,
    })


def spec_reply(game_type="sortBattle", **overrides) -> str:
    spec = {
        "id": "mutability-sort",
        "title": "Mutable or Not?",
        "gameType": game_type,
        "concept": "Mutable vs immutable types",
        "pedagogicalGoal": "Sort values by whether they can change in place",
        "whyThisGame": "Targets the assignment-copies misconception",
        "difficulty": 2,
        "rounds": [
            {"roundNumber": 1, "focus": "Built-in types", "contentSeed": "list, tuple, str, dict"},
            {"roundNumber": 2, "focus": "Aliasing", "contentSeed": "b = a vs b = a[:]"},
        ],
    }
    spec.update(overrides)
    return json.dumps(spec)


SORT_ROUNDS = [
    {
        "instruction": "Sort each value by mutability",
        "buckets": ["Mutable", "Immutable"],
        "items": [
            {"text": "[1, 2]", "correctBucket": 0},
            {"text": "(1, 2)", "correctBucket": 1},
            {"text": "'abc'", "correctBucket": 1},
            {"text": "{'a': 1}", "correctBucket": 0},
        ],
    },
    {
        "instruction": "Copy or alias?",
        "buckets": ["Copy", "Alias"],
        "items": [
            {"text": "b = a[:]", "correctBucket": 0},
            {"text": "b = a", "correctBucket": 1},
        ],
    },
]

VALID_COMPONENT = COMPONENT_EXAMPLE[COMPONENT_EXAMPLE.index("def Game"):]


@pytest.fixture(autouse=True)
def trace_dir(tmp_path, monkeypatch):
    """Keep every run's trace file inside the test's temp directory."""
    directory = tmp_path / "traces"
    monkeypatch.setattr(config, "TRACE_DIR", str(directory))
    monkeypatch.setattr(config, "REFERENCES_ENABLED", False)
    return directory


@pytest.fixture
def profile():
    return LearnerProfile(
        name="Sarah",
        subject="Python Programming",
        level="beginner",
        known_gaps=["Mutable vs immutable types"],
        misconceptions=["Thinks assignment always copies data"],
    )
