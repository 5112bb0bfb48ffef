import json

from conftest import critic_reply, make_gateway, spec_reply, SORT_ROUNDS
from playgen.generation.chains import GameAgentChain, parse_game_spec
from playgen.generation.critic import Critic, build_revision_instructions
from playgen.generation.models import CriticDimension, CriticResult


def make_critic(*replies):
    return Critic(GameAgentChain(make_gateway(*replies)))


def spec():
    return parse_game_spec(json.loads(spec_reply()))


def test_low_dimension_fails_even_with_high_total():
    """[3, 3, 1, 3] totals 10 but one dimension is below 2"""
    result = make_critic(critic_reply(3, 3, 1, 3)).critique(spec(), SORT_ROUNDS, is_custom=False)
    assert result.total_score == 10
    assert result.passed is False


def test_passing_scores():
    result = make_critic(critic_reply(3, 3, 2, 2)).critique(spec(), SORT_ROUNDS, is_custom=False)
    assert result.passed
    assert result.to_wire()["pass"] is True


def test_missing_dimension_scores_zero():
    reply = json.dumps({"dimensions": [
        {"name": "structural_correctness", "score": 3, "feedback": "ok"},
        {"name": "content_accuracy", "score": 3, "feedback": "ok"},
        {"name": "playability", "score": 3, "feedback": "ok"},
    ], "pass": True, "totalScore": 12})
    result = make_critic(reply).critique(spec(), SORT_ROUNDS, is_custom=False)

    educational = next(d for d in result.dimensions if d.name == "educational_value")
    assert educational.score == 0
    assert result.total_score == 9
    assert result.passed is False


def test_unparseable_reply_fails_every_dimension():
    critic = make_critic("I liked it a lot!")
    result = critic.critique(spec(), SORT_ROUNDS, is_custom=False)
    assert result.total_score == 0
    assert not result.passed
    assert critic.last_exchange.response.content == "I liked it a lot!"


def test_scores_are_clamped():
    reply = critic_reply(7, -2, "2", None)
    result = make_critic(reply).critique(spec(), SORT_ROUNDS, is_custom=False)
    assert [d.score for d in result.dimensions] == [3, 0, 2, 0]


def test_revision_instructions_fall_back_to_weak_dimensions():
    critique = CriticResult.evaluate([
        CriticDimension(name="structural_correctness", score=3, feedback="fine"),
        CriticDimension(name="content_accuracy", score=1, feedback="round 2 answer is wrong"),
        CriticDimension(name="playability", score=3, feedback="fine"),
        CriticDimension(name="educational_value", score=3, feedback="fine"),
    ])
    text = build_revision_instructions(critique)
    assert text.startswith("Improve the following:")
    assert "round 2 answer is wrong" in text
    assert "playability" not in text


def test_structural_failure_scores():
    result = CriticResult.structural_failure(["rounds.0: bad"], subject="schema validation")
    assert [d.score for d in result.dimensions] == [0, 2, 0, 2]
    assert result.revision_instructions == "Fix these schema validation errors: rounds.0: bad"
    assert not result.passed
