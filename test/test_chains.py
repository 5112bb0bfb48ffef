import json

from conftest import SORT_ROUNDS, critic_reply, make_gateway, spec_reply
from playgen.generation import core
from playgen.generation.chains import GameAgentChain, extract_json, format_article
from playgen.generation.core import generate_game
from playgen.generation.models import ArticleContext, GenerateGameInput


def test_references_reach_design_prompt_without_article(profile):
    """Retrieved snippets belong in the prompt even when no lesson article was given"""
    agents = GameAgentChain(make_gateway(spec_reply()))
    spec, exchange = agents.design(profile, "Mutability", None, ["Lists can be changed in place."])

    assert spec.title == "Mutable or Not?"
    assert "Lists can be changed in place." in exchange.user_prompt
    assert "Reference Material" in exchange.user_prompt


def test_no_article_and_no_references_adds_nothing():
    assert format_article(None, []) == ""
    assert format_article(None) == ""


def test_article_merges_its_own_and_retrieved_references():
    article = ArticleContext(title="Mutability", content="Lists change.", references=["From the lesson"])
    text = format_article(article, ["From the knowledge base"])
    assert "Title: Mutability" in text
    assert "- From the lesson" in text
    assert "- From the knowledge base" in text


def test_pipeline_injects_retrieved_snippets(profile, trace_dir, monkeypatch):
    monkeypatch.setattr(core, "lookup_references", lambda query: [f"Snippet about {query}"])
    events = list(generate_game(
        GenerateGameInput(profile=profile, topic="tuples"),
        gateway=make_gateway(spec_reply(), json.dumps(SORT_ROUNDS), critic_reply(3, 3, 3, 3)),
        log_callback=lambda message: None,
    ))
    assert events[-1].event == "complete"

    (trace_file,) = list(trace_dir.iterdir())
    steps = json.loads(trace_file.read_text(encoding="utf-8"))["steps"]
    design = next(s for s in steps if s["step"] == "spec_generation")
    assert "Snippet about tuples" in design["llm"]["userPrompt"]


def test_extract_json_skips_chatter():
    assert extract_json('Here it is:\n```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}
    assert extract_json('Sure! [1, 2, 3] hope that helps') == [1, 2, 3]
