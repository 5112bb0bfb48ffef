import copy

from conftest import SORT_ROUNDS
from playgen.generation.models import RendererKind
from playgen.validation.renderer_schemas import get_renderer_catalog, get_renderer_schema
from playgen.validation.validators import validate_config


def sort_round_with_items(count, buckets=4):
    return {
        "instruction": "Sort the data structures",
        "buckets": [f"Bucket {i}" for i in range(buckets)],
        "items": [{"text": f"Item {i}", "correctBucket": i % buckets} for i in range(count)],
    }


def test_valid_sort_battle_round():
    """4 buckets and 6 items with indices in range is valid"""
    result = validate_config(RendererKind.SORT_BATTLE, [sort_round_with_items(6)])
    assert result.valid, result.errors
    assert result.errors == []


def test_sort_battle_bucket_out_of_range_names_the_item():
    rounds = [sort_round_with_items(6)]
    rounds[0]["items"][2] = {"text": "Tuple", "correctBucket": 4}

    result = validate_config("sortBattle", rounds)

    assert not result.valid
    assert any("correctBucket 4" in e and "Tuple" in e for e in result.errors), result.errors
    assert all(e.startswith("rounds.0") for e in result.errors)


def test_sort_battle_requires_two_buckets():
    rounds = [sort_round_with_items(3, buckets=1)]
    result = validate_config("sortBattle", rounds)
    assert not result.valid
    assert any("buckets" in e for e in result.errors)


def test_node_graph_edge_to_missing_node():
    round_ = {
        "title": "Backprop",
        "instruction": "Fill in the gradients",
        "nodes": [
            {"id": "x", "label": "x", "value": "2", "correctValue": "2", "x": 0, "y": 0},
            {"id": "y", "label": "y", "challenge": True, "correctValue": "4", "x": 1, "y": 0},
        ],
        "edges": [{"from": "x", "to": "z"}],
    }
    result = validate_config("nodeGraph", [round_])
    assert not result.valid
    assert any("'z'" in e and "existing node" in e for e in result.errors), result.errors


def test_timeline_order_must_be_a_permutation():
    round_ = {
        "title": "1938",
        "instruction": "Order the events",
        "events": [
            {"id": "anschluss", "label": "Anschluss"},
            {"id": "munich", "label": "Munich Agreement"},
            {"id": "kristallnacht", "label": "Kristallnacht"},
        ],
        "correctOrder": ["anschluss", "munich", "munich"],
    }
    result = validate_config("timeline", [round_])
    assert not result.valid
    joined = "\n".join(result.errors)
    assert "more than once" in joined
    assert "kristallnacht" in joined


def test_unknown_kind_and_empty_rounds():
    assert validate_config("crossword", SORT_ROUNDS).errors == ["Unknown game type: crossword"]
    assert validate_config("custom", SORT_ROUNDS).errors == ["Unknown game type: custom"]

    empty = validate_config("sortBattle", [])
    assert not empty.valid
    assert "non-empty array" in empty.errors[0]


def test_validator_does_not_mutate_input():
    rounds = copy.deepcopy(SORT_ROUNDS)
    validate_config("sortBattle", rounds)
    assert rounds == SORT_ROUNDS


def test_catalog_lists_every_structured_kind():
    catalog = get_renderer_catalog()
    for kind in RendererKind.structured():
        assert f'(type: "{kind.value}")' in catalog
        assert get_renderer_schema(kind)
    assert get_renderer_schema("nope") == ""
