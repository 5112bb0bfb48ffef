import json

from playgen.generation.edit_tools import apply_edits, apply_tool_edits
from playgen.generation.gateway import ToolCall
from playgen.generation.models import FullRewrite, InsertAfter, SearchReplace

SOURCE = (
    "def Game(rounds, h, theme, hooks):\n"
    "    score, set_score = hooks.use_state(0)\n"
    "    label = 'Score'\n"
    "    return h('div', None, label)\n"
)


def call(name, args, index=0):
    arguments = args if isinstance(args, str) else json.dumps(args)
    return ToolCall(id=f"call_{index}", name=name, arguments=arguments)


def test_search_replace_applies_once_then_reports_not_found():
    op = SearchReplace(search="label = 'Score'", replace="label = 'Points'")
    result = apply_edits(SOURCE, [op, op])

    assert result.applied_count == 1
    assert "label = 'Points'" in result.code
    assert len(result.errors) == 1
    assert result.errors[0].index == 1
    assert "not found" in result.errors[0].message


def test_ambiguous_search_leaves_source_unchanged():
    result = apply_edits(SOURCE, [SearchReplace(search="score", replace="points")])
    assert result.code == SOURCE
    assert result.applied_count == 0
    assert "Ambiguous" in result.errors[0].message


def test_full_rewrite_takes_precedence():
    ops = [
        SearchReplace(search="label = 'Score'", replace="label = 'X'"),
        FullRewrite(code="def Game(rounds, h, theme, hooks):\n    return h('p', None, 'new')\n"),
    ]
    result = apply_edits(SOURCE, ops)
    assert result.was_full_rewrite
    assert result.applied_count == 1
    assert "'new'" in result.code
    assert "label" not in result.code


def test_insert_after_matches_trimmed_line():
    op = InsertAfter(anchor="label = 'Score'", code="    label = label.upper()")
    result = apply_edits(SOURCE, [op])
    lines = result.code.split("\n")
    assert result.applied_count == 1
    assert lines[3] == "    label = label.upper()"
    assert lines[2].strip() == "label = 'Score'"


def test_insert_after_missing_anchor():
    result = apply_edits(SOURCE, [InsertAfter(anchor="no such line", code="x = 1")])
    assert result.code == SOURCE
    assert "Anchor line not found" in result.errors[0].message


def test_tool_calls_with_bad_json_are_reported_per_call():
    calls = [
        call("search_replace", "{not json", 0),
        call("search_replace", {"search": "label = 'Score'", "replace": "label = 'Pts'"}, 1),
        call("rename_symbol", {"old": "a", "new": "b"}, 2),
    ]
    result = apply_tool_edits(SOURCE, calls)

    assert result.applied_count == 1
    assert "label = 'Pts'" in result.code
    assert [e.index for e in result.errors] == [0, 2]
    assert "Invalid JSON" in result.errors[0].message
    assert str(result.errors[1]) == "rename_symbol#2: Unknown tool: rename_symbol"


def test_tool_full_rewrite_ignores_other_calls():
    calls = [
        call("search_replace", {"search": "label", "replace": "x"}, 0),
        call("full_rewrite", {"code": "def Game(rounds, h, theme, hooks):\n    return h('div')\n"}, 1),
    ]
    result = apply_tool_edits(SOURCE, calls)
    assert result.was_full_rewrite
    assert result.errors == []
    assert result.code.startswith("def Game")
    assert "label" not in result.code


def test_tool_full_rewrite_with_invalid_json_keeps_source():
    result = apply_tool_edits(SOURCE, [call("full_rewrite", "{oops")])
    assert result.code == SOURCE
    assert result.applied_count == 0
    assert len(result.errors) == 1
