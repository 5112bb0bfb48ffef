"""Targeted edits to generated component source.

The model revises custom components through tool calls instead of rewriting
whole files. ``CODE_EDIT_TOOLS`` is the catalog offered to it, and
``apply_tool_edits`` turns its calls into edits against the current source.
"""
import json
from dataclasses import dataclass, field
from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from playgen.generation.models import EditOperation, FullRewrite, InsertAfter, SearchReplace

CODE_EDIT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "search_replace",
            "description": (
                "Find an exact text match in the current code and replace it. Use for edits and deletions "
                "(replace with an empty string to delete). The search text must match exactly, "
                "including whitespace and indentation."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "search": {
                        "type": "string",
                        "description": "The exact text to find. Must be unique: if it appears more than once the edit is skipped.",
                    },
                    "replace": {
                        "type": "string",
                        "description": "The replacement text. Use an empty string to delete the matched text.",
                    },
                },
                "required": ["search", "replace"],
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "insert_after",
            "description": (
                "Insert new code immediately after a matched anchor line. The anchor must be a single, "
                "complete line (compared trimmed) that appears exactly once in the code."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "anchor": {"type": "string", "description": "An exact line of code to anchor on. Must be unique in the file."},
                    "code": {"type": "string", "description": "The new code to insert after the anchor line."},
                },
                "required": ["anchor", "code"],
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "full_rewrite",
            "description": (
                "Replace the entire component code. Use ONLY when the changes are too extensive for targeted "
                "edits (more than 5 individual edits). Prefer search_replace and insert_after for smaller fixes."
            ),
            "parameters": {
                "type": "object",
                "properties": {"code": {"type": "string", "description": "The complete rewritten component code."}},
                "required": ["code"],
                "additionalProperties": False,
            },
        },
    },
]

_operation_adapter = TypeAdapter(EditOperation)


@dataclass
class EditError:
    tool: str
    index: int
    message: str

    def __str__(self):
        return f"{self.tool}#{self.index}: {self.message}"


@dataclass
class EditResult:
    code: str
    applied_count: int = 0
    errors: List[EditError] = field(default_factory=list)
    was_full_rewrite: bool = False


def _truncate(text: str, limit: int = 80) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _apply_search_replace(code: str, op: SearchReplace) -> str:
    if not op.search:
        raise ValueError("Empty search string")
    occurrences = code.count(op.search)
    if occurrences == 0:
        raise ValueError(f'Search text not found: "{_truncate(op.search)}"')
    if occurrences > 1:
        raise ValueError(f"Ambiguous match: search text appears {occurrences} times, must be unique")
    return code.replace(op.search, op.replace, 1)


def _apply_insert_after(code: str, op: InsertAfter) -> str:
    anchor = op.anchor.strip()
    if not anchor:
        raise ValueError("Empty anchor string")
    lines = code.split("\n")
    matches = [idx for idx, line in enumerate(lines) if line.strip() == anchor]
    if not matches:
        raise ValueError(f'Anchor line not found: "{_truncate(op.anchor)}"')
    if len(matches) > 1:
        raise ValueError(f"Ambiguous anchor: line appears {len(matches)} times, must be unique")
    lines.insert(matches[0] + 1, op.code)
    return "\n".join(lines)


def apply_edits(source: str, operations: Sequence) -> EditResult:
    """Apply edit operations in order; a full rewrite, if present, wins outright."""
    for op in operations:
        if isinstance(op, FullRewrite):
            return EditResult(code=op.code, applied_count=1, was_full_rewrite=True)

    result = EditResult(code=source)
    for index, op in enumerate(operations):
        try:
            if isinstance(op, SearchReplace):
                result.code = _apply_search_replace(result.code, op)
            elif isinstance(op, InsertAfter):
                result.code = _apply_insert_after(result.code, op)
            else:
                raise ValueError(f"Unsupported operation: {type(op).__name__}")
        except ValueError as e:
            result.errors.append(EditError(tool=getattr(op, "tool", "unknown"), index=index, message=str(e)))
            continue
        result.applied_count += 1
    return result


def _parse_call(call) -> EditOperation:
    try:
        args = json.loads(call.arguments) if call.arguments else {}
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON arguments: {e.msg}")
    if not isinstance(args, dict):
        raise ValueError("Invalid JSON arguments: expected an object")
    try:
        return _operation_adapter.validate_python({**args, "tool": call.name})
    except ValidationError as e:
        raise ValueError(f"Invalid arguments: {e.errors()[0]['msg']}")


def apply_tool_edits(source: str, tool_calls: Sequence) -> EditResult:
    """Turn gateway tool calls into edit operations and apply them to ``source``."""
    known = {tool["function"]["name"] for tool in CODE_EDIT_TOOLS}

    rewrite_call = next((call for call in tool_calls if call.name == "full_rewrite"), None)
    if rewrite_call is not None:
        try:
            op = _parse_call(rewrite_call)
        except ValueError as e:
            return EditResult(
                code=source,
                errors=[EditError(tool="full_rewrite", index=list(tool_calls).index(rewrite_call), message=str(e))],
                was_full_rewrite=True,
            )
        return apply_edits(source, [op])

    result = EditResult(code=source)
    for index, call in enumerate(tool_calls):
        if call.name not in known:
            result.errors.append(EditError(tool=call.name or "unknown", index=index, message=f"Unknown tool: {call.name}"))
            continue
        try:
            op = _parse_call(call)
        except ValueError as e:
            result.errors.append(EditError(tool=call.name, index=index, message=str(e)))
            continue
        step = apply_edits(result.code, [op])
        result.code = step.code
        result.applied_count += step.applied_count
        result.errors.extend(EditError(tool=err.tool, index=index, message=err.message) for err in step.errors)
    return result
