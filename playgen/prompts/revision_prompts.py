CONFIG_REVISION_SYSTEM_PROMPT = """
You are fixing a game config JSON. Apply ONLY the specific fixes listed below. Do not change anything else.
Output ONLY the fixed JSON array. No markdown, no explanation.

## Config Schema

{schema}
"""

CONFIG_REVISION_USER_TEMPLATE = """Fix this game config:

## Game Spec
Title: {title}
Type: {game_type}

## Current Config
{candidate}

## Critic Scores
{scores}

## Required Fixes
{instructions}

Apply ONLY these fixes. Do not change anything else."""

EDIT_TOOLS_OVERVIEW = """
You have three editing tools available:

1. **search_replace**: Find exact text and replace it. Use for targeted edits and deletions. The search text must match exactly (including whitespace and indentation) and appear exactly once in the code.
2. **insert_after**: Insert new code after a matched anchor line. The anchor is matched by trimming whitespace and must appear exactly once.
3. **full_rewrite**: Replace the entire component. Use ONLY when you need more than 5 individual edits. If you use this, all other edits are ignored.
"""

CODE_REVISION_SYSTEM_PROMPT = (
    """
You are fixing a Python game component for an educational game.
"""
    + EDIT_TOOLS_OVERVIEW
    + """
## Rules
- Prefer search_replace for most fixes. It is the most precise.
- Use insert_after when adding new code blocks (helper functions, state declarations, element sections).
- Use full_rewrite ONLY as a last resort for extensive changes.
- Do NOT output any text explanation. Use ONLY the tools.
- Preserve indentation exactly when writing search/replace text. Python indentation is significant.
- Each search_replace match must be unique in the code. Include enough surrounding context to disambiguate.
- Keep the entry point `def Game(rounds, h, theme, hooks):` unchanged. No imports, classes or names starting with `_`.
"""
)

CODE_REVISION_USER_TEMPLATE = """Fix this game component:

## Game Spec
Title: {title}
Concept: {concept}

## Current Code (with line numbers for reference)
{numbered_code}

## Critic Scores
{scores}

## Required Fixes
{instructions}

Use the editing tools to apply ONLY these fixes. Do not change anything else."""

CUSTOM_FIX_SYSTEM_PROMPT = (
    """
You are fixing a Python game component for an educational game.
"""
    + EDIT_TOOLS_OVERVIEW
    + """
## Runtime Environment
- The entry point is `def Game(rounds, h, theme, hooks):` and must return one element built with `h(tag, props, *children)`.
- `theme` is a dict of colors (bg, surface, surfaceLight, border, borderHover, accent, accentHover, text, textMuted, correct, correctBg, incorrect, incorrectBg, warning, warningBg, white).
- `hooks` provides use_state, use_effect, use_ref, use_memo, use_callback and use_reducer.
- `rounds` may be an empty list.
- No imports, classes, global/nonlocal, names starting with `_`, or system access.

## Rules
- Fix ONLY the error described below. Do not change anything else.
- Do NOT output any text explanation. Use ONLY the tools.
- Preserve indentation exactly when writing search/replace text.
"""
)

CUSTOM_FIX_USER_TEMPLATE = """Fix this game component. It has the following error:

## Error
{error}

## Current Code (with line numbers for reference)
{numbered_code}

Use the editing tools to fix ONLY this error."""
