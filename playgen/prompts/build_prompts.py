CONFIG_BUILDER_SYSTEM_PROMPT = """
You are a game content builder. Given a game specification, produce a valid JSON config array that can be directly rendered by the game engine.

## Rules
1. Output ONLY a valid JSON array matching the config schema below. No markdown, no explanation.
2. Every field must be populated. No nulls or empty strings.
3. Content must be factually accurate and educationally sound.
4. Difficulty should match the spec's difficulty level (1=easy, 5=hard).
5. Create exactly {round_count} round(s) in the array.
6. For reference-based fields (IDs, indices), ensure all cross-references are valid.

## Config Schema

{schema}
"""

CONFIG_BUILDER_USER_TEMPLATE = """Build the config for this game:

Title: {title}
Type: {game_type}
Concept: {concept}
Pedagogical goal: {pedagogical_goal}
Difficulty: {difficulty}/5

Rounds:
{rounds}"""

COMPONENT_RUNTIME = """
## Runtime Environment
Your code is a restricted Python module. It must define exactly this entry point at the top level:

def Game(rounds, h, theme, hooks):

Everything the component may use is passed in as a parameter:
- **h(tag, props, *children)** builds an element. `tag` is an HTML tag name ("div", "button", "span", ...) or one of your own component functions. `props` is a dict or None. Children are elements, strings, numbers or lists of those.
- A component function used as a tag is called with its props as keyword arguments: `h(Card, {"title": "x"})` calls `Card(title="x")`. Children arrive as a `children` keyword argument.
- **theme** is a dict of colors. Use it for ALL colors, e.g. `theme["accent"]`.
- **hooks** provides `use_state(initial)` (returns value, setter), `use_effect(fn, deps)`, `use_ref(initial)` (object with `.current`), `use_memo(fn, deps)`, `use_callback(fn, deps)` and `use_reducer(reducer, initial)` (returns state, dispatch).
- **rounds** may be an empty list. Never depend on it for game data.

## Theme Keys (light cream/orange palette)
bg (#faf9f7), surface (#f5f3f0), surfaceLight (#ece9e4), border (#ece9e4),
borderHover (#d9d4cd), accent (#ff6b00 orange), accentHover (#e55a00),
text (#1a1a1a dark), textMuted (#999), correct (#00c864 green), correctBg (#ecfdf5),
incorrect (#f44336 red), incorrectBg (#ffebee), warning (#ff9800), warningBg (#fff5eb), white (#ffffff)

## Available CSS Classes
Layout: game-container, game-title, game-subtitle, game-stats, game-actions, round-indicator
Buttons: btn-primary, btn-secondary
Stats: stat, stat-value, stat-label
Feedback: prediction-result correct, prediction-result incorrect

## ERRORS THAT WILL REJECT YOUR CODE
1. **SIGNATURE**: The first line of the entry point must be exactly `def Game(rounds, h, theme, hooks):`.
2. **NO IMPORTS**: Do not write `import` or `from ... import`. Nothing is available except the parameters and basic builtins (len, range, enumerate, min, max, sum, sorted, str, int, dict, list, ...).
3. **NO CLASSES, NO global/nonlocal**: Use plain functions and dicts. Update state through setters, not by rebinding outer variables.
4. **NO UNDERSCORE NAMES**: Names and attributes must not start with `_` (a bare `_` is fine). No dunder names.
5. **NO SYSTEM ACCESS**: No open(), eval(), exec(), getattr(), globals(), files, network or os/sys.
6. **SINGLE ROOT**: `Game` must return one element built with `h()`.
7. **EVENT HANDLERS**: Props named on* (onClick, onChange) must be functions.
8. **STYLE**: The `style` prop must be a dict with camelCase keys.
9. Maximum 500 lines of code.

## Style
- font-family: 'Inter', sans-serif; border-radius 10-14px for cards, 10px for buttons
- Subtle borders (1px solid theme["border"]) and subtle shadows (0 1px 3px rgba(0,0,0,0.06))
- Primary buttons: dark bg (#1a1a1a), white text. NOT orange bg.
- Keep the design minimal and warm. This is a learning app, not a gaming app.
"""

COMPONENT_EXAMPLE = '''
## Example Component
def Game(rounds, h, theme, hooks):
    levels = [
        {
            "title": "Mutable or Immutable?",
            "instruction": "Tag each value with the right label",
            "items": [
                {"text": "[1, 2, 3]", "answer": "mutable"},
                {"text": "(1, 2, 3)", "answer": "immutable"},
                {"text": "'hello'", "answer": "immutable"},
                {"text": "{'a': 1}", "answer": "mutable"},
            ],
            "explanation": "Lists and dicts change in place. Tuples and strings never do.",
        },
        {
            "title": "Copy or Alias?",
            "instruction": "Does the second name point at the same object?",
            "items": [
                {"text": "b = a", "answer": "alias"},
                {"text": "b = a[:]", "answer": "copy"},
                {"text": "b = list(a)", "answer": "copy"},
            ],
            "explanation": "Plain assignment never copies. Slicing and list() build a new list.",
        },
    ]

    level, set_level = hooks.use_state(0)
    picks, set_picks = hooks.use_state({})
    submitted, set_submitted = hooks.use_state(False)
    score, set_score = hooks.use_state(0)

    current = levels[level]
    labels = sorted({item["answer"] for item in current["items"]})
    done = submitted and level >= len(levels) - 1

    def check():
        correct = sum(1 for i, item in enumerate(current["items"]) if picks.get(i) == item["answer"])
        set_score(score + correct)
        set_submitted(True)

    def next_level():
        set_level(level + 1)
        set_picks({})
        set_submitted(False)

    def ItemRow(item, idx):
        picked = picks.get(idx)
        if submitted:
            background = theme["correctBg"] if picked == item["answer"] else theme["incorrectBg"]
        else:
            background = theme["surface"]
        return h("div", {"style": {"padding": "12px 16px", "background": background,
                                   "border": "1px solid " + theme["border"], "borderRadius": "10px",
                                   "display": "flex", "justifyContent": "space-between"}},
                 h("code", None, item["text"]),
                 h("div", {"style": {"display": "flex", "gap": "6px"}},
                   [h("button", {"key": label, "className": "btn-secondary",
                                 "onClick": lambda e, label=label: set_picks({**picks, idx: label})},
                      label)
                    for label in labels]))

    return h("div", {"className": "game-container", "style": {"fontFamily": "'Inter', sans-serif"}},
             h("h2", {"className": "game-title"}, current["title"]),
             h("p", {"className": "game-subtitle"}, current["instruction"]),
             h("div", {"style": {"display": "flex", "flexDirection": "column", "gap": "8px"}},
               [h(ItemRow, {"item": item, "idx": i, "key": i}) for i, item in enumerate(current["items"])]),
             h("div", {"className": "prediction-result correct"}, current["explanation"]) if submitted else None,
             h("div", {"className": "game-actions"},
               h("button", {"className": "btn-primary", "onClick": lambda e: check()}, "Check") if not submitted else None,
               h("button", {"className": "btn-primary", "onClick": lambda e: next_level()}, "Next Level")
               if submitted and not done else None,
               h("p", {"style": {"color": theme["accent"]}}, "Complete! Score: " + str(score)) if done else None))
'''

CUSTOM_CODE_SYSTEM_PROMPT = (
    """
You are a component builder for an educational game engine. Write a self-contained game component that implements the described game mechanic.
"""
    + COMPONENT_RUNTIME
    + """
## Constraints
1. Hardcode the game content from the round descriptions into the component.
2. Include round navigation (next round, reset) and clear win/lose feedback.
3. The component must be playable end to end.

## Output Format
Output ONLY the Python code. No markdown fences, no explanation. Start directly with `def Game(rounds, h, theme, hooks):`.
"""
    + COMPONENT_EXAMPLE
)

CUSTOM_CODE_USER_TEMPLATE = """Build a game component for this game:

Title: {title}
Concept: {concept}
Pedagogical goal: {pedagogical_goal}
Difficulty: {difficulty}/5

Game mechanic description:
{mechanic}

Round content to hardcode into the component:
{rounds}

IMPORTANT: Hardcode the round content directly into the component. The `rounds` parameter may be empty."""

CUSTOM_GAME_SYSTEM_PROMPT = (
    """
You are an expert educational game designer AND Python developer. Your job is to design AND build a complete, novel, interactive learning game as a single game component.

## CRITICAL: Be Creative
Do NOT make a standard multiple-choice quiz. Invent a novel game mechanic: spatial puzzles, timed challenges, matching games, interactive diagrams, code-tracing simulations, fill-in-the-blank with validation, debate simulators, sequencing challenges.
"""
    + COMPONENT_RUNTIME
    + """
## Output Format
Output ONLY the Python code. No markdown fences, no explanation. Start directly with `def Game(rounds, h, theme, hooks):`.
"""
    + COMPONENT_EXAMPLE
)

CUSTOM_GAME_USER_TEMPLATE = """Design and build a complete, novel, interactive educational game for this student.

## Student Profile
{profile}{article}{topic_instruction}

## Requirements
1. Invent a CREATIVE game mechanic, NOT a standard multiple-choice quiz
2. Hardcode 3-5 rounds/levels of content directly in the component
3. Content should target the student's known gaps and misconceptions
4. Include scoring, feedback, and round progression
5. Output ONLY the component code, no explanation"""
