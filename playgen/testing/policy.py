"""Static policy gate for generated game components.

This is a token-level scan. It runs before anything parses or compiles the
source, so a rejected component never reaches the interpreter. String literals
and comments are blanked first, so only code can trip a pattern.
"""
import io
import re
import tokenize
from typing import List

from playgen.config import config

# Attributes that lead from a generator, coroutine, traceback or code object
# back to frames and their globals.
FRAME_ATTRIBUTES = (
    "gi_frame", "gi_code", "gi_yieldfrom",
    "cr_frame", "cr_code", "cr_await",
    "ag_frame", "ag_code", "ag_await",
    "f_back", "f_globals", "f_locals", "f_builtins", "f_code", "f_trace",
    "tb_frame", "tb_next",
    "co_code",
)

ENTRY_POINT_PATTERN = re.compile(
    r"^def\s+Game\s*\(\s*rounds\s*,\s*h\s*,\s*theme\s*,\s*hooks\s*\)\s*:",
    re.MULTILINE,
)
ENTRY_POINT = "def Game(rounds, h, theme, hooks):"

FORBIDDEN_PATTERNS = [
    # imports
    (r"^\s*import\s+\w", "import statements"),
    (r"^\s*from\s+[\w.]+\s+import\b", "import statements"),
    (r"\b__import__\b", "__import__"),
    # dynamic code
    (r"\beval\s*\(", "eval()"),
    (r"\bexec\s*\(", "exec()"),
    (r"\bcompile\s*\(", "compile()"),
    # files and persistent storage
    (r"\bopen\s*\(", "open()"),
    (r"\bos\s*\.", "os"),
    (r"\bpathlib\b", "pathlib"),
    (r"\bshelve\b", "shelve"),
    (r"\bpickle\b", "pickle"),
    (r"\bsqlite3\b", "sqlite3"),
    # network
    (r"\bsocket\b", "socket"),
    (r"\burllib\b", "urllib"),
    (r"\brequests\s*\.", "requests"),
    (r"\bhttp\.(client|server)\b", "http"),
    # ambient and introspection objects
    (r"\bglobals\s*\(", "globals()"),
    (r"\blocals\s*\(", "locals()"),
    (r"\bvars\s*\(", "vars()"),
    (r"\b__builtins__\b", "__builtins__"),
    (r"\bsys\s*\.", "sys"),
    (r"\bgetattr\s*\(", "getattr()"),
    (r"\bsetattr\s*\(", "setattr()"),
    (r"\bdelattr\s*\(", "delattr()"),
    (r"\b__\w+__\b", "dunder names"),
    (r"\.\s*(" + "|".join(FRAME_ATTRIBUTES) + r")\b", "frame introspection"),
]

_COMPILED_PATTERNS = [(re.compile(p, re.MULTILINE), name) for p, name in FORBIDDEN_PATTERNS]

_BLANKED_TOKENS = {tokenize.STRING, tokenize.COMMENT}
if hasattr(tokenize, "FSTRING_MIDDLE"):
    _BLANKED_TOKENS.add(tokenize.FSTRING_MIDDLE)


def code_only(source: str) -> str:
    """
    Blank out string literals and comments, keeping line and column positions.
    Source that does not tokenize is returned unchanged; the compile gate reports it.
    """
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (tokenize.TokenError, SyntaxError):
        return source

    lines = [list(line) for line in source.splitlines(keepends=True)]
    for tok in tokens:
        if tok.type not in _BLANKED_TOKENS:
            continue
        (start_row, start_col), (end_row, end_col) = tok.start, tok.end
        for row in range(start_row, end_row + 1):
            if row > len(lines):
                break
            line = lines[row - 1]
            first = start_col if row == start_row else 0
            last = end_col if row == end_row else len(line)
            for i in range(first, min(last, len(line))):
                if line[i] != "\n":
                    line[i] = " "
    return "".join("".join(line) for line in lines)


def check_policy(source: str) -> List[str]:
    """Return policy violations for ``source``; an empty list means it may be compiled."""
    errors = []
    code = code_only(source)

    if not ENTRY_POINT_PATTERN.search(code):
        errors.append(f"Component must define the entry point `{ENTRY_POINT}` at module level")

    line_count = len(source.split("\n"))
    if line_count > config.MAX_COMPONENT_LINES:
        errors.append(f"Component is {line_count} lines (max {config.MAX_COMPONENT_LINES})")

    # learner-facing text such as "open (the box)" is not code
    reported = set()
    for pattern, name in _COMPILED_PATTERNS:
        if name not in reported and pattern.search(code):
            reported.add(name)
            errors.append(f"Forbidden API used: {name}")

    return errors
