import json
from dataclasses import dataclass
from typing import Any, List, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.messages import SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from playgen.generation.edit_tools import CODE_EDIT_TOOLS
from playgen.generation.gateway import ModelGateway, ModelResponse
from playgen.generation.models import (
    ArticleContext,
    ConfigParseError,
    CriticResult,
    GameSpec,
    LearnerProfile,
    SpecGenerationError,
)
from playgen.prompts.build_prompts import (
    CONFIG_BUILDER_SYSTEM_PROMPT,
    CONFIG_BUILDER_USER_TEMPLATE,
    CUSTOM_CODE_SYSTEM_PROMPT,
    CUSTOM_CODE_USER_TEMPLATE,
    CUSTOM_GAME_SYSTEM_PROMPT,
    CUSTOM_GAME_USER_TEMPLATE,
)
from playgen.prompts.critic_prompts import CRITIC_SYSTEM_PROMPT, CRITIC_USER_TEMPLATE
from playgen.prompts.design_prompts import (
    ARTICLE_CONTEXT,
    REFERENCE_CONTEXT,
    DESIGN_PRINCIPLES,
    SPEC_SYSTEM_PROMPT,
    SPEC_USER_TEMPLATE,
    TOPIC_OPEN,
    TOPIC_REQUESTED,
)
from playgen.prompts.revision_prompts import (
    CODE_REVISION_SYSTEM_PROMPT,
    CODE_REVISION_USER_TEMPLATE,
    CONFIG_REVISION_SYSTEM_PROMPT,
    CONFIG_REVISION_USER_TEMPLATE,
    CUSTOM_FIX_SYSTEM_PROMPT,
    CUSTOM_FIX_USER_TEMPLATE,
)
from playgen.validation.renderer_schemas import get_renderer_catalog, get_renderer_schema


@dataclass
class LLMExchange:
    """One prompt/response pair, kept for the trace."""
    system_prompt: str
    user_prompt: str
    response: ModelResponse

    def to_trace(self) -> dict:
        return {
            "systemPrompt": self.system_prompt,
            "userPrompt": self.user_prompt,
            "response": self.response.content,
        }


# --- Parsing helpers ---

def extract_json(text: str) -> Any:
    """
    Pull a JSON value out of model output.
    Handles bare JSON, fenced blocks and JSON preceded by chatter.
    """
    parser = JsonOutputParser()
    candidates = [text]
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if starts:
        start = min(starts)
        end = max(text.rfind("]"), text.rfind("}"))
        candidates.append(text[start:])
        if end > start:
            candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            value = parser.parse(candidate)
        except OutputParserException:
            continue
        if value is not None:
            return value
    raise ConfigParseError("Could not extract valid JSON from LLM response", raw=text)


def parse_game_spec(data: Any) -> GameSpec:
    if not isinstance(data, dict):
        raise SpecGenerationError("Invalid game spec: expected a JSON object")
    missing = [key for key in ("id", "title", "gameType", "rounds") if not data.get(key)]
    if missing:
        raise SpecGenerationError(f"Invalid game spec: missing required fields ({', '.join(missing)})")
    try:
        return GameSpec.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"])
        raise SpecGenerationError(f"Invalid game spec: {where}: {first['msg']}")


# --- Formatting helpers ---

def number_lines(code: str) -> str:
    return "\n".join(f"{i + 1:>4} | {line}" for i, line in enumerate(code.split("\n")))


def _join(values: List[str], empty: str = "") -> str:
    return ", ".join(values) if values else empty


def format_profile(profile: LearnerProfile) -> str:
    lines = [
        f"Name: {profile.name}",
        f"Subject: {profile.subject}",
        f"Level: {profile.level}",
        f"Context: {profile.context}",
        "",
        f"Known strengths: {_join(profile.known_strengths)}",
        f"Known gaps: {_join(profile.known_gaps)}",
        f"Misconceptions: {_join(profile.misconceptions, 'None identified yet')}",
        "",
        f"Learning style: {_join(profile.preferred_modalities)}",
        f"Response to challenge: {profile.response_to_challenge}",
        f"Engagement triggers: {_join(profile.engagement_triggers)}",
        "",
        f"Current module: {profile.current_module}",
        f"Completed modules: {_join(profile.modules_completed)}",
        f"Upcoming topics: {_join(profile.upcoming_topics)}",
    ]
    text = "\n".join(lines)
    if profile.recent_performance:
        records = []
        for p in profile.recent_performance:
            errors = f" (errors: {', '.join(p.notable_errors)})" if p.notable_errors else ""
            records.append(f"- {p.game}: {p.score:g}/{p.max_score:g}{errors}")
        text += "\n\nRecent game performance:\n" + "\n".join(records)
    return text


def format_topic(topic: Optional[str]) -> str:
    return TOPIC_REQUESTED.format(topic=topic) if topic else TOPIC_OPEN


def format_references(snippets: Optional[List[str]]) -> str:
    if not snippets:
        return ""
    return "\n\nReference material:\n" + "\n".join(f"- {s}" for s in snippets)


def format_article(article: Optional[ArticleContext], references: Optional[List[str]] = None) -> str:
    """Lesson block for the prompt; retrieved snippets are included with or without an article."""
    if article is None:
        if not references:
            return ""
        return REFERENCE_CONTEXT.format(references=format_references(references))
    return ARTICLE_CONTEXT.format(
        title=article.title,
        mastery_criteria=article.mastery_criteria or "Not specified",
        content=article.content.strip(),
        references=format_references(list(article.references) + list(references or [])),
    )


def format_rounds(spec: GameSpec, seed_label: str = "Content seed") -> str:
    return "\n".join(
        f"- Round {r.round_number}: {r.focus}\n  {seed_label}: {r.content_seed}" for r in spec.rounds
    )


def format_scores(critique: CriticResult) -> str:
    return "\n".join(f"- {d.name}: {d.score}/3 - {d.feedback}" for d in critique.dimensions)


def format_candidate(candidate: Any, is_custom: bool) -> str:
    if is_custom:
        return f"[Custom Game Component Code]\n{candidate}"
    return json.dumps(candidate, indent=2, ensure_ascii=False)


class GameAgentChain:
    """Prompt templates for each pipeline step, invoked through the model gateway."""

    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    def call(self, prompt: ChatPromptTemplate, variables: dict, tools: Optional[list] = None) -> LLMExchange:
        messages = prompt.format_messages(**variables)
        response = self.gateway.invoke(messages, tools=tools)
        return LLMExchange(
            system_prompt=messages[0].content,
            user_prompt=messages[-1].content,
            response=response,
        )

    # --- Phase 1: Design ---
    def get_spec_prompt(self):
        system = SPEC_SYSTEM_PROMPT.format(principles=DESIGN_PRINCIPLES, catalog=get_renderer_catalog())
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=system),
            ("user", SPEC_USER_TEMPLATE)
        ])

    def get_custom_game_prompt(self):
        """Merged design and build: one call that returns component source."""
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=CUSTOM_GAME_SYSTEM_PROMPT + DESIGN_PRINCIPLES),
            ("user", CUSTOM_GAME_USER_TEMPLATE)
        ])

    # --- Phase 2: Build ---
    def get_config_builder_prompt(self, spec: GameSpec):
        system = CONFIG_BUILDER_SYSTEM_PROMPT.format(
            round_count=len(spec.rounds),
            schema=get_renderer_schema(spec.game_type),
        )
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=system),
            ("user", CONFIG_BUILDER_USER_TEMPLATE)
        ])

    def get_custom_code_prompt(self):
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=CUSTOM_CODE_SYSTEM_PROMPT),
            ("user", CUSTOM_CODE_USER_TEMPLATE)
        ])

    # --- Phase 3: Critic ---
    def get_critic_prompt(self):
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=CRITIC_SYSTEM_PROMPT),
            ("user", CRITIC_USER_TEMPLATE)
        ])

    # --- Phase 4: Revision ---
    def get_config_revision_prompt(self, spec: GameSpec):
        system = CONFIG_REVISION_SYSTEM_PROMPT.format(schema=get_renderer_schema(spec.game_type))
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=system),
            ("user", CONFIG_REVISION_USER_TEMPLATE)
        ])

    def get_code_revision_prompt(self):
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=CODE_REVISION_SYSTEM_PROMPT),
            ("user", CODE_REVISION_USER_TEMPLATE)
        ])

    def get_custom_fix_prompt(self):
        return ChatPromptTemplate.from_messages([
            SystemMessage(content=CUSTOM_FIX_SYSTEM_PROMPT),
            ("user", CUSTOM_FIX_USER_TEMPLATE)
        ])

    # --- Step wrappers used by the orchestrator ---
    def design(self, profile: LearnerProfile, topic=None, article=None, references=None):
        exchange = self.call(self.get_spec_prompt(), {
            "profile": format_profile(profile),
            "article": format_article(article, references),
            "topic_instruction": format_topic(topic),
        })
        try:
            data = extract_json(exchange.response.content)
        except ConfigParseError as e:
            raise SpecGenerationError(str(e))
        return parse_game_spec(data), exchange

    def build(self, spec: GameSpec):
        if spec.is_custom:
            exchange = self.call(self.get_custom_code_prompt(), {
                "title": spec.title,
                "concept": spec.concept,
                "pedagogical_goal": spec.pedagogical_goal,
                "difficulty": spec.difficulty,
                "mechanic": spec.custom_renderer_description or spec.concept,
                "rounds": format_rounds(spec, "Content"),
            })
            return exchange.response.content, exchange
        exchange = self.call(self.get_config_builder_prompt(spec), {
            "title": spec.title,
            "game_type": spec.game_type.value,
            "concept": spec.concept,
            "pedagogical_goal": spec.pedagogical_goal,
            "difficulty": spec.difficulty,
            "rounds": format_rounds(spec),
        })
        return extract_json(exchange.response.content), exchange

    def build_custom_game(self, profile: LearnerProfile, topic=None, article=None, references=None):
        return self.call(self.get_custom_game_prompt(), {
            "profile": format_profile(profile),
            "article": format_article(article, references),
            "topic_instruction": format_topic(topic),
        })

    def revise_config(self, spec: GameSpec, candidate: Any, critique: CriticResult):
        exchange = self.call(self.get_config_revision_prompt(spec), {
            "title": spec.title,
            "game_type": spec.game_type.value,
            "candidate": format_candidate(candidate, is_custom=False),
            "scores": format_scores(critique),
            "instructions": critique.revision_instructions or "",
        })
        return extract_json(exchange.response.content), exchange

    def revise_code(self, spec: GameSpec, code: str, critique: CriticResult) -> LLMExchange:
        return self.call(self.get_code_revision_prompt(), {
            "title": spec.title,
            "concept": spec.concept,
            "numbered_code": number_lines(code),
            "scores": format_scores(critique),
            "instructions": critique.revision_instructions or "",
        }, tools=CODE_EDIT_TOOLS)

    def fix_code(self, code: str, error: str) -> LLMExchange:
        return self.call(self.get_custom_fix_prompt(), {
            "error": error,
            "numbered_code": number_lines(code),
        }, tools=CODE_EDIT_TOOLS)
