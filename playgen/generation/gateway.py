"""Single point of contact with the chat model.

Every pipeline step goes through ``ModelGateway.invoke`` so that abort checks,
tool binding and response normalization happen in one place.
"""
import json
import threading
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage

from playgen.generation.model_factory import get_langchain_model
from playgen.generation.models import PipelineAborted


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: str  # JSON-encoded


@dataclass
class ModelResponse:
    content: str
    tool_calls: List[ToolCall] = field(default_factory=list)


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return "" if content is None else str(content)


class ModelGateway:
    def __init__(self, llm: BaseChatModel, abort: Optional[threading.Event] = None):
        self.llm = llm
        self.abort = abort

    def _check_abort(self):
        if self.abort is not None and self.abort.is_set():
            raise PipelineAborted("Generation aborted by caller")

    def invoke(self, messages: Sequence[BaseMessage], tools: Optional[list] = None) -> ModelResponse:
        self._check_abort()
        runnable = self.llm.bind_tools(tools) if tools else self.llm
        message = runnable.invoke(list(messages))
        self._check_abort()

        tool_calls = [
            ToolCall(id=call.get("id") or f"call_{i}", name=call["name"], arguments=json.dumps(call.get("args", {})))
            for i, call in enumerate(getattr(message, "tool_calls", None) or [])
        ]
        # Calls whose arguments failed to parse still reach the edit engine, which reports them
        for i, call in enumerate(getattr(message, "invalid_tool_calls", None) or []):
            tool_calls.append(ToolCall(
                id=call.get("id") or f"invalid_{i}",
                name=call.get("name") or "",
                arguments=call.get("args") or "",
            ))
        return ModelResponse(content=_content_to_text(message.content), tool_calls=tool_calls)


def default_gateway(abort: Optional[threading.Event] = None, provider: str = None, model_name: str = None) -> ModelGateway:
    return ModelGateway(get_langchain_model(provider, model_name), abort=abort)
