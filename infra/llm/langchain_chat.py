"""
Shared LangChain plumbing for chat-model adapters.
Subclasses only construct the concrete LangChain chat model.
"""

from typing import AsyncIterator, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from infra.llm.base import LLM, PromptMessage

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: Sequence[PromptMessage]) -> list[BaseMessage]:
    return [_MESSAGE_TYPES[m.role](content=m.content) for m in messages]


def _chunk_text(chunk) -> str:
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    # Some providers return content blocks: [{"type": "text", "text": ...}]
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )
    return str(content)


class LangChainChatLLM(LLM):
    def __init__(self, chat_model: BaseChatModel):
        self._chat = chat_model

    async def generate(self, messages: Sequence[PromptMessage]) -> str:
        result = await self._chat.ainvoke(to_langchain_messages(messages))
        return _chunk_text(result)

    async def stream(self, messages: Sequence[PromptMessage]) -> AsyncIterator[str]:
        # astream yields AIMessageChunk objects; normalize to plain text and drop empty deltas.
        async for chunk in self._chat.astream(to_langchain_messages(messages)):
            text = _chunk_text(chunk)
            if text:
                yield text
