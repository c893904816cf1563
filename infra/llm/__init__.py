"""
Completion provider adapters (infra). Each adapter pulls in its own LangChain
integration package, so import concrete adapters from their module, e.g.
`from infra.llm.ollama import OllamaLLM`.
"""

from infra.llm.base import LLM, PromptMessage

__all__ = ["LLM", "PromptMessage"]
