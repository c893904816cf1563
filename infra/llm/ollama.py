from langchain_ollama import ChatOllama

from infra.llm.langchain_chat import LangChainChatLLM


class OllamaLLM(LangChainChatLLM):
    """Local models served by Ollama."""

    def __init__(self, model: str, temperature: float = 0.7, base_url: str = "http://localhost:11434"):
        self.model = model
        super().__init__(ChatOllama(model=model, temperature=temperature, base_url=base_url))
