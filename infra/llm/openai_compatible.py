from langchain_openai import ChatOpenAI

from infra.llm.langchain_chat import LangChainChatLLM


class OpenAICompatibleLLM(LangChainChatLLM):
    """Any hosted provider speaking the OpenAI chat completions API (OpenAI, Nebius, vLLM, ...)."""

    def __init__(
        self,
        model: str,
        api_key: str | None,
        base_url: str | None = None,
        temperature: float = 0.7,
    ):
        if not api_key:
            raise ValueError("LLM_API_KEY is not configured")
        self.model = model
        super().__init__(
            ChatOpenAI(
                model=model,
                api_key=api_key,
                base_url=base_url,
                temperature=temperature,
                streaming=True,
            )
        )
