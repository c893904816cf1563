from fastapi import Request

from api.config import Settings
from api.services.completion_relay import CompletionRelay
from api.utils.logger import configure_logging
from infra.llm.base import LLM

logger = configure_logging()


def build_llm(settings: Settings, model: str | None = None) -> LLM:
    model = model or settings.llm_model
    provider = settings.llm_provider.lower()
    if provider == "ollama":
        from infra.llm.ollama import OllamaLLM

        return OllamaLLM(model=model, temperature=settings.llm_temperature, base_url=settings.ollama_base_url)
    if provider == "openai":
        from infra.llm.openai_compatible import OpenAICompatibleLLM

        return OpenAICompatibleLLM(
            model=model,
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            temperature=settings.llm_temperature,
        )
    raise ValueError(f"Unknown LLM_PROVIDER: {settings.llm_provider!r}")


def build_relay(settings: Settings) -> CompletionRelay:
    llm = build_llm(settings)
    title_llm = build_llm(settings, settings.llm_title_model) if settings.llm_title_model else llm
    logger.info(
        "completion relay ready provider=%s model=%s title_model=%s",
        settings.llm_provider,
        settings.llm_model,
        settings.llm_title_model or settings.llm_model,
    )
    return CompletionRelay(llm=llm, title_llm=title_llm)


def get_relay(request: Request) -> CompletionRelay:
    return request.app.state.relay
