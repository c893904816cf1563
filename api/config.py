from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from api.utils.logger import configure_logging

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./tutor-chat.db"

    llm_provider: str = "openai"  # openai|ollama
    llm_base_url: str = "https://api.studio.nebius.com/v1/"
    llm_api_key: str | None = None
    llm_model: str = "deepseek-ai/DeepSeek-R1-Distill-Llama-70B"
    llm_title_model: str | None = None
    llm_temperature: float = 0.7
    ollama_base_url: str = "http://localhost:11434"

    log_level: str = "INFO"
    log_dir: str = "logs"
    cors_origins: str = "*"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared between the request thread and the stream task.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


settings = get_settings()
# Installs the shared logger before any module asks for it.
configure_logging(log_dir=settings.log_dir, level=settings.log_level)
engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def create_db():
    # Tables register on Base when the models module is imported.
    import api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
