from functools import lru_cache
from typing import List, Literal
import os
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"


class HybridSlot(BaseModel):
    """One fusion slot: which strategy runs and the weight applied to its scores."""
    strategy: Literal["content", "collaborative", "history", "popular"]
    weight: float = Field(ge=0)


# Default fusion: history runs in two slots and content has none.
DEFAULT_HYBRID_SLOTS = [
    HybridSlot(strategy="history", weight=0.2),
    HybridSlot(strategy="collaborative", weight=0.3),
    HybridSlot(strategy="history", weight=0.3),
    HybridSlot(strategy="popular", weight=0.2),
]

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "CardReco"
    DEBUG: bool = False
    LOG_LEVEL: str = ""  # overrides DEBUG when set, e.g. "WARNING"
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "cardshop"
    MONGO_TLS: bool = False

    # OpenAI (text completion collaborator)
    OPENAI_API_KEY: str = ""
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    openai_timeout_s: int = 30  # seconds
    llm_temperature: float = 0.7
    llm_max_tokens: int = 512

    # API
    api_prefix: str = "/api"
    ALLOWED_ORIGINS: str = ""  # CSV

    # Recommendation tuning
    default_limit: int = 10
    max_limit: int = 50
    collaborative_neighbors: int = 5
    hybrid_slots: List[HybridSlot] = Field(default_factory=lambda: list(DEFAULT_HYBRID_SLOTS))

    # Generative path
    generative_history_lines: int = 10
    generative_candidate_limit: int = 50

    # Chat path
    chat_catalog_limit: int = 100
    chat_history_orders: int = 5
    chat_max_cards: int = 8

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def llm_enabled(self) -> bool:
        return bool(self.OPENAI_API_KEY)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
