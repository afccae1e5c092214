from typing import ClassVar, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    GROQ_API_KEY: Optional[str] = Field(default=None)

    # LLM Configuration
    LLM_MODEL_NAME: str = Field(
        default="moonshotai/kimi-k2-instruct", description="Groq model used for claim extraction and judging"
    )

    # Source resolution
    SEMANTIC_SCHOLAR_API_KEY: Optional[str] = Field(default=None)
    NCBI_API_KEY: Optional[str] = Field(default=None, description="Optional NCBI E-utilities key (raises the PubMed rate limit)")
    CROSSREF_MAILTO: str = Field(
        default="research@example.com", description="Contact address sent to Crossref (polite pool)"
    )
    RESOLVER_HTTP_TIMEOUT: float = Field(default=15.0, description="Per-request timeout for resolver HTTP calls")

    # Persistence
    CLAIM_CARDS_DB_PATH: str = Field(default="claim_cards.db", description="SQLite database path for claim cards")

    LOG_LEVEL: str = Field(default="INFO", description="Log level for claimcards loggers")

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
