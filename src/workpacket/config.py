"""Application settings, read from the environment."""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WORKPACKET_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Generation backend
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("WORKPACKET_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: Optional[str] = None
    model: str = "gpt-4o-mini"
    max_tokens: int = 4096
    temperature: float = 0.0

    # Runs are written to <runs_dir>/<assignment_id> unless an output dir is given
    runs_dir: str = "workpacket_runs"
    # Chunks handed to each generation stage
    retrieval_limit: int = 30

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
