from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INSIGHT_RULES_",
        env_file=".env",
        extra="ignore",
    )

    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Default encoding for rule bodies loaded from files
    RULE_BODY_ENCODING: str = "utf-8"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
