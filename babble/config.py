"""
Babble Service Configuration
"""

from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===== Service =====
    SERVICE_NAME: str = Field(default="babble")
    SERVICE_VERSION: str = Field(default="1.0.0")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    LOG_LEVEL: str = Field(default="info")
    DEBUG: bool = Field(default=False)

    # ===== Chain store =====
    CHAIN_DB_PATH: str = Field(default="var/babble.sqlite3")
    CHAIN_ORDER: int = Field(default=2, ge=1)
    CONNECTION_IDLE_TIMEOUT: float = Field(default=600.0, gt=0)

    # ===== Generation =====
    MAX_WORDS: int = Field(default=100, gt=0)
    TIME_LIMIT_SECONDS: float = Field(default=2.0)  # <= 0 disables the budget
    HISTORY_SIZE: int = Field(default=100, ge=0)  # 0 disables de-duplication
    FILTER_INPUT: bool = Field(default=True)
    SELECTION_POLICY: Literal["rarest", "tiered"] = Field(default="rarest")

    # ===== Learning =====
    LEARNING_ENABLED: bool = Field(default=True)
    MAX_CONSECUTIVE: int = Field(default=3, ge=1)
    MAX_TOTAL: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
