from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")

    # Fee category whose amount is the full (non-concessional) course fee
    open_fee_category: str = Field("Open", alias="OPEN_FEE_CATEGORY")
    tuition_fee_type: str = Field("Tuition Fee", alias="TUITION_FEE_TYPE")
    scholarship_fee_type: str = Field("Scholarship", alias="SCHOLARSHIP_FEE_TYPE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
