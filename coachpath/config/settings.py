"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    
    # Application
    app_name: str = "CoachPath Trajectory Engine"
    debug: bool = False
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 8000
    
    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/coachpath"
    
    # LLM gateway (rule-guided classification tier)
    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://ai.gateway.lovable.dev/v1"
    llm_model: str = "google/gemini-2.5-flash"
    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    llm_timeout_seconds: float = Field(default=8.0, gt=0.0)
    
    # Indicators
    recent_indicator_limit: int = Field(default=5, ge=1)
    status_lookback_days: int = Field(default=7, ge=1)
    
    # Monitoring
    log_level: str = "INFO"
    json_logs: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
