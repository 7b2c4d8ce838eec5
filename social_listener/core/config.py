from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "Social Listener Themes API"
    # If ALLOWED_ORIGINS env is provided, it should be a JSON array.
    # Example: ["http://localhost:8501", "http://127.0.0.1:8501"]
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Themes service binding (PORT overrides the port)
    host: str = "0.0.0.0"
    port: int = 3001

    # Externally produced topic-modeling output, read on every request
    themes_payload_path: Path = Path("data/themes_payload.json")

    # Upstream services consumed by the dashboard
    analytics_api_base: str = "http://127.0.0.1:8000"
    themes_api_base: str = "http://localhost:3001"
    request_timeout: float = Field(15.0, gt=0)

    # Mock data generation
    mock_seed: Optional[int] = None
    raw_record_count: int = Field(100, ge=0)

    # Raw data explorer
    page_size: int = Field(20, gt=0)

    log_level: str = "INFO"


settings = Settings()
