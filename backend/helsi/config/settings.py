"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Literal, Optional

# Value shipped in the example .env; treated the same as a missing key.
PLACEHOLDER_API_KEY = "your-openai-api-key-here"


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "Helsi"
    app_version: str = "1.0.0"
    debug: bool = True

    # Storage
    storage_type: str = "local"  # local, memory
    local_storage_path: str = "./data"

    # LLM Provider settings
    llm_provider: str = "openai"
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_temperature: float = 0.1
    llm_max_requests_per_minute: int = 3

    # Legacy key (still accepted)
    openai_api_key: Optional[str] = None

    # Image text extraction through the multimodal model
    ocr_enabled: bool = False

    # Scoring variants
    strain_formula: Literal["weighted", "simple"] = "weighted"
    avatar_scale_mode: Literal["fixed", "streak"] = "fixed"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/helsi.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def resolved_api_key(self) -> Optional[str]:
        """The configured model API key, or None in demo mode."""
        api_key = self.llm_api_key or self.openai_api_key
        if not api_key or api_key == PLACEHOLDER_API_KEY:
            return None
        return api_key

    @property
    def demo_mode(self) -> bool:
        return self.resolved_api_key is None


settings = Settings()
