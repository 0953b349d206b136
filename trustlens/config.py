"""TrustLens configuration — loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "TRUSTLENS_", "env_file": ".env"}

    # Google API keys
    gemini_api_key: str = ""
    web_risk_api_key: str = ""
    custom_search_api_key: str = ""
    speech_api_key: str = ""
    translate_api_key: str = ""

    # Models
    gemini_model: str = "gemini-1.5-pro-latest"
    gemini_vision_model: str = "gemini-1.5-pro-latest"

    # Collaborator behaviour
    search_engine_id: str = ""
    speech_language_code: str = "en-US"
    speech_model: str = "latest_long"
    working_language: str = "en"
    user_agent: str = "Mozilla/5.0 (compatible; TrustLens/0.1)"

    # Orchestration
    signal_timeout_ms: int = 8000
    presentation_timeout_ms: int = 15000
    page_fetch_timeout_ms: int = 10000

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"


settings = Settings()
