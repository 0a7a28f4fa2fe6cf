from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from packages.mm_core.errors import ConfigurationError


class MockMateConfig(BaseSettings):
    """
    Application-wide settings.
    Loaded from environment variables and the local .env file.
    """
    PROJECT_NAME: str = "MockMate AI Interview"
    VERSION: str = "0.1.0"

    # Scoring / question generation (OpenAI)
    OPENAI_API_KEY: Optional[str] = None
    SCORING_MODEL: str = "gpt-4o-mini"
    QUESTION_MODEL: str = "gpt-4o-mini"
    USE_MOCK_PROVIDERS: bool = False

    # Realtime voice transport
    VOICE_TRANSPORT: str = "inprocess"  # inprocess | vapi
    VAPI_API_KEY: Optional[str] = None
    VAPI_BASE_URL: str = "https://api.vapi.ai"
    VAPI_WORKFLOW_ID: Optional[str] = None
    VAPI_TIMEOUT_SEC: float = 10.0
    VAPI_SERVER_SECRET: Optional[str] = None  # expected in the x-vapi-secret header of webhook calls
    PUBLIC_BASE_URL: Optional[str] = None  # externally reachable base URL of this API

    # Live sessions
    SESSION_FINISHED_TTL_SEC: float = 300.0

    # Document store
    STORE_BACKEND: str = "memory"  # memory | file
    STORE_DIR: str = "data/store"

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def load(cls) -> "MockMateConfig":
        """
        Load settings, wrapping any failure in ConfigurationError.
        """
        try:
            config = cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e

        if config.VOICE_TRANSPORT not in ("inprocess", "vapi"):
            raise ConfigurationError(f"Unknown VOICE_TRANSPORT: {config.VOICE_TRANSPORT}")
        if config.STORE_BACKEND not in ("memory", "file"):
            raise ConfigurationError(f"Unknown STORE_BACKEND: {config.STORE_BACKEND}")
        if config.VOICE_TRANSPORT == "vapi" and not (config.PUBLIC_BASE_URL and config.VAPI_SERVER_SECRET):
            raise ConfigurationError("The vapi transport requires PUBLIC_BASE_URL and VAPI_SERVER_SECRET")
        return config
