from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================
    environment: str = "dev"  # "dev", "prod"
    debug: bool = True

    # ==========================================================================
    # DATABASE
    # ==========================================================================
    database_url: str = "sqlite:///./tradeshield.db"
    turso_database_url: str = ""  # libsql://<db>.turso.io
    turso_auth_token: str = ""

    # ==========================================================================
    # OPENAI
    # ==========================================================================
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.3  # Low temperature for consistent analysis
    openai_max_tokens: int = 2000
    openai_timeout: float = 60.0  # Seconds, per request

    # Reject model output that fails local re-validation instead of passing it through
    strict_output_validation: bool = False

    # ==========================================================================
    # CORS
    # ==========================================================================
    cors_origins: str = "*"  # Comma-separated origins, or "*" for all

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "prod"

    @property
    def is_openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def uses_turso(self) -> bool:
        return bool(self.turso_database_url and self.turso_auth_token)

    @property
    def effective_database_url(self) -> str:
        """Managed Turso database when both URL and token are set, else the local URL."""
        if not self.uses_turso:
            return self.database_url
        host = urlsplit(self.turso_database_url).netloc or self.turso_database_url
        return f"sqlite+libsql://{host}?secure=true"

    @property
    def cors_origins_list(self) -> list:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
