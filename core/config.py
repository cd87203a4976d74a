from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    environment: str = Field("development", alias="ENVIRONMENT")
    port: int = Field(8080, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    line_channel_access_token: Optional[str] = Field(None, alias="LINE_CHANNEL_ACCESS_TOKEN")
    line_channel_secret: Optional[str] = Field(None, alias="LINE_CHANNEL_SECRET")
    line_api_base: str = Field("https://api.line.me", alias="LINE_API_BASE")
    line_http_timeout_seconds: float = Field(15.0, alias="LINE_HTTP_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"prod", "production"}

    def validate_runtime(self) -> None:
        if not self.is_production:
            return
        missing: list[str] = []
        if not self.line_channel_access_token:
            missing.append("LINE_CHANNEL_ACCESS_TOKEN")
        if not self.line_channel_secret:
            missing.append("LINE_CHANNEL_SECRET")
        if missing:
            raise RuntimeError(f"LINE config missing: {', '.join(missing)}")

    def require_line_access_token(self) -> str:
        if not self.line_channel_access_token:
            raise RuntimeError("LINE channel access token is not configured.")
        return self.line_channel_access_token

    def require_line_channel_secret(self) -> str:
        if not self.line_channel_secret:
            raise RuntimeError("LINE channel secret is not configured.")
        return self.line_channel_secret

settings = Settings()
