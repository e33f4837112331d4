from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = Field("0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(3000, description="Port the HTTP server listens on")
    database_url: str = Field("sqlite:///database.sqlite")
    api_title: str = Field("User API")
    api_version: str = Field("1.0.0")
    reset_on_startup: bool = Field(True, description="Drop and recreate the users table on start")
    seed_on_startup: bool = Field(True, description="Insert the seed users on start")
    log_level: str = Field("INFO")


settings = Settings()
