"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PY_REALM_",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Canvas Configuration
    canvas_width: float = Field(default=1200.0, description="Logical canvas width")
    canvas_height: float = Field(default=800.0, description="Logical canvas height")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Diagnostics
    check_layout_quality: bool = Field(
        default=False,
        description="Run the shapely layout report after every generation and log problems",
    )


settings = Settings()
