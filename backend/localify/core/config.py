from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "Localify Preview Server"

    # On-disk layout: PROJECTS_DIR/{project_id}/project.json + flat artifacts
    PROJECTS_DIR: Path = Path.home() / ".localify" / "Projects"

    # Preview server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    MAX_FILE_SIZE: int = 10_000_000
    MAX_REQUESTS: int = 1000
    REQUIRE_CLIENT_HEADERS: bool = True
    REQUEST_TIMEOUT_S: float = 10.0
    STARTUP_TIMEOUT_S: float = 5.0

    LOG_LEVEL: str = "INFO"
    # per-logger overrides, e.g. LOCALIFY_LOG_LEVELS={"localify.requests": "WARNING"}
    LOG_LEVELS: dict[str, str] = {}

    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOCALIFY_")


@lru_cache
def get_settings() -> Settings:
    return Settings()
