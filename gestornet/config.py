"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="GESTORNET_", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./gestornet.db"

    # Service
    service_name: str = "gestornet"
    log_level: str = "INFO"

    # Session token (client-local, keyed under a fixed name)
    session_file: str = ".gestornet_session.json"
    session_key: str = "gestornet_session"

    # Persistence: True = single-writer background queue, False = inline writes
    write_behind: bool = True

    # Password policy
    boss_password_min_length: int = 6
    manager_password_min_length: int = 4


settings = Settings()
