from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./moviesync.db"

    # WordPress / Pods (application password, not the login password)
    wordpress_api_url: str = ""
    wordpress_api_username: str = ""
    wordpress_api_password: str = ""
    wordpress_timeout_seconds: Optional[float] = None  # None = wait forever

    omdb_api_key: str = ""
    omdb_base_url: str = "http://www.omdbapi.com/"
    omdb_batch_size: int = 3
    omdb_batch_delay_seconds: float = 1.0

    bulk_page_size: int = 100
    bulk_sync_hour: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
