from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl
from typing import List, Optional
from pydantic import field_validator
from urllib.parse import urlparse, urlunparse


class Settings(BaseSettings):
    log_level: str = "INFO"

    database_url: str = "sqlite:///./marketplace.sqlite3"
    database_echo: bool = False

    cors_origins: List[AnyHttpUrl] | List[str] = ["http://localhost:3000"]
    cors_origin_regex: Optional[str] = None

    best_clients_default_limit: int = 2

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors(cls, v):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_driver(cls, v: str) -> str:
        raw = str(v)
        parsed = urlparse(raw)
        # normalize postgres URLs to the SQLAlchemy psycopg v3 driver
        if parsed.scheme in ("postgres", "postgresql"):
            return urlunparse(parsed._replace(scheme="postgresql+psycopg"))
        return raw


settings = Settings()
