import os
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import EmailStr, Field
from typing import Optional, List

env = os.getenv("APP_ENV", "development")
env_file = f".env.{env}"


class Settings(BaseSettings):
    database_url: str
    db_pool_size: int = 10
    # CORS origins can be overridden via CORS_ORIGINS env var (JSON list)
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:3000",
            "http://localhost:5174",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:3000",
        ]
    )

    # JWT configuration, secret and algorithm have no defaults on purpose
    jwt_secret_key: str
    jwt_algorithm: str
    access_token_expire_minutes: int = 60 * 24
    jwt_cookie_name: str = "access_token"
    cookie_secure: bool = env == "production"

    # bcrypt work factor
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Bootstrap admin
    admin_name: str = "Admin User"
    # validated like LoginRequest.email, which lowercases the domain
    admin_email: EmailStr = "admin@clinic.com"
    admin_password: str = "admin123"

    # JSON file with patients to import into an empty queue at startup
    seed_file: Optional[str] = None

    debug_routes: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=env_file,
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings from the environment, built once per process."""
    return Settings()
