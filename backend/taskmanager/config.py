"""IT Task Manager configuration — settings loaded from the environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///data/taskmanager.db"
    db_pool_size: int = 10  # Max concurrent connections (non-SQLite backends)

    # Auth
    jwt_secret: str = "change-me"  # Override in production
    jwt_ttl_seconds: int = 30 * 24 * 3600
    bcrypt_rounds: int = 12

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Rate limits (requests per minute per client)
    rate_limit_global_rpm: int = 120
    rate_limit_auth_rpm: int = 10  # login/register
    rate_limit_max_clients: int = 10_000  # per limit; least recently seen evicted first

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
