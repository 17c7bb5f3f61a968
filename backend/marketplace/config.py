"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All deployment-specific values come from environment variables or .env
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: runs out-of-the-box on a local SQLite file
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./marketplace.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    auto_create_schema: bool = True

    # Catalog
    seed_catalog: bool = True
    default_image_url: str = "https://via.placeholder.com/150"
    default_seller_address: str = "0x123456789abcdef123456789abcdef123456789a"

    # Ledger
    default_balance: float = 100.0
    balance_lookup_enabled: bool = True
    # Strict: upstream failure returns 503 instead of seeding the default balance
    balance_lookup_strict: bool = False

    # Chain RPC (read-only balance lookup)
    chain_rpc_url: str = "https://eth-sepolia.public.blastapi.io"
    chain_rpc_timeout_seconds: float = 10.0
    chain_rpc_max_retries: int = 2
    chain_rpc_base_delay_ms: int = 250
    chain_rpc_max_delay_ms: int = 5_000

    # API
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
