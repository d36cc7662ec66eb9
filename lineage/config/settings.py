from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - docker-compose.yml environment section
    - .env file
    - System environment

    Variable names match docker-compose conventions:
    - POSTGRES_HOST, POSTGRES_PORT, etc. (for database)
    - MAX_TREE_NODES, MAX_TREE_DEPTH (traversal bounds)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # PostgreSQL (from docker-compose)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "lineage_user"
    postgres_password: str = "lineage_pass"
    postgres_db: str = "public_business"
    database_url: Optional[str] = Field(default=None, validate_default=True)

    # Traversal bounds (thread and cluster builds)
    max_tree_nodes: int = 500
    max_tree_depth: int = 50

    # Breadcrumb / cross-link excerpt size (chars)
    excerpt_length: int = 100

    # Raise IntegrityViolation on a reply cycle instead of logging and recovering
    raise_on_cycle: bool = False

    @field_validator('max_tree_nodes', 'max_tree_depth', 'excerpt_length')
    @classmethod
    def must_be_positive(cls, v):
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator('database_url', mode='before')
    @classmethod
    def construct_database_url(cls, v, info):
        """Construct database URL from components if not explicitly set"""
        if v:
            return v

        data = info.data
        host = data.get('postgres_host', 'localhost')
        port = data.get('postgres_port', 5432)
        user = data.get('postgres_user', 'lineage_user')
        password = data.get('postgres_password', 'lineage_pass')
        db = data.get('postgres_db', 'public_business')

        return f"postgresql://{user}:{password}@{host}:{port}/{db}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
