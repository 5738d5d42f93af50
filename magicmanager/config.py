from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Magic Collection Manager"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/magicmanager"

    scryfall_api_base: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "MagicCollectionManager/1.0"
    scryfall_timeout: float = 30.0

    # Scryfall asks for 50-100ms between requests
    request_interval: float = 0.1
    rate_limit_backoff: float = 1.0

    # Shared with the auth provider that issues bearer tokens
    auth_secret_key: str = "change-me"
    auth_token_max_age: int = 3600


settings = Settings()


# =============================================================================
# REQUEST LIMITS
# =============================================================================

# Card search (Scryfall pages beyond 10 are rejected)
MAX_SEARCH_PAGE = 10
MAX_QUERY_LENGTH = 100

# Collection browsing
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# One initial dispatch plus a single retry after a 429
MAX_ATTEMPTS = 2
