from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # External meal-plan backend (calculation, menus, users, licenses)
    backend_api_url: str = "http://localhost:3001/api"
    http_timeout_seconds: float = 15.0  # weekly/monthly menus are slow to generate

    environment: str = "development"  # "development" | "production"
    log_level: str = "INFO"

    # Per-browser transient state
    database_url: str = "postgresql+asyncpg://localhost:5432/nutriplan"
    client_state_backend: str = "database"  # "database" | "memory"
    state_cookie_name: str = "nutriplan_sid"

    # Auth cookies
    user_cookie_days: int = 30
    admin_cookie_days: int = 7

    # Menus
    default_region: str = "general"
    monthly_menu_days: int = 30
    daily_menu_stale_seconds: int = 300
    monthly_menu_stale_seconds: int = 600

    model_config = {"env_file": ".env", "env_prefix": "NUTRIPLAN_", "extra": "ignore"}

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cookie_secure(self) -> bool:
        return self.environment == "production"


settings = Settings()
