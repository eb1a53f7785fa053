from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Needed to bypass RLS on the users table

    # Session tokens issued by this API
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 10

    # Registration / confirmation emails
    email_confirm_redirect_to: str = "http://localhost:5000"
    register_min_interval_seconds: int = 12  # Supabase enforces 10s between confirmation emails
    resend_min_interval_seconds: int = 12
    dev_bypass_auth: bool = False  # Skip Supabase entirely and log everyone in as a dev admin

    # Sensors
    sensor_api_key: Optional[str] = None  # When set, X-Sensor-Key must match
    bin_warning_threshold: int = 70
    bin_full_threshold: int = 90
    low_battery_threshold: int = 20

    # App
    app_name: str = "smartbin-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5000,http://localhost:5173,http://127.0.0.1:5000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
