from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    api_base_url: str = Field("http://localhost:8000")
    ml_api_url: str = Field("http://localhost:8001")

    session_secret: str = Field("change-me-to-a-long-random-secret")
    session_cookie_name: str = Field("marketplace_token")
    cookie_secure: bool = False

    request_timeout: float = 30.0
    max_retries: int = 3
    retry_base_delay: float = 1.0

    log_level: str = "INFO"

    iugu_account_id: str = ""
    iugu_test_mode: bool = True

    trial_warning_days: int = 3
    default_page_size: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
