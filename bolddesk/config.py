from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    domain: str = ""
    api_key: str = ""
    http_timeout_seconds: float = 180.0
    page_delay_seconds: float = 0.1
    rate_limit_min_remaining: int = 5
    rate_limit_max_wait_seconds: float = 120.0
    log_format: str = "text"
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "BOLDDESK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
