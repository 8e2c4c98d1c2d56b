from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    ENVIRONMENT: Literal["local", "production"] = "local"

    SECRET_KEY: str = ""
    ANALYTICS_API_URL: str = "http://localhost:5000"
    HTTP_CONNECT_TIMEOUT: float = 3.0
    HTTP_READ_TIMEOUT: float = 10.0

    PRICE_PANE_HEIGHT: int = 400
    OSCILLATOR_PANE_HEIGHT: int = 120
    OSCILLATOR_UPPER: float = 70.0
    OSCILLATOR_LOWER: float = 30.0

    DEMO_MODE: bool = False

    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "DEBUG"
    PORT: int = 8501

    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_empty=True, extra="ignore"
    )


settings = Settings()
