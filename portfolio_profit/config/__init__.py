"""
Application Settings
Load from environment variables and config/app.yml
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    LOG_LEVEL: str = "INFO"
    CONFIG_DIR: str = "config"

    # ======================
    # Market Data
    # ======================
    MARKET_DATA_PROVIDER: str = "finnhub"
    FINNHUB_API_KEY: Optional[str] = None
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    CACHE_TTL_SECONDS: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


def load_settings(**overrides: Any) -> Settings:
    """Build a fresh Settings instance; keyword overrides win over the environment."""
    return Settings(**overrides)


def load_app_config(config_dir: Path) -> Dict[str, Any]:
    """
    Load config/app.yml.

    Returns an empty dict when the file does not exist.

    Raises:
        ValueError: If the file is not valid YAML or its top level is not a mapping
    """
    app_file = Path(config_dir) / "app.yml"
    if not app_file.exists():
        return {}

    with open(app_file, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"{app_file} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{app_file} must contain a mapping at the top level")
    return data
