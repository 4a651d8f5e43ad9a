# src/utils/config_loader.py

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.utils.config import load_config

FORECAST_API_URL_ENV = "FORECAST_API_URL"
DEFAULT_CONFIG_PATH = "config/config.yaml"


# -------------------
# Pydantic Configs
# -------------------
class ForecastServiceConfig(BaseModel):
    api_url: Optional[str] = None
    prediction_length: int = Field(default=20, ge=1, le=365)
    timeout_seconds: float = Field(default=10.0, gt=0)


class ValidationConfig(BaseModel):
    min_history: int = Field(default=40, ge=1)


class PresentationConfig(BaseModel):
    reveal_delay_seconds: float = Field(default=0.5, ge=0)
    date_label_format: Optional[str] = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None


class FullConfig(BaseModel):
    forecast: ForecastServiceConfig = Field(default_factory=ForecastServiceConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# -------------------
# Functions
# -------------------
def apply_env_overrides(raw_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Overlay environment variables on a raw config dictionary.

    ``FORECAST_API_URL`` replaces ``forecast.api_url`` when set and non-empty.
    """
    api_url = os.getenv(FORECAST_API_URL_ENV)
    if api_url:
        raw_config.setdefault("forecast", {})
        if raw_config["forecast"] is None:
            raw_config["forecast"] = {}
        raw_config["forecast"]["api_url"] = api_url.strip()
    return raw_config


def load_typed_config(config_path: Optional[str] = None) -> FullConfig:
    """
    Load and validate the full config as a typed Pydantic model.

    Args:
        config_path (str, optional): Path to main YAML config file.
            When None, only defaults and environment overrides are used.

    Returns:
        FullConfig: Typed configuration object.
    """
    raw_config: Dict[str, Any] = load_config(config_path) if config_path else {}
    raw_config = apply_env_overrides(raw_config)
    # Drop explicit nulls so section defaults apply
    raw_config = {k: v for k, v in raw_config.items() if v is not None}
    return FullConfig(**raw_config)
