import json
from pathlib import Path
from typing import Dict, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from speedrun.const import (
    CONFIG_FILE_NAME,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_ENUM_TIMEOUT_MS,
    DEFAULT_GENERATE_TIMEOUT_S,
    DEFAULT_LOCALHOST_RETRIES,
    DEFAULT_LOCALHOST_TIMEOUT_MS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OLLAMA_PORT,
    DEFAULT_QUALITY_WEIGHT,
    DEFAULT_SPEED_WEIGHT,
    DEFAULT_SUBNET_BATCH_SIZE,
    LIBRARY_LOG_LEVELS,
)


class Config(BaseSettings):
    """Run-wide configuration for Ollama Speedrun.

    Built once at startup and handed to every component; it is frozen so no
    stage can change settings under another.
    """

    # Network discovery
    ollama_port: int = Field(default=DEFAULT_OLLAMA_PORT, ge=1, le=65535)
    connect_timeout_ms: int = Field(default=DEFAULT_CONNECT_TIMEOUT_MS, gt=0)
    localhost_timeout_ms: int = Field(default=DEFAULT_LOCALHOST_TIMEOUT_MS, gt=0)
    localhost_retries: int = Field(default=DEFAULT_LOCALHOST_RETRIES, ge=1)
    subnet_batch_size: int = Field(default=DEFAULT_SUBNET_BATCH_SIZE, ge=1)
    scan_subnets: bool = True

    # Enumeration
    enum_timeout_ms: int = Field(default=DEFAULT_ENUM_TIMEOUT_MS, gt=0)

    # Benchmark
    generate_timeout_s: float = Field(default=DEFAULT_GENERATE_TIMEOUT_S, gt=0)

    # Scoring weights (intended to sum to 1.0)
    speed_weight: float = Field(default=DEFAULT_SPEED_WEIGHT, ge=0)
    quality_weight: float = Field(default=DEFAULT_QUALITY_WEIGHT, ge=0)

    # Logging
    log_level: str = DEFAULT_LOG_LEVEL
    library_log_levels: Dict[str, str] = dict(LIBRARY_LOG_LEVELS)

    model_config = SettingsConfigDict(
        protected_namespaces=('settings_',),
        env_prefix='',
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def load_config_from_json(cls) -> Dict[str, Any]:
        """Load configuration from config.json file."""
        config_path = Path(CONFIG_FILE_NAME)
        if config_path.exists():
            with open(config_path, 'r') as f:
                return json.load(f)
        return {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        Customise the sources for settings.

        Order of precedence (highest to lowest):
        1. Init settings (kwargs passed to constructor, e.g. CLI flags)
        2. Environment variables
        3. JSON config file
        4. Default values
        """
        def json_source():
            return cls.load_config_from_json()

        return (
            init_settings,
            env_settings,
            json_source,
        )
