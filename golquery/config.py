# ============================================================================
# CLAUDE CONTEXT - GOLQUERY CONFIGURATION
# ============================================================================
# STATUS: Core Infrastructure - Configuration Management
# PURPOSE: Environment-based defaults for engine choice, CLI output and debug mode
# EXPORTS: GolQueryConfig, get_golquery_config, reset_golquery_config
# INTERFACES: Pydantic BaseSettings
# PYDANTIC_MODELS: GolQueryConfig
# DEPENDENCIES: pydantic, pydantic-settings
# SOURCE: Environment variables (GOLQUERY_*) and optional .env file
# PATTERNS: Settings Pattern, Singleton via cached function
# ENTRY_POINTS: from golquery.config import get_golquery_config
# ============================================================================

"""
golquery Configuration

Environment Variables (all optional):
    - GOLQUERY_ENGINE: Engine adapter used by FeatureStore.open (default: "geodesk")
    - GOLQUERY_GOL_PATH: Default store path for the command-line runner
    - GOLQUERY_SAMPLE_LIMIT: Features printed by the command-line runner (default: 10)
    - GOLQUERY_DEBUG_MODE: Log memory checkpoints around materialization (default: false)

Explicit arguments always win over configuration: FeatureStore.open(path,
engine=...) ignores GOLQUERY_ENGINE, and the CLI positional path ignores
GOLQUERY_GOL_PATH.

Usage:
    from golquery.config import get_golquery_config

    config = get_golquery_config()
    print(config.engine)
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENGINE_NAMES = ("geodesk", "memory")


class GolQueryConfig(BaseSettings):
    """
    Package-wide configuration loaded from environment variables.

    Attributes:
        engine: Name of the engine adapter (see golquery.engine.get_engine)
        gol_path: Default store path for the command-line runner
        sample_limit: Number of features the command-line runner prints
        debug_mode: Enable memory checkpoints in logs
    """
    model_config = SettingsConfigDict(
        env_prefix="GOLQUERY_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    engine: str = Field(
        default="geodesk",
        description="Engine adapter name"
    )
    gol_path: Optional[str] = Field(
        default=None,
        description="Default GOL store path for the command-line runner"
    )
    sample_limit: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Features printed per query by the command-line runner"
    )
    debug_mode: bool = Field(
        default=False,
        description="Log memory checkpoints around materialization"
    )

    @field_validator("engine")
    @classmethod
    def validate_engine(cls, v: str) -> str:
        """Ensure the engine name is one the registry knows."""
        name = v.strip().lower()
        if name not in ENGINE_NAMES:
            raise ValueError(f"engine must be one of {', '.join(ENGINE_NAMES)} - got '{v}'")
        return name


# Singleton instance cache
_config_cache: Optional[GolQueryConfig] = None


def get_golquery_config() -> GolQueryConfig:
    """
    Get singleton golquery configuration instance.

    Returns:
        Cached configuration instance

    Raises:
        pydantic.ValidationError: If an environment variable holds an invalid value
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = GolQueryConfig()

    return _config_cache


def reset_golquery_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config_cache
    _config_cache = None
