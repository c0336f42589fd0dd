"""Airlock settings loaded from the environment."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from airlock.core.config.enums import AbsentRelationPolicy, Environment


class Settings(BaseSettings):
    """Process-wide settings.

    Env vars use the AIRLOCK_ prefix:
        AIRLOCK_ENVIRONMENT=prd
        AIRLOCK_FORCE_LOAD_INVISIBLE_RELATIONS=true
        AIRLOCK_ABSENT_RELATION_POLICY=null  # keep hidden single relations as null
    """

    model_config = SettingsConfigDict(
        env_prefix="AIRLOCK_",
        case_sensitive=False,
        extra="ignore",
    )

    ENVIRONMENT: Environment = Field(Environment.LOCAL, description="Deployment environment")
    LOG_LEVEL: str = Field("INFO", description="Root log level for airlock loggers")

    FORCE_LOAD_INVISIBLE_RELATIONS: bool = Field(
        False,
        description="Load every requested relation even when it will not be serialized",
    )
    SKIP_UNSAVED_RECORDS: bool = Field(
        False, description="Serialize records that were never persisted as ABSENT"
    )
    ABSENT_RELATION_POLICY: AbsentRelationPolicy = Field(
        AbsentRelationPolicy.OMIT,
        description=(
            "Rendering of a single relation whose record resolves ABSENT: omit drops "
            "the key; null keeps it, e.g. a comment whose parent is hidden renders "
            "\"parent\": null"
        ),
    )

    @property
    def is_production(self) -> bool:
        """Whether development-only diagnostics must be suppressed."""
        return self.ENVIRONMENT == Environment.PRD

    @property
    def is_local(self) -> bool:
        """Whether logs should be human-readable rather than JSON."""
        return self.ENVIRONMENT in (Environment.LOCAL, Environment.TEST)
