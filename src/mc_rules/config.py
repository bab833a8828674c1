"""Runtime configuration for the rule tools."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mc_rules.compat import Capability


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MC_RULES_", env_file=".env", extra="ignore")

    app_name: str = "mc-rules"
    log_level: str = "WARNING"
    capabilities: list[Capability] = Field(
        default_factory=list,
        description="Optional integrations to treat as installed when a snapshot does not say.",
    )
    random_seed: int | None = Field(default=None, description="Seed for the shared random source.")


settings = Settings()
