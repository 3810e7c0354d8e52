"""Job configuration models."""

from pydantic import BaseModel, Field, SecretStr


class HatchetConfig(BaseModel):
    """Hatchet background job orchestration configuration.

    Hatchet can run the scheduler tick on a cron and the conflict timeouts as
    durable jobs instead of the in-process timer table.
    """

    enabled: bool = Field(default=False, description="Enable Hatchet integration")
    server_url: str = Field(
        default="http://localhost:7077",
        description="Hatchet engine server URL",
    )
    api_key: SecretStr | None = Field(default=None, description="Hatchet API key")
    cron_schedule_tasks: str = Field(
        default="* * * * *",
        description="Cron schedule for the scheduler tick workflow",
    )
    retry_max_attempts: int = Field(default=3, ge=1, le=10)


class JobsConfig(BaseModel):
    """Top-level jobs configuration."""

    hatchet: HatchetConfig = Field(default_factory=HatchetConfig)
