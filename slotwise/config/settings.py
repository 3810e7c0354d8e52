"""Root settings model for Slotwise."""

from typing import Any, ClassVar

from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from slotwise.config.models.api import APIConfig
from slotwise.config.models.jobs import JobsConfig
from slotwise.config.models.observability import ObservabilityConfig
from slotwise.config.models.providers import CalendarConfig, MessagingConfig
from slotwise.config.models.scheduler import ConflictConfig, SchedulerConfig


class FileLayerSource(PydanticBaseSettingsSource):
    """Top-level sections of the merged TOML layers.

    Unknown sections are dropped here rather than left to ``extra="ignore"``
    so a stale key in a config file never reaches validation.
    """

    def __init__(self, settings_cls: type[BaseSettings], layers: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._values = {k: v for k, v in layers.items() if k in settings_cls.model_fields}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:  # noqa: ARG002
        value = self._values.get(field_name)
        return value, field_name, field_name in self._values

    def __call__(self) -> dict[str, Any]:
        return dict(self._values)


class Settings(BaseSettings):
    """All configuration sections.

    Precedence, highest first: constructor arguments, ``SLOTWISE_*``
    environment variables (``__`` separates nested keys), TOML layers
    installed with :func:`use_file_config`, model defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SLOTWISE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    file_layers: ClassVar[dict[str, Any]] = {}

    app_name: str = Field(default="slotwise", description="Name bound into every log line")
    debug: bool = Field(default=False, description="Enable debug mode")

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    messaging: MessagingConfig = Field(default_factory=MessagingConfig)
    jobs: JobsConfig = Field(default_factory=JobsConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            FileLayerSource(settings_cls, cls.file_layers),
        )


def use_file_config(layers: dict[str, Any]) -> None:
    """Install merged TOML values for subsequently constructed Settings."""
    Settings.file_layers = dict(layers)
