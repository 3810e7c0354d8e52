"""Calendar and messaging collaborator configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr


class CalendarConfig(BaseModel):
    """External calendar collaborator configuration."""

    provider: Literal["memory", "google"] = Field(
        default="memory",
        description="Calendar backend",
    )
    base_url: str = Field(
        default="https://www.googleapis.com/calendar/v3",
        description="Google Calendar REST base URL",
    )
    calendar_id: str = Field(default="primary", description="Target calendar")
    timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout")
    reconnect_url: str = Field(
        default="http://localhost:8000/settings?reconnectCalendar=true",
        description="Link sent to users whose calendar authorization expired",
    )


class MessagingConfig(BaseModel):
    """Chat/notification collaborator configuration."""

    provider: Literal["memory", "slack"] = Field(
        default="memory",
        description="Messaging backend",
    )
    base_url: str = Field(default="https://slack.com/api", description="Slack Web API base URL")
    bot_token: SecretStr | None = Field(default=None, description="Slack bot token")
    signing_secret: SecretStr | None = Field(
        default=None,
        description="Slack signing secret for interactive callbacks",
    )
    timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout")
