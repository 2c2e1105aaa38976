import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from inliner.images.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.inliner.ai"
DEFAULT_IMAGE_URL = "https://img.inliner.ai"

_ENV_VARS = {
    "api_key": "INLINER_API_KEY",
    "api_url": "INLINER_API_URL",
    "image_url": "INLINER_IMAGE_URL",
    "default_project": "INLINER_DEFAULT_PROJECT",
}


class InlinerConfig(BaseModel):
    """Process-wide settings shared by the client, poller and tools.

    The API key is fixed for the lifetime of the process and never
    changes once a config is built.
    """

    api_key: str
    api_url: str = DEFAULT_API_URL
    image_url: str = DEFAULT_IMAGE_URL
    default_project: str | None = None
    poll_attempts: int = Field(60, ge=1)
    poll_interval: float = Field(3.0, ge=0)
    request_timeout: float = Field(60.0, gt=0)

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(_describe(e)) from e

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(
                "INLINER_API_KEY environment variable or --api-key option required"
            )
        return v

    @field_validator("api_url", "image_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("default_project")
    @classmethod
    def blank_project_is_none(cls, v: str | None) -> str | None:
        return v or None

    @classmethod
    def from_env(cls, **overrides: Any) -> "InlinerConfig":
        """Build a config from ``INLINER_*`` environment variables.

        Keyword overrides that are not ``None`` take precedence over the
        environment.
        """
        data: dict[str, Any] = {}
        for name, var in _ENV_VARS.items():
            value = os.environ.get(var)
            if value:
                data[name] = value
        data.update({k: v for k, v in overrides.items() if v is not None})
        data.setdefault("api_key", "")
        return cls(**data)


def _describe(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"])
        messages.append(f"{field}: {err['msg'].removeprefix('Value error, ')}")
    return "Invalid configuration: " + "; ".join(messages)
