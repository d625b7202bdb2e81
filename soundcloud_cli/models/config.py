"""
Pydantic models for application configuration.
Provides robust validation for all settings.
"""

import string

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_OUTPUT_TEMPLATE = "{artist} - {title}.{ext}"
TEMPLATE_PLACEHOLDERS = frozenset({"artist", "title", "track_id", "ext"})


class ClientConfig(BaseModel):
    """
    Immutable snapshot of everything an API request needs.

    The client_id is never mutated in place. A refreshed id produces a new
    snapshot via ``with_client_id`` which the API client swaps in whole.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    max_workers: int = 8
    max_attempts: int = 3
    retry_delay: float = 0.5

    def with_client_id(self, client_id: str) -> "ClientConfig":
        return self.model_copy(update={"client_id": client_id})


class DownloadConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # API
    client_id: str = ""
    max_attempts: int = 3
    retry_delay: float = 0.5

    # Download Settings
    max_workers: int = 8
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    no_m3u: bool = False
    offset: int = 0
    limit: int = 0

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)
    source_urls: list[str] = Field(default_factory=list, repr=False)
    output_dir: str = Field(default=".", repr=False)

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Max attempts must be between 1 and 10.")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Retry delay cannot be negative.")
        return v

    @field_validator("offset", "limit")
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Offset and limit cannot be negative.")
        return v

    @field_validator("output_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        """Validates the output path template."""
        if not v:
            raise ValueError("Output template cannot be empty.")
        if ".." in v or v.startswith(("/", "\\")):
            raise ValueError(
                "Output template cannot contain relative '..' or absolute paths."
            )
        fields = {
            field for _, field, _, _ in string.Formatter().parse(v) if field is not None
        }
        unknown = fields - TEMPLATE_PLACEHOLDERS
        if unknown:
            raise ValueError(
                f"Unknown placeholders in output template: {', '.join(sorted(unknown))}"
            )
        if not fields & {"title", "track_id"}:
            raise ValueError(
                "Output template must contain at least {title} or {track_id}."
            )
        if "ext" not in fields:
            raise ValueError("Output template must contain {ext}.")
        return v

    def client_config(self) -> ClientConfig:
        """Builds the immutable API snapshot from the current settings."""
        return ClientConfig(
            client_id=self.client_id,
            max_workers=self.max_workers,
            max_attempts=self.max_attempts,
            retry_delay=self.retry_delay,
        )

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "source_urls", "output_dir", "offset", "limit"}
        return {key for key in cls.model_fields if key not in internal_fields}
