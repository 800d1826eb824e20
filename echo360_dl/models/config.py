"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

SUPPORTED_CONTAINERS = ("mp4", "mkv", "mov")
DISCOVERY_MODES = ("network", "embedded")


class DownloadConfig(BaseModel):
    """A validated configuration model for the application."""

    # Input & Output
    output_dir: str = "Output"
    urls_file: str = "urls.txt"
    container_ext: str = "mp4"

    # Discovery
    discovery: str = "network"
    discovery_timeout: float = 30.0
    quiet_period: float = 3.0
    headless: bool = True

    # Network & Muxing
    connect_timeout: float = 15.0
    read_timeout: float = 90.0
    mux_timeout: float = 600.0
    ffmpeg_path: str = ""
    cookies_file: str = ""

    # Batch Behaviour
    overwrite: bool = False
    fail_fast: bool = False

    # Internal field not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("container_ext")
    @classmethod
    def validate_container(cls, v: str) -> str:
        """Normalizes the extension and ensures ffmpeg can stream-copy into it."""
        v = v.lower().lstrip(".")
        if v not in SUPPORTED_CONTAINERS:
            raise ValueError(
                f"Container must be one of {', '.join(SUPPORTED_CONTAINERS)}."
            )
        return v

    @field_validator("discovery")
    @classmethod
    def validate_discovery(cls, v: str) -> str:
        v = v.lower()
        if v not in DISCOVERY_MODES:
            raise ValueError("Discovery must be either 'network' or 'embedded'.")
        return v

    @field_validator(
        "discovery_timeout", "quiet_period", "connect_timeout", "read_timeout", "mux_timeout"
    )
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Every wait must be bounded."""
        if v <= 0:
            raise ValueError("Timeouts must be positive numbers of seconds.")
        return v

    @field_validator("output_dir", "urls_file")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Path settings cannot be empty.")
        return v

    @model_validator(mode="after")
    def validate_discovery_windows(self) -> "DownloadConfig":
        """The quiet period has to fit inside the discovery window."""
        if self.quiet_period > self.discovery_timeout:
            raise ValueError(
                "quiet_period cannot be longer than discovery_timeout."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
