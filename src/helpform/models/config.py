"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from helpform.utils.persistence import PydanticPersistence

DEFAULT_CONFIG_PATH = Path.home() / ".helpform" / "config.json"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Help retrieval
    help_flag: str = Field(default="--help", description="Flag used to request help text")
    help_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a help command to finish"
    )

    # Form construction
    ignored_flags: list[str] = Field(
        default_factory=lambda: ["--help", "-h", "--version", "-V"],
        description="Options that never become form fields",
    )
    hide_help_subcommand: bool = Field(
        default=True, description="Hide the 'help' subcommand generated by clap"
    )
    case_insensitive_choices: bool = Field(
        default=False, description="Accept enum values regardless of case"
    )
    remember_values: bool = Field(
        default=False,
        description="Restore a subcommand's previous values when it is re-entered",
    )

    # Execution
    working_directory: Path | None = Field(
        default=None, description="Directory to run the tool in (None = current directory)"
    )
    extra_env: dict[str, str] = Field(
        default_factory=dict, description="Environment variables added to the tool's environment"
    )

    @field_serializer("working_directory")
    def serialize_path(self, path: Path | None) -> str | None:
        """Serialize Path to string."""
        return str(path) if path is not None else None

    @property
    def ignored_subcommands(self) -> list[str]:
        """Subcommand names that never appear in the subcommand list."""
        return ["help"] if self.hide_help_subcommand else []

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses default location
                  (~/.helpform/config.json).

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return PydanticPersistence.load_json_or_default(path or DEFAULT_CONFIG_PATH, cls)
