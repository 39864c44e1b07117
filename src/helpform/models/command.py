"""Command model recovered from help text."""

from pydantic import BaseModel, Field, model_validator

from .enums import ValueKind


class Option(BaseModel):
    """A flag-introduced option such as ``-c, --count <N>``."""

    long_flag: str | None = Field(default=None, description="Long form, e.g. --count")
    short_flag: str | None = Field(default=None, description="Short form, e.g. -c")
    value_kind: ValueKind = Field(default=ValueKind.FLAG, description="Kind of value accepted")
    value_name: str | None = Field(default=None, description="Placeholder name, e.g. N")
    default: str | None = Field(default=None, description="Default reported by the tool")
    choices: list[str] = Field(default_factory=list, description="Allowed values for enums")
    required: bool = Field(default=False, description="Must be supplied before running")
    help_text: str = Field(default="", description="One-line description")

    @model_validator(mode="after")
    def _check_invariants(self) -> "Option":
        if not self.long_flag and not self.short_flag:
            raise ValueError("option needs a long or a short flag")
        if self.value_kind == ValueKind.FLAG and (self.default is not None or self.value_name):
            raise ValueError(f"flag option {self.key} cannot carry a value")
        if self.value_kind == ValueKind.ENUM and not self.choices:
            raise ValueError(f"enum option {self.key} needs at least one choice")
        return self

    @property
    def key(self) -> str:
        """Flag used on the command line (long form preferred)."""
        return self.long_flag or self.short_flag  # type: ignore[return-value]

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``-c, --count <N>``."""
        flags = ", ".join(f for f in (self.short_flag, self.long_flag) if f)
        if self.value_name:
            return f"{flags} <{self.value_name}>"
        return flags


class Positional(BaseModel):
    """A positional argument recovered from the usage line."""

    name: str = Field(description="Placeholder name, e.g. NAME")
    value_kind: ValueKind = Field(default=ValueKind.STRING, description="Kind of value accepted")
    required: bool = Field(default=True, description="Must be supplied before running")
    help_text: str = Field(default="", description="One-line description")
    position_index: int = Field(ge=0, description="Order in the final invocation")
    default: str | None = Field(default=None, description="Default reported by the tool")
    choices: list[str] = Field(default_factory=list, description="Allowed values for enums")

    @model_validator(mode="after")
    def _check_invariants(self) -> "Positional":
        if self.value_kind == ValueKind.FLAG:
            raise ValueError(f"positional {self.name} cannot be a flag")
        if self.value_kind == ValueKind.ENUM and not self.choices:
            raise ValueError(f"enum positional {self.name} needs at least one choice")
        return self

    @property
    def key(self) -> str:
        """Identifier of the positional."""
        return self.name

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``<NAME>``."""
        return f"<{self.name}>" if self.required else f"[{self.name}]"


class Command(BaseModel):
    """
    A command or subcommand node.

    Nodes live in a CommandCatalog arena and refer to their children by id,
    so a subcommand can be allocated as an unresolved placeholder and filled
    in later when its own help text is fetched.
    """

    id: int = Field(ge=0, description="Arena identifier")
    name: str = Field(description="Command name as typed on the command line")
    description: str | None = Field(default=None, description="About text")
    options: list[Option] = Field(default_factory=list)
    positionals: list[Positional] = Field(default_factory=list)
    subcommands: dict[str, int] = Field(
        default_factory=dict, description="Subcommand name -> child command id"
    )
    subcommand_required: bool = Field(
        default=False, description="A subcommand must be chosen before invoking"
    )
    usage: str | None = Field(default=None, description="Raw usage line")
    resolved: bool = Field(default=False, description="Help text has been parsed")
    parse_warnings: list[str] = Field(
        default_factory=list, description="Help lines dropped while parsing"
    )

    @property
    def is_branch(self) -> bool:
        """True when the command cannot be invoked without a subcommand."""
        return bool(self.subcommands) and self.subcommand_required

    @property
    def has_subcommands(self) -> bool:
        """Check if the command declares any subcommands."""
        return bool(self.subcommands)

    def get_option(self, flag: str) -> Option | None:
        """Find an option by its long or short flag."""
        for option in self.options:
            if flag in (option.long_flag, option.short_flag):
                return option
        return None

    def get_positional(self, name: str) -> Positional | None:
        """Find a positional by name."""
        for positional in self.positionals:
            if positional.name == name:
                return positional
        return None
