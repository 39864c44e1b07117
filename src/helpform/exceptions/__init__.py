"""
Custom exception hierarchy for helpform.

```
HelpFormError (base)
├── HelpFetchError
├── FieldValidationError
│   ├── NotANumberError
│   ├── NotAChoiceError
│   ├── MissingRequiredError
│   └── SubcommandRequiredError
├── CommandNotFoundError
├── SpawnError
├── SessionStateError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Parse problems are not exceptions: unrecognized help lines are dropped and
recorded on the resulting Command. Non-zero exit codes are a status, not an
error.
"""

from .base import HelpFormError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorContext,
    format_error_for_display,
    handle_errors,
    wrap_pydantic_error,
    wrap_spawn_error,
)
from .parsing import HelpFetchError
from .session import CommandNotFoundError, SessionStateError, SpawnError
from .validation import (
    FieldValidationError,
    MissingRequiredError,
    NotAChoiceError,
    NotANumberError,
    SubcommandRequiredError,
)

__all__ = [
    "CommandNotFoundError",
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "ErrorContext",
    "FieldValidationError",
    "HelpFetchError",
    "HelpFormError",
    "MissingRequiredError",
    "NotAChoiceError",
    "NotANumberError",
    "SessionStateError",
    "SpawnError",
    "SubcommandRequiredError",
    "format_error_for_display",
    "handle_errors",
    "wrap_pydantic_error",
    "wrap_spawn_error",
]
