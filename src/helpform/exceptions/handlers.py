"""
Centralized error handling utilities.

Layers translate errors for the layer above:

```
USER LAYER (CLI/TUI)         formats user_message and recovery_hint
        ^ HelpFormError
APPLICATION LAYER (core)     converts low-level errors, adds hints
        ^ OSError, ValidationError, ...
LOW LEVEL (subprocess, I/O)  raises standard Python exceptions
```

| Pattern | Code |
|---------|------|
| Show error to user, continue | `@handle_errors(operation_name="run", user_notification=self.notify, re_raise=False)` |
| Log and re-raise | `@handle_errors(operation_name="load config")` |
| Critical section with auto-logging | `with ErrorContext("fetch root help"): ...` |
"""

import errno
import inspect
import logging
from functools import wraps
from typing import Callable, Optional, TypeVar

from .base import HelpFormError
from .config import ConfigFileInvalidError, ConfigValidationError
from .session import SpawnError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def handle_errors(
    *,
    operation_name: str,
    user_notification: Optional[Callable[[str], None]] = None,
    fallback_value: Optional[T] = None,
    re_raise: bool = True,
    log_level: int = logging.ERROR
) -> Callable:
    """
    Decorator for consistent error handling.

    Args:
        operation_name: Name of the operation for logging (e.g., "run tool")
        user_notification: Optional callback to notify user (e.g., self.notify)
        fallback_value: Value to return if error occurs and re_raise=False
        re_raise: Whether to re-raise the exception after handling
        log_level: Logging level for the error (default: ERROR)

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def handle(e: Exception) -> T:
            if isinstance(e, HelpFormError):
                logger.log(log_level, f"Failed to {operation_name}: {e.technical_message}")
                if user_notification:
                    user_notification(e.get_full_message())
            else:
                logger.log(
                    log_level,
                    f"Unexpected error during {operation_name}: {e}",
                    exc_info=True
                )
                if user_notification:
                    user_notification(f"Error: {e}")

            if re_raise:
                raise e
            return fallback_value

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs) -> T:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    return handle(e)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return handle(e)

        return wrapper
    return decorator


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Example:
        ```python
        with ErrorContext("fetch root help"):
            text = source.fetch([])
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
            re_raise: Whether to re-raise exceptions
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[Exception] = None

    def __enter__(self):
        """Enter the context."""
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Exit the context and handle any exceptions.

        Returns:
            True if exception should be suppressed, False otherwise
        """
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val

        if isinstance(exc_val, HelpFormError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)

        return not self.re_raise


def wrap_pydantic_error(error: Exception, file_path: str) -> HelpFormError:
    """
    Convert Pydantic validation errors to helpform exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get('loc', ('unknown',)))
            return ConfigValidationError(
                field=field,
                value=first_error.get('input', None),
                error_msg=first_error.get('msg', 'validation failed'),
                file_path=file_path
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ('unknown',)))
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=f"{len(errors)} validation errors:\n" + "\n".join(error_lines),
                file_path=file_path
            )

    return ConfigValidationError(field="unknown", value=None, error_msg=error_msg, file_path=file_path)


def wrap_spawn_error(error: OSError, executable: str) -> SpawnError:
    """
    Convert an OSError raised while spawning a process into a SpawnError.

    Args:
        error: The original exception from the OS
        executable: Program that was being started

    Returns:
        A SpawnError with a recovery hint matching the failure
    """
    if isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
        return SpawnError(
            executable,
            "executable not found",
            recovery_hint="Check the program name or give a full path",
        )
    if isinstance(error, PermissionError) or error.errno == errno.EACCES:
        return SpawnError(
            executable,
            "permission denied",
            recovery_hint=f"Make sure '{executable}' is executable (chmod +x)",
        )
    return SpawnError(executable, error.strerror or str(error))


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, HelpFormError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
