"""Decorators for TUI components."""

import inspect
from functools import wraps

from helpform.exceptions import handle_errors as _handle_errors


def require_state(*states):
    """Decorator to restrict an action to specific session state(s).

    Args:
        *states: One or more SessionState values

    If the session is not in one of the specified states, the decorated
    method returns immediately without executing.

    Example:
        @require_state(SessionState.EDITING)
        def action_focus_next(self):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                if self.controller.state not in states:
                    return
                return await func(self, *args, **kwargs)
            return async_wrapper

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            if self.controller.state not in states:
                return
            return func(self, *args, **kwargs)
        return wrapper
    return decorator


def handle_action_errors(operation_name: str):
    """
    Decorator for TUI action methods that wraps the centralized error handler.

    This is a TUI-specific wrapper around the centralized error handler that:
    - Uses self.notify for user notifications
    - Doesn't re-raise exceptions (keeps TUI responsive)
    - Returns None on error

    Works for plain and async methods.

    Example:
        @handle_action_errors("open subcommand")
        def on_option_list_option_selected(self, event):
            ...
    """
    def decorator(func):
        # Returns a coroutine for async methods; Textual awaits it
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            handler = _handle_errors(
                operation_name=operation_name,
                user_notification=lambda msg: self.notify(msg, severity="error", timeout=5),
                re_raise=False,
                fallback_value=None
            )
            wrapped = handler(func)
            return wrapped(self, *args, **kwargs)
        return wrapper
    return decorator
