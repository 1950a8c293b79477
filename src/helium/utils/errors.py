"""
Error types and error boundaries for Helium.

Store operations on missing sets or widgets are silent no-ops; only the
persistence medium and invalid caller input raise.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(
    *,
    reraise: bool = False,
    default_return: Any = None,
    log_level: int = logging.ERROR,
) -> Callable[[F], F]:
    """
    Decorator that logs any exception raised by the wrapped function.

    Used around fire-and-forget calls such as reload notifications, whose
    failures must never reach the caller.

    Args:
        reraise: If True, re-raise the exception after logging
        default_return: Value to return if error occurs and not reraising
        log_level: Logging level for the error (default: ERROR)

    Returns:
        Decorated function with error handling

    Example:
        >>> @error_boundary(default_return=False)
        ... def notify():
        ...     subprocess.Popen("notifyutil -p com.helium.notification.hud.reload", shell=True)
        ...     return True
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.log(
                    log_level,
                    f"Error in {func.__name__}: {e}",
                    exc_info=True,
                    extra={"function": func.__name__, "function_module": func.__module__},
                )

                if reraise:
                    raise

                return default_return

        return wrapper  # type: ignore

    return decorator


def safe_execute(
    func: Callable[[], Any],
    *,
    on_error: Optional[Callable[[Exception], Any]] = None,
    default: Any = None,
    description: Optional[str] = None,
) -> Any:
    """
    Run a single call, logging instead of raising on failure.

    Args:
        func: Zero-argument callable to run
        on_error: Optional callback receiving the exception
        default: Value returned when func raises
        description: What the call does, for the log message
            (default: the function's name)

    Returns:
        Result of func, or default on error
    """
    try:
        return func()
    except Exception as e:
        what = description or getattr(func, "__name__", repr(func))
        logger.error(f"{what} failed: {e}", exc_info=True)
        if on_error:
            on_error(e)
        return default


class HeliumError(Exception):
    """Base exception for all Helium-specific errors."""

    pass


class PersistenceError(HeliumError):
    """
    Raised when the preferences medium cannot be written or reset.

    The message is meant to be shown to the user as-is.
    """

    pass


class ConfigurationError(HeliumError):
    """Raised when a caller supplies an invalid widget or set configuration."""

    pass


class PlatformError(HeliumError):
    """Raised when the overlay host cannot carry out a state change."""

    pass
