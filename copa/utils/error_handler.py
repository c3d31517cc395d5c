"""Shared error handling helpers.

Optional collaborators (git file listing, the global config file) have a
documented fallback when they fail. These decorators log the failure through
structlog and hand back that fallback so call sites stay linear.
"""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class ErrorHandler:
    """Logging patterns shared by the decorators below"""

    @staticmethod
    def log_and_return_default(
        operation_name: str, exception: Exception, default_value: T, **kwargs: Any
    ) -> T:
        logger.warning(f"Failed to {operation_name}", error=str(exception), **kwargs)
        return default_value


def handle_errors(operation_name: str, default_return: Any = None, **log_kwargs: Any):
    """
    Decorator that logs exceptions raised by a sync or async function.

    Args:
        operation_name: human readable name used in the log line
        default_return: value returned after a failure
        **log_kwargs: extra fields bound to the log line
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return ErrorHandler.log_and_return_default(
                    operation_name, e, default_return, **log_kwargs
                )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return ErrorHandler.log_and_return_default(
                    operation_name, e, default_return, **log_kwargs
                )

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return wrapper

    return decorator


def safe_operation(operation_name: str, **log_kwargs: Any):
    """Return ``None`` when the wrapped call fails"""
    return handle_errors(operation_name, default_return=None, **log_kwargs)


def safe_with_default(operation_name: str, default_value: Any, **log_kwargs: Any):
    """Return ``default_value`` when the wrapped call fails"""
    return handle_errors(operation_name, default_return=default_value, **log_kwargs)
