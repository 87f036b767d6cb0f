from functools import wraps
from typing import Any, Awaitable, Callable, Tuple, Type, TypeVar

from google.api_core.exceptions import GoogleAPIError  # type: ignore
from loguru import logger
from openai import APIError

T = TypeVar("T")

PROVIDER_ERRORS: Tuple[Type[BaseException], ...] = (APIError, GoogleAPIError)


def log_provider_errors(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Decorator for async facade calls: log provider failures, then re-raise them."""

    @wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except PROVIDER_ERRORS as exc:
            logger.error("{} failed with provider error {}: {}", fn.__name__, type(exc).__name__, exc)
            raise
    return wrapper
