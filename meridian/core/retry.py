"""Exponential-backoff retries for transient collaborator failures."""

import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

from meridian.core.logger import logger

F = TypeVar('F', bound=Callable[..., Any])

RetryPredicate = Callable[[Exception], bool]


def _always(exc: Exception) -> bool:
    return True


def with_retries(
    max_retries: int = 3,
    initial_delay: float = 2,
    retry_if: Optional[RetryPredicate] = None,
) -> Callable[[F], F]:
    """
    Decorate a call so that transient failures are retried with doubling delays.

    Args:
        max_retries (int): Extra attempts after the first call; ``0`` disables retrying.
        initial_delay (float): Seconds to wait before the first retry.
        retry_if (Callable): Decides whether a raised exception is worth another
                             attempt. Exceptions it rejects propagate at once.
                             Every exception is retried when omitted.

    Returns:
        Callable: The decorated function.
    """
    should_retry = retry_if or _always

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            delay = initial_delay
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not should_retry(e):
                        logger.error(f"'{func.__name__}' failed with a permanent error: {e}")
                        raise
                    if attempt >= max_retries:
                        logger.error(f"'{func.__name__}' still failing after {attempt} retries: {e}")
                        raise
                    attempt += 1
                    logger.warning(
                        f"'{func.__name__}' transient failure ({e}); "
                        f"retry {attempt}/{max_retries} in {delay}s"
                    )
                    time.sleep(delay)
                    delay *= 2
        return cast(F, wrapper)
    return decorator
