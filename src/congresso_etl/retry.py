"""
Bounded retry for asynchronous operations.

Failure classes:
  - NotFoundError (404)  → never retried; propagates on first sight.
  - ApiError 400         → malformed request; not retried.
  - anything else        → retried until the budget runs out.

Once the budget is exhausted the last exception propagates unmodified.

Usage:
    policy = RetryPolicy(max_attempts=3, delay=2.0)
    data = await policy.run(lambda: fetch_page(url), f"GET {url}")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from .errors import ApiError, NotFoundError

T = TypeVar("T")

BAD_REQUEST = 400

_default_logger = logging.getLogger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Return False for failures that another attempt cannot fix."""
    if isinstance(exc, NotFoundError):
        return False
    if isinstance(exc, ApiError) and exc.status_code == BAD_REQUEST:
        return False
    return True


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    delay: float,
    label: str,
    *,
    backoff: float = 1.0,
    logger: logging.Logger | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run ``operation`` up to ``max_attempts`` times.

    Parameters
    ----------
    operation : callable
        Zero-argument callable returning a fresh awaitable per attempt.
    max_attempts : int
        Retry budget. ``<= 0`` degrades to a single uninstrumented attempt.
    delay : float
        Seconds to wait before the second attempt.
    label : str
        Human-readable operation name used in log lines.
    backoff : float
        Multiplier applied to ``delay`` after each failed attempt
        (1.0 keeps the delay fixed).
    sleep : callable
        Awaitable sleep function; injectable for tests.
    """
    if max_attempts <= 0:
        return await operation()

    log = logger or _default_logger
    wait = delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc):
                log.warning("[%s] %s, não tentando novamente.", label, _describe(exc))
                raise
            if attempt >= max_attempts:
                log.error("[%s] Todas as %d tentativas falharam: %s", label, max_attempts, exc)
                raise
            log.warning(
                "[%s] Tentativa %d/%d falhou (%s); %d restante(s), nova tentativa em %.1fs",
                label, attempt, max_attempts, exc, max_attempts - attempt, wait,
            )
            await sleep(wait)
            wait *= backoff

    raise AssertionError("unreachable")


def _describe(exc: BaseException) -> str:
    if isinstance(exc, NotFoundError):
        return "Erro 404 (Not Found)"
    if isinstance(exc, ApiError):
        return f"Erro {exc.status_code}"
    return type(exc).__name__


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget shared by every request in a run."""

    max_attempts: int = 3
    delay: float = 2.0
    backoff: float = 1.0

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str,
        *,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> T:
        return await with_retry(
            operation,
            self.max_attempts,
            self.delay,
            label,
            backoff=self.backoff,
            logger=logger,
            sleep=sleep,
        )
